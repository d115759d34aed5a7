"""Authentication endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Request, Response, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from api.responses import ApiResponse, envelope, first_validation_message
from core import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationFailedError,
    hash_password,
    needs_rehash,
)
from db.errors import is_unique_violation
from models import User
from services import (
    AVATAR_PREFIX,
    COVER_IMAGE_PREFIX,
    MediaUploadError,
    UploadedObject,
    UploadTooLargeError,
    delete_object,
    upload_image,
)
from services.auth import (
    REFRESH_COOKIE,
    clear_token_cookies,
    find_user_by_username_or_email,
    invalidate_refresh_token,
    issue_token_pair,
    normalize_email,
    password_matches,
    registration_conflict_exists,
    rotate_refresh_token,
    set_token_cookies,
)

from .schemas import (
    EmptyData,
    LoginData,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenData,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "User with email or username already exists"


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


async def _store_upload(upload: UploadFile, *, prefix: str) -> UploadedObject:
    try:
        return await upload_image(upload, prefix=prefix)
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=str(exc),
        ) from exc


async def _discard_objects(objects: list[UploadedObject]) -> None:
    for uploaded in objects:
        try:
            await asyncio.to_thread(delete_object, uploaded.object_key)
        except Exception as cleanup_error:
            logger.warning(
                "Failed to cleanup uploaded media after registration failure",
                extra={"object_key": uploaded.object_key},
                exc_info=cleanup_error,
            )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UserResponse],
)
async def register(
    full_name: Annotated[str | None, Form(alias="fullName")] = None,
    email: Annotated[str | None, Form()] = None,
    username: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    if any(_is_blank(value) for value in (full_name, email, username, password)):
        raise ValidationFailedError("All fields are required")

    try:
        payload = RegisterRequest(
            full_name=full_name,
            email=email,
            username=username,
            password=password,
        )
    except ValidationError as exc:
        raise ValidationFailedError(first_validation_message(exc.errors())) from exc

    normalized_email = normalize_email(str(payload.email))
    if await registration_conflict_exists(
        session,
        username=payload.username,
        normalized_email=normalized_email,
    ):
        raise ConflictError(CONFLICT_MESSAGE)

    if avatar is None:
        raise ValidationFailedError("Avatar file is required")
    try:
        avatar_object = await _store_upload(avatar, prefix=AVATAR_PREFIX)
    except (ValueError, MediaUploadError) as exc:
        logger.warning("Avatar upload failed during registration", exc_info=exc)
        raise ValidationFailedError("Avatar file is required") from exc
    uploaded = [avatar_object]

    cover_object: UploadedObject | None = None
    if cover_image is not None:
        try:
            cover_object = await _store_upload(cover_image, prefix=COVER_IMAGE_PREFIX)
        except MediaUploadError as exc:
            logger.warning("Cover image upload failed; registering without one", exc_info=exc)
        except ValueError as exc:
            await _discard_objects(uploaded)
            raise ValidationFailedError(str(exc)) from exc
        except HTTPException:
            await _discard_objects(uploaded)
            raise
    if cover_object is not None:
        uploaded.append(cover_object)

    user = User(
        username=payload.username,
        email=normalized_email,
        full_name=payload.full_name,
        password_hash=hash_password(payload.password),
        avatar_url=avatar_object.url,
        avatar_key=avatar_object.object_key,
        cover_image_url=cover_object.url if cover_object else "",
        cover_image_key=cover_object.object_key if cover_object else None,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        await _discard_objects(uploaded)
        if is_unique_violation(exc):
            raise ConflictError(CONFLICT_MESSAGE) from exc
        raise
    await session.refresh(user)

    logger.info("Registered user", extra={"user_id": user.id})
    return envelope(
        UserResponse.model_validate(user),
        "User registered successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login", response_model=ApiResponse[LoginData])
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[LoginData]:
    if _is_blank(payload.username) and _is_blank(payload.email):
        raise ValidationFailedError("username or email is required")

    user = await find_user_by_username_or_email(
        session,
        username=payload.username,
        email=payload.email,
    )
    if user is None:
        raise NotFoundError("User does not exist")

    if not password_matches(user, payload.password):
        raise UnauthenticatedError("Invalid user credentials")

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(payload.password)
        session.add(user)
        await session.commit()

    pair = await issue_token_pair(session, user.id)
    await session.refresh(user)

    set_token_cookies(response, pair.access_token, pair.refresh_token)
    return envelope(
        LoginData(
            user=UserResponse.model_validate(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        ),
        "User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[EmptyData])
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[EmptyData]:
    await invalidate_refresh_token(session, current_user.id)
    clear_token_cookies(response)
    return envelope(EmptyData(), "User logged out")


@router.post("/refresh", response_model=ApiResponse[TokenData])
async def refresh_tokens(
    request: Request,
    response: Response,
    payload: Annotated[RefreshRequest | None, Body()] = None,
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[TokenData]:
    incoming = request.cookies.get(REFRESH_COOKIE)
    if not incoming and payload is not None:
        incoming = payload.refresh_token

    pair = await rotate_refresh_token(session, incoming)

    set_token_cookies(response, pair.access_token, pair.refresh_token)
    return envelope(
        TokenData(access_token=pair.access_token, refresh_token=pair.refresh_token),
        "Access token refreshed",
    )
