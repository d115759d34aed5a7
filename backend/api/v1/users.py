"""Current-user account endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from api.responses import ApiResponse, envelope
from core import (
    ConflictError,
    InfrastructureError,
    ValidationFailedError,
    hash_password,
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
from services.auth import email_taken_by_other, normalize_email, password_matches

from .schemas import ChangePasswordRequest, EmptyData, UpdateAccountRequest, UserResponse

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


async def _upload_replacement(upload: UploadFile, *, prefix: str, label: str) -> UploadedObject:
    try:
        return await upload_image(upload, prefix=prefix)
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except ValueError as exc:
        raise ValidationFailedError(str(exc)) from exc
    except MediaUploadError as exc:
        logger.warning("%s upload failed", label, exc_info=exc)
        raise ValidationFailedError(f"Error while uploading {label.lower()}") from exc


async def _delete_quietly(object_key: str | None, *, reason: str) -> None:
    if object_key is None:
        return
    try:
        await asyncio.to_thread(delete_object, object_key)
    except Exception as cleanup_error:
        logger.warning(
            reason,
            extra={"object_key": object_key},
            exc_info=cleanup_error,
        )


async def _commit_user(session: AsyncSession, user: User, *, detail: str) -> None:
    session.add(user)
    try:
        await session.commit()
    except Exception as exc:
        await session.rollback()
        raise InfrastructureError(detail) from exc
    await session.refresh(user)


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_me(current_user: User = Depends(get_current_user)) -> ApiResponse[UserResponse]:
    return envelope(UserResponse.model_validate(current_user), "Current user fetched successfully")


@router.post("/me/password", response_model=ApiResponse[EmptyData])
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[EmptyData]:
    if not password_matches(current_user, payload.old_password):
        raise ValidationFailedError("Invalid old password")

    current_user.password_hash = hash_password(payload.new_password)
    await _commit_user(session, current_user, detail="Failed to change password")
    return envelope(EmptyData(), "Password changed successfully")


@router.patch("/me", response_model=ApiResponse[UserResponse])
async def update_account(
    payload: UpdateAccountRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    """Update the authenticated user's full name and email."""
    if any(not value or not value.strip() for value in (payload.full_name, payload.email)):
        raise ValidationFailedError("All fields are required")

    try:
        normalized_email = normalize_email(str(_email_adapter.validate_python((payload.email or "").strip())))
    except ValidationError as exc:
        raise ValidationFailedError("email: value is not a valid email address") from exc

    if await email_taken_by_other(session, normalized_email=normalized_email, user_id=current_user.id):
        raise ConflictError("Email is already in use")

    current_user.full_name = (payload.full_name or "").strip()
    current_user.email = normalized_email
    session.add(current_user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise ConflictError("Email is already in use") from exc
        raise InfrastructureError("Failed to update account details") from exc
    await session.refresh(current_user)
    return envelope(UserResponse.model_validate(current_user), "Account details updated successfully")


@router.patch("/me/avatar", response_model=ApiResponse[UserResponse])
async def update_avatar(
    avatar: Annotated[UploadFile | None, File()] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    if avatar is None:
        raise ValidationFailedError("Avatar file is missing")

    uploaded = await _upload_replacement(avatar, prefix=AVATAR_PREFIX, label="Avatar")
    previous_key = current_user.avatar_key
    current_user.avatar_url = uploaded.url
    current_user.avatar_key = uploaded.object_key
    try:
        await _commit_user(session, current_user, detail="Failed to update avatar")
    except InfrastructureError:
        await _delete_quietly(
            uploaded.object_key,
            reason="Failed to cleanup uploaded avatar after commit failure",
        )
        raise

    if previous_key != uploaded.object_key:
        await _delete_quietly(
            previous_key,
            reason="Failed to cleanup replaced avatar object",
        )
    return envelope(UserResponse.model_validate(current_user), "Avatar image updated successfully")


@router.patch("/me/cover-image", response_model=ApiResponse[UserResponse])
async def update_cover_image(
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    if cover_image is None:
        raise ValidationFailedError("Cover image file is missing")

    uploaded = await _upload_replacement(cover_image, prefix=COVER_IMAGE_PREFIX, label="Cover image")
    previous_key = current_user.cover_image_key
    current_user.cover_image_url = uploaded.url
    current_user.cover_image_key = uploaded.object_key
    try:
        await _commit_user(session, current_user, detail="Failed to update cover image")
    except InfrastructureError:
        await _delete_quietly(
            uploaded.object_key,
            reason="Failed to cleanup uploaded cover image after commit failure",
        )
        raise

    if previous_key != uploaded.object_key:
        await _delete_quietly(
            previous_key,
            reason="Failed to cleanup replaced cover image object",
        )
    return envelope(UserResponse.model_validate(current_user), "Cover image updated successfully")
