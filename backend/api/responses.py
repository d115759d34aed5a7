"""Uniform JSON envelope for API responses."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from core import ApiError

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    status: int
    data: DataT
    message: str = "Success"


class ErrorResponse(BaseModel):
    status: int
    message: str


def envelope(
    data: DataT,
    message: str = "Success",
    *,
    status_code: int = status.HTTP_200_OK,
) -> ApiResponse[DataT]:
    return ApiResponse(status=status_code, data=data, message=message)


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    payload = ErrorResponse(status=status_code, message=message)
    return JSONResponse(status_code=status_code, content=payload.model_dump(), headers=headers)


def first_validation_message(errors: Sequence[Mapping[str, Any]]) -> str:
    """Render the first validation error as ``field: message``."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in {"body", "query", "path"})
    message = str(first.get("msg", "Invalid value"))
    return f"{location}: {message}" if location else message


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    headers = getattr(exc, "headers", None)
    return error_response(exc.status_code, str(exc.detail), headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, first_validation_message(errors))
