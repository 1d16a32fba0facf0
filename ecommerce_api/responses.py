from typing import Any, Sequence

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .schemas import FieldError, Pagination, StackTrace

ErrorDetails = Sequence[FieldError | dict[str, str]] | StackTrace | dict[str, str]


def build_envelope(
    success: bool,
    message: str,
    data: Any = None,
    pagination: Pagination | dict[str, int] | None = None,
    errors: ErrorDetails | None = None,
) -> dict[str, Any]:
    """
    Build the ``{success, message, data?, pagination?, errors?}`` body.
    Members that are ``None`` are omitted rather than serialized as ``null``.
    """
    body: dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    if pagination is not None:
        body["pagination"] = jsonable_encoder(pagination)
    if errors is not None:
        body["errors"] = jsonable_encoder(errors, exclude_none=True)
    return body


def success_response(
    message: str,
    data: Any = None,
    pagination: Pagination | dict[str, int] | None = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=build_envelope(True, message, data=data, pagination=pagination),
    )


def error_response(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    errors: ErrorDetails | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=build_envelope(False, message, errors=errors),
    )
