"""Helpers shared by the pass-through routes.

Most storefront routes forward the caller's ``Authorization`` header to
the backend and relay the backend's JSON body and status code unchanged.
"""

from typing import Any

from fastapi import Header, Request
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import UploadFile as StarletteUploadFile

from shared.backend.port import BackendResponse, FilePart
from shared.errors import NotAuthenticated
from shared.pagination import with_page_window


def optional_token(authorization: str | None = Header(default=None)) -> str | None:
    """The raw ``Authorization`` header, when present."""
    return authorization or None


def require_token(authorization: str | None = Header(default=None)) -> str:
    """The raw ``Authorization`` header; raises NotAuthenticated when missing."""
    if not authorization:
        raise NotAuthenticated()
    return authorization


def relay(response: BackendResponse) -> Response:
    """Return the backend's body and status code as-is."""
    if response.status_code == 204 or response.payload is None:
        return Response(status_code=response.status_code)
    return JSONResponse(content=response.payload, status_code=response.status_code)


def clean_params(**params: Any) -> dict[str, Any]:
    """Drop query parameters that are unset or empty."""
    return {key: value for key, value in params.items() if value is not None and value != ""}


def multi_params(single: dict[str, Any], **multi: list[str] | None) -> list[tuple[str, Any]]:
    """Flatten repeated query parameters (``?manufacturerId=a&manufacturerId=b``)."""
    pairs = list(single.items())
    for key, values in multi.items():
        for value in values or []:
            pairs.append((key, value))
    return pairs


def relay_page(response: BackendResponse) -> Response:
    """Relay a paginated list, adding the admin page-number window on success."""
    if not response.ok:
        return relay(response)
    return JSONResponse(content=with_page_window(response.payload), status_code=response.status_code)


async def read_multipart(request: Request) -> tuple[dict[str, Any], dict[str, FilePart]]:
    """Split an incoming multipart form into plain fields and file parts."""
    form = await request.form()
    fields: dict[str, Any] = {}
    files: dict[str, FilePart] = {}
    for key, value in form.multi_items():
        if isinstance(value, StarletteUploadFile):
            if value.filename:
                files[key] = FilePart(
                    filename=value.filename,
                    content=await value.read(),
                    content_type=value.content_type or "application/octet-stream",
                )
        else:
            fields[key] = value
    return fields, files
