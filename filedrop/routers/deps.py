from typing import Optional

from fastapi import Depends, Request
from starlette.datastructures import UploadFile

from filedrop.core.config import Settings
from filedrop.core.errors import Unauthorized
from filedrop.services import auth as auth_service
from filedrop.storage.blob import BlobStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def require_claims(request: Request, settings: Settings = Depends(get_settings)) -> dict:
    """Verify the token header and attach its claims to ``request.state``."""
    token = request.headers.get(settings.token_header)
    if not token:
        raise Unauthorized()

    claims = auth_service.verify_token(token, settings)
    request.state.claims = claims
    return claims


def read_scope(request: Request, settings: Settings = Depends(get_settings)) -> Optional[int]:
    """Owner to restrict file reads to, or None when reads are public."""
    if not settings.files_require_owner:
        return None
    return require_claims(request, settings)["userId"]


async def get_upload(request: Request) -> Optional[UploadFile]:
    """The ``file`` part of a multipart body, if it actually carries a file.

    A plain form field of the same name counts as no file at all.
    """
    form = await request.form()
    part = form.get("file")
    return part if isinstance(part, UploadFile) else None
