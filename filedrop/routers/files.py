from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from filedrop import schemas
from filedrop.core.config import Settings
from filedrop.models.database import get_db
from filedrop.routers.deps import (
    get_blob_store,
    get_settings,
    get_upload,
    read_scope,
    require_claims,
)
from filedrop.services import files as file_service
from filedrop.storage.blob import BlobStore

router = APIRouter(tags=["files"])


def content_disposition(name: str) -> str:
    # headers are latin-1: ASCII fallback for old clients, RFC 5987 form for the rest
    fallback = name.encode("ascii", "ignore").decode().replace('"', "").replace("\\", "")
    return (
        f'attachment; filename="{fallback or "download"}"; '
        f"filename*=UTF-8''{quote(name, safe='')}"
    )


# --- upload a new file ---
@router.post("/upload", response_model=schemas.UploadResponse, status_code=201)
def upload_file(
    claims: dict = Depends(require_claims),
    file: Optional[UploadFile] = Depends(get_upload),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    record = file_service.upload(
        db,
        store,
        owner_id=claims["userId"],
        stream=file.file if file else None,
        original_name=file.filename if file else None,
        content_type=file.content_type if file else None,
        size=file.size if file else None,
    )
    return {"msg": "File saved in database", "newFile": schemas.File.model_validate(record)}


# --- the caller's own files ---
@router.get("/files", response_model=schemas.FileListResponse)
def list_files(claims: dict = Depends(require_claims), db: Session = Depends(get_db)):
    records = file_service.list_files(db, claims["userId"])
    return {"files": [schemas.File.model_validate(r) for r in records]}


@router.get("/files/{file_id}", response_model=schemas.FileResponse)
def get_file(
    file_id: int,
    owner_id: Optional[int] = Depends(read_scope),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    return {"file": file_service.get_file(db, store, file_id, owner_id=owner_id)}


@router.get("/files/{file_id}/download")
def download_file(
    file_id: int,
    owner_id: Optional[int] = Depends(read_scope),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    record, chunks = file_service.open_file(db, store, file_id, owner_id=owner_id)
    return StreamingResponse(
        chunks,
        media_type=record.content_type,
        headers={"Content-Disposition": content_disposition(record.original_name)},
    )


@router.delete("/files/{file_id}", response_model=schemas.MessageResponse)
def delete_file(
    file_id: int,
    owner_id: Optional[int] = Depends(read_scope),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
):
    file_service.delete_file(
        db,
        store,
        file_id,
        root=settings.blob_root,
        cascade=settings.delete_cascade_metadata,
        owner_id=owner_id,
    )
    return {"message": "File deleted successfully"}
