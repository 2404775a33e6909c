import logging
from typing import BinaryIO, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filedrop import schemas
from filedrop.core.errors import NoFilePresent, NotFound, ServerError, Unauthorized
from filedrop.models.file import FileMeta
from filedrop.models.user import User
from filedrop.storage.blob import BlobStore, new_filename

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def upload(
    db: Session,
    store: BlobStore,
    owner_id: int,
    stream: Optional[BinaryIO],
    original_name: Optional[str],
    content_type: Optional[str],
    size: Optional[int],
) -> FileMeta:
    """Store ``stream`` as a new file owned by ``owner_id``.

    The metadata row and the owner's file list are written in one
    transaction. If that transaction fails the blob is removed again, so a
    failed upload leaves nothing behind.
    """
    if stream is None or not size:
        raise NoFilePresent()

    owner = db.get(User, owner_id)
    if owner is None:
        # token outlived its user
        raise Unauthorized()

    filename = new_filename()
    content_type = content_type or DEFAULT_CONTENT_TYPE
    store.put(
        filename,
        stream,
        content_type,
        metadata={"owner": owner_id},  # S3 metadata must be ASCII
    )

    record = FileMeta(
        filename=filename,
        original_name=original_name or filename,
        content_type=content_type,
        size=size,
        owner_id=owner_id,
    )
    db.add(record)
    owner.files.append(filename)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Metadata write failed for blob %s, removing it", filename)
        store.delete(filename)
        raise ServerError() from exc

    db.refresh(record)
    logger.info("User %s uploaded file %s (%s bytes)", owner_id, record.id, size)
    return record


def _get_record(db: Session, file_id: int, owner_id: Optional[int] = None) -> Optional[FileMeta]:
    query = db.query(FileMeta).filter(FileMeta.id == file_id)
    if owner_id is not None:
        query = query.filter(FileMeta.owner_id == owner_id)
    return query.first()


def get_file(
    db: Session, store: BlobStore, file_id: int, owner_id: Optional[int] = None
) -> schemas.FileHandle:
    """Metadata for ``file_id`` as both stores see it.

    ``owner_id`` narrows the lookup to that owner's files.
    """
    record = _get_record(db, file_id, owner_id)
    if record is None:
        raise NotFound()

    blob = store.head(record.filename)
    handle = schemas.File.model_validate(record).model_dump()
    return schemas.FileHandle(**handle, length=blob.length, etag=blob.etag)


def open_file(db: Session, store: BlobStore, file_id: int, owner_id: Optional[int] = None):
    record = _get_record(db, file_id, owner_id)
    if record is None:
        raise NotFound()
    return record, store.open(record.filename)


def delete_file(
    db: Session,
    store: BlobStore,
    file_id: int,
    root: Optional[str] = None,
    cascade: bool = True,
    owner_id: Optional[int] = None,
) -> None:
    """Remove the blob for ``file_id`` under ``root``.

    With ``cascade`` the metadata row and the owner's list entry go too.
    Without it only the blob is removed and the row stays behind.
    """
    record = _get_record(db, file_id, owner_id)
    if record is None:
        raise NotFound()

    blob_present = store.exists(record.filename, root)
    if not blob_present and not cascade:
        raise NotFound()
    if blob_present:
        store.delete(record.filename, root)

    if not cascade:
        return

    owner = record.owner
    user_id, filename = owner.id, record.filename
    if filename in owner.files:
        owner.files.remove(filename)
    db.delete(record)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "Blob %s removed but metadata delete for file %s failed; row now dangles",
            filename,
            file_id,
        )
        raise ServerError() from exc
    logger.info("Deleted file %s of user %s", file_id, user_id)


def reconcile_owner_files(db: Session, owner_id: int) -> bool:
    """Make the owner's file list match their metadata rows.

    Safe to run any number of times. Returns True when it changed something.
    """
    owner = db.get(User, owner_id)
    if owner is None:
        return False

    expected = [f.filename for f in owner.uploads]
    if list(owner.files or []) == expected:
        return False

    logger.warning(
        "Repairing file list of user %s (%d listed, %d stored)",
        owner_id,
        len(owner.files or []),
        len(expected),
    )
    owner.files = expected
    db.commit()
    return True


def list_files(db: Session, owner_id: int) -> list[FileMeta]:
    reconcile_owner_files(db, owner_id)
    return (
        db.query(FileMeta)
        .filter(FileMeta.owner_id == owner_id)
        .order_by(FileMeta.uploaded_at.desc(), FileMeta.id.desc())
        .all()
    )
