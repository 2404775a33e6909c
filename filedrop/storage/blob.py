"""S3-backed blob store.

Blobs live at ``<root>/<filename>`` inside one bucket. The root is a plain
key prefix, so several namespaces can share a bucket.
"""
import logging
import secrets
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from filedrop.core.config import Settings
from filedrop.core.errors import NotFound, StorageError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass
class BlobInfo:
    key: str
    length: int
    content_type: str
    etag: Optional[str]
    metadata: dict


def new_filename() -> str:
    """Collision-resistant storage name, unrelated to what the client sent."""
    return secrets.token_hex(16)


def _is_missing(exc: ClientError) -> bool:
    return str(exc.response.get("Error", {}).get("Code")) in _MISSING_CODES


class BlobStore:
    def __init__(self, client, bucket: str, root: str = "uploads"):
        self.client = client
        self.bucket = bucket
        self.root = root

    @classmethod
    def from_settings(cls, settings: Settings) -> "BlobStore":
        client = boto3.client(
            "s3",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
        )
        store = cls(client, settings.aws_s3_bucket_name, settings.blob_root)
        if settings.create_bucket:
            store.ensure_bucket()
        return store

    def key_for(self, filename: str, root: Optional[str] = None) -> str:
        return f"{root or self.root}/{filename}"

    def ensure_bucket(self) -> None:
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except ClientError as exc:
            if not _is_missing(exc):
                raise StorageError() from exc
            logger.info("Creating bucket %s", self.bucket)
            self.client.create_bucket(Bucket=self.bucket)

    def put(
        self,
        filename: str,
        body: BinaryIO,
        content_type: str,
        metadata: Optional[dict] = None,
    ) -> str:
        key = self.key_for(filename)
        try:
            self.client.upload_fileobj(
                body,
                self.bucket,
                key,
                ExtraArgs={
                    "ContentType": content_type,
                    "Metadata": {k: str(v) for k, v in (metadata or {}).items()},
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError("Error storing the file") from exc
        return key

    def head(self, filename: str, root: Optional[str] = None) -> BlobInfo:
        key = self.key_for(filename, root)
        try:
            obj = self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_missing(exc):
                raise NotFound() from exc
            raise StorageError("Error retrieving the file") from exc
        except BotoCoreError as exc:
            raise StorageError("Error retrieving the file") from exc

        return BlobInfo(
            key=key,
            length=obj["ContentLength"],
            content_type=obj.get("ContentType") or "application/octet-stream",
            etag=(obj.get("ETag") or "").strip('"') or None,
            metadata=obj.get("Metadata", {}),
        )

    def open(self, filename: str, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        key = self.key_for(filename)
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_missing(exc):
                raise NotFound() from exc
            raise StorageError("Error retrieving the file") from exc
        except BotoCoreError as exc:
            raise StorageError("Error retrieving the file") from exc
        return obj["Body"].iter_chunks(chunk_size)

    def exists(self, filename: str, root: Optional[str] = None) -> bool:
        try:
            self.head(filename, root)
        except NotFound:
            return False
        return True

    def delete(self, filename: str, root: Optional[str] = None) -> None:
        # S3 deletes are idempotent, so callers check existence first when it matters
        key = self.key_for(filename, root)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError("Error deleting the file") from exc
        logger.info("Deleted blob %s", key)
