# filedrop/core/config.py
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./filedrop.db"

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    token_expire_minutes: Optional[int] = None  # no expiry unless set
    token_header: str = "token"
    password_hash_method: str = "scrypt"

    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    aws_endpoint_url: Optional[str] = None  # MinIO / LocalStack
    aws_s3_bucket_name: str
    create_bucket: bool = False
    blob_root: str = "uploads"

    files_require_owner: bool = False
    delete_cascade_metadata: bool = True

    log_level: str = "INFO"
    log_format: str = "plain"

    host: str = "0.0.0.0"
    port: int = 5000

    # Tell pydantic-settings to load from .env at project root
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore any extra stuff in .env
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
