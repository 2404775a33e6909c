from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRegister(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class UserLogin(BaseModel):
    email: str
    password: str


class User(BaseModel):
    id: int = Field(serialization_alias="_id")
    name: str
    email: str
    created_at: datetime = Field(serialization_alias="createdAt")
    files: list[str] = []

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    msg: str
    user: User
    token: str


class File(BaseModel):
    id: int = Field(serialization_alias="_id")
    filename: str
    original_name: str = Field(serialization_alias="originalname")
    content_type: str = Field(serialization_alias="contentType")
    size: int
    owner_id: int = Field(serialization_alias="owner")
    uploaded_at: datetime = Field(serialization_alias="uploadedAt")

    model_config = ConfigDict(from_attributes=True)


class FileHandle(File):
    """File metadata joined with what the blob store reports."""

    length: int
    etag: Optional[str] = None


class UploadResponse(BaseModel):
    msg: str
    newFile: File


class FileResponse(BaseModel):
    file: FileHandle


class FileListResponse(BaseModel):
    files: list[File]


class MessageResponse(BaseModel):
    message: str
