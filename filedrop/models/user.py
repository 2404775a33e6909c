# filedrop/models/user.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship

from filedrop.models.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    # unique index is the real guard against concurrent duplicate signups
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # storage filenames, in upload order
    files = Column(MutableList.as_mutable(JSON), default=list, nullable=False)

    # One user → many files
    uploads = relationship("FileMeta", back_populates="owner", order_by="FileMeta.id")
