# filedrop/models/file.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from filedrop.models.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class FileMeta(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(64), unique=True, nullable=False)   # blob key under root
    original_name = Column(String(255), nullable=False)          # name the client sent
    content_type = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)                       # as reported by the upload
    uploaded_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Many files → one owner (User)
    owner = relationship("User", back_populates="uploads")
