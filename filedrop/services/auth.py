import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from filedrop.core.config import Settings
from filedrop.core.errors import DuplicateUser, InvalidCredentials, ServerError, UserNotFound
from filedrop.core.security import create_token, decode_token, hash_password, verify_password
from filedrop.models.user import User

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def issue_token(user: User, settings: Settings) -> str:
    return create_token(
        user,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.token_expire_minutes,
    )


def register(
    db: Session,
    settings: Settings,
    name: str,
    email: str,
    password: str,
    created_at: Optional[datetime] = None,
) -> tuple[User, str]:
    # early exit; the unique index on email is what actually holds
    if get_user_by_email(db, email):
        raise DuplicateUser()

    user = User(
        name=name,
        email=email,
        password=hash_password(password, settings.password_hash_method),
        files=[],
    )
    if created_at is not None:
        user.created_at = created_at
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Concurrent registration for %s lost the race", email)
        raise DuplicateUser() from exc
    db.refresh(user)

    logger.info("Registered user %s", user.id)
    return user, issue_token(user, settings)


def login(db: Session, settings: Settings, email: str, password: str) -> tuple[User, str]:
    try:
        user = get_user_by_email(db, email)
    except SQLAlchemyError as exc:
        logger.exception("Error during login")
        raise ServerError() from exc

    if not user:
        raise UserNotFound()
    if not verify_password(user.password, password):
        logger.info("Failed login for user %s", user.id)
        raise InvalidCredentials()

    return user, issue_token(user, settings)


def verify_token(token: str, settings: Settings) -> dict:
    return decode_token(token, settings.jwt_secret, algorithm=settings.jwt_algorithm)
