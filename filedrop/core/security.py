import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from filedrop.core.errors import InvalidToken


def hash_password(password: str, method: str = "scrypt") -> str:
    return generate_password_hash(password, method=method)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def create_token(
    user,
    secret: str,
    algorithm: str = "HS256",
    expires_minutes: Optional[int] = None,
) -> str:
    """Sign the identity claims for ``user``.

    Only non-secret fields go in. ``jti`` makes every token unique even when
    two are minted for the same user within the same second.
    """
    now = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "userId": user.id,
        "name": user.name,
        "email": user.email,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "iat": now,
        "jti": uuid.uuid4().hex,
    }
    if expires_minutes:
        claims["exp"] = now + timedelta(minutes=expires_minutes)
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.PyJWTError as exc:
        raise InvalidToken() from exc
    if "userId" not in claims:
        raise InvalidToken()
    return claims
