from passlib.context import CryptContext
from passlib.exc import PasswordSizeError
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
import jwt

from .config import Settings, settings as default_settings

# New digests use pbkdf2_sha256; bcrypt ($2a$/$2b$) digests already in the
# directory still verify
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Raises:
        PasswordSizeError: if the password is longer than passlib accepts
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except PasswordSizeError:
        # No stored digest can come from a password this long
        return False


def create_access_token(
    user_id: Union[int, str],
    username: str,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or default_settings
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"id": user_id, "username": username, "iat": now, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> dict[str, Any]:
    """
    Verify a token's signature and expiry and return its claims.

    Raises:
        jwt.InvalidTokenError: if the token is malformed, tampered with or expired
    """
    settings = settings or default_settings
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
