# yaytravel/core/security.py

import jwt
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional

from yaytravel.core.config_loader import settings
from yaytravel.core.logger import logger


ALGORITHM = "HS256"


# ---------------------------------------------------------------------------
# PASSWORD HASHING
# ---------------------------------------------------------------------------
def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


# ---------------------------------------------------------------------------
# JWT CREATION
# ---------------------------------------------------------------------------
def create_access_token(subject: str, expires_minutes: Optional[int] = None) -> str:
    """
    Default expiration comes from settings.access_token_expire_minutes
    """
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes

    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "exp": now + timedelta(minutes=expires_minutes),
        "iat": now,
    }

    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


# ---------------------------------------------------------------------------
# JWT VERIFY
# ---------------------------------------------------------------------------
def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected invalid access token: {e}")
        return None
