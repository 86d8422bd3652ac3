"""
Bearer token verification.

Tokens are issued by the external identity service; this service only
verifies them with the shared secret and reads the caller's identity.
"""
import logging
from typing import Dict

from jose import JWTError, jwt

from hrms_attendance.core.config import settings

logger = logging.getLogger(__name__)


def decode_token(token: str) -> Dict:
    """Decode and verify a JWT token"""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.debug("Token rejected: %s", e)
        raise ValueError("Invalid token")
