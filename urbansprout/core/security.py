"""
Bearer token checks

Tokens are issued by the UrbanSprout auth backend and carry ``{"id", "type"}``
where ``type`` is ``"admin"`` for admin accounts. Older tokens put the id in
``sub``.
"""

from datetime import datetime, timedelta
from typing import Optional
import logging

from jose import jwt, JWTError, ExpiredSignatureError
from urbansprout.config import settings

logger = logging.getLogger(__name__)

ADMIN_TOKEN_TYPE = "admin"
USER_TOKEN_TYPE = "user"


def create_access_token(
    account_id: str,
    token_type: str = USER_TOKEN_TYPE,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Sign a token the same way the auth backend does

    Used by local tooling and tests; the API itself never hands out tokens.
    """
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {"id": str(account_id), "type": token_type, "exp": expire, "iat": datetime.utcnow()}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[dict]:
    """
    Decode a bearer token

    Returns:
        The payload, or None when the signature is wrong or the token expired
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except JWTError as e:
        logger.warning(f"Rejected invalid token: {str(e)}")
        return None


def token_account_id(payload: dict) -> Optional[str]:
    account_id = payload.get("id") or payload.get("sub")
    return str(account_id) if account_id else None


def is_admin_token(payload: dict) -> bool:
    return payload.get("type") == ADMIN_TOKEN_TYPE
