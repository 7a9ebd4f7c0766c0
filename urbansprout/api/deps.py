"""FastAPI dependencies for authentication and database access"""

from fastapi import Depends, HTTPException, status, Header
from motor.motor_asyncio import AsyncIOMotorDatabase
from urbansprout.database import get_database
from urbansprout.core.security import verify_token, token_account_id, is_admin_token
from urbansprout.utils.validators import validate_object_id
from bson import ObjectId
from typing import Optional

ADMIN_ROLES = ["admin"]


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization.replace("Bearer ", "", 1).strip() or None


async def _load_account(payload: dict, db: AsyncIOMotorDatabase) -> Optional[dict]:
    """
    Fetch the account a token belongs to.

    Admin tokens resolve against the admins collection and come back with
    role "admin"; inactive admins are treated as missing.
    """
    account_id = token_account_id(payload)
    if not validate_object_id(account_id):
        return None

    if is_admin_token(payload):
        admin = await db.admins.find_one({"_id": ObjectId(account_id)})
        if not admin or admin.get("status", "active") != "active":
            return None
        account = {**admin, "role": "admin"}
    else:
        account = await db.users.find_one({"_id": ObjectId(account_id)})
        if not account:
            return None

    account["_id"] = str(account["_id"])
    return account


async def get_current_user(
    authorization: str = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> dict:
    """
    Dependency to get current authenticated user from JWT token

    The error messages are the ones the store client treats as an expired
    session.

    Raises:
        HTTPException: If authentication fails
    """
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is not valid",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await _load_account(payload, db)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.get("active", True):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    return user


async def require_admin(
    current_user: dict = Depends(get_current_user)
) -> dict:
    """
    Dependency to require the admin role

    Raises:
        HTTPException: If user doesn't have required permissions
    """
    if current_user.get("role") not in ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Admin role required.",
        )

    return current_user


async def get_optional_user(
    authorization: Optional[str] = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> Optional[dict]:
    """
    Dependency to optionally get current user (doesn't require authentication)

    Returns:
        User dictionary if authenticated, None otherwise
    """
    token = _bearer_token(authorization)
    if not token:
        return None

    payload = verify_token(token)
    if not payload:
        return None

    user = await _load_account(payload, db)
    if user and user.get("active", True):
        return user

    return None


def is_admin(user: Optional[dict]) -> bool:
    return bool(user) and user.get("role") in ADMIN_ROLES
