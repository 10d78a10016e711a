from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from db.db_operation import mongo_conn
from typing import List, Optional
from pydantic import BaseModel, Field
from settings.config import settings
from core.exceptions import AccessDenied
from utils.logger import get_logger

logger = get_logger("Dependencies")

# tokens are issued by the auth service; this API only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")

class CurrentUser(BaseModel):
    id: Optional[str] = None
    email: str
    full_name: Optional[str] = None
    role: str = "user"
    restaurant_ids: List[str] = Field(default_factory=list)
    token_version: int = 0

async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """
    Decode token, validate, fetch user from DB, and ensure token_version matches.
    Returns CurrentUser object.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        logger.error("JWT Error: Invalid token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    email: str = payload.get("sub")
    if email is None:
        logger.debug("Email not found in token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token: no email found")

    user = await mongo_conn.users_collection.find_one({"email": email})
    if user is None:
        logger.warning(f"User not found for email: {email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if user.get("disabled", False):
        logger.warning(f"Disabled user attempted access: {email}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")
    if user.get("token_version", 0) != payload.get("token_version", 0):
        logger.warning(f"Token version mismatch for user: {email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has been revoked")

    return CurrentUser(
        id=str(user.get("_id")),
        email=user.get("email"),
        full_name=user.get("full_name"),
        role=user.get("role", "user"),
        restaurant_ids=[str(rid) for rid in user.get("restaurant_ids", [])],
        token_version=user.get("token_version", 0),
    )

def require_role(*allowed_roles):
    """
    Ensures the current user has one of the allowed roles.
    """
    async def role_checker(current_user: CurrentUser = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            logger.warning(f"Forbidden: {current_user.email} role {current_user.role} not in allowed {allowed_roles}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Requires one of roles: {allowed_roles}"
            )
        return current_user

    return role_checker

def ensure_restaurant_access(current_user: CurrentUser, restaurant_id: str):
    # superadmin manages everything, restaurant admins only their own restaurants
    if current_user.role == "superadmin":
        return
    if restaurant_id not in current_user.restaurant_ids:
        logger.warning(f"Forbidden: {current_user.email} is not assigned to restaurant {restaurant_id}")
        raise AccessDenied("You are not allowed to manage this restaurant")
