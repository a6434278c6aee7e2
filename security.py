import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header
from jose import JWTError, jwt
from passlib.context import CryptContext

from errors import Unauthenticated

# Security / Auth constants
SECRET_KEY = os.getenv("JWT_SECRET", "supersecretkey")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_SECONDS = int(os.getenv("JWT_TIMEOUT", "360000"))

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(seconds=ACCESS_TOKEN_EXPIRE_SECONDS))
    to_encode = {"user": {"id": str(user_id)}, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the user id carried by the token or raise Unauthenticated."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise Unauthenticated("Token is not valid")
    user = payload.get("user") or {}
    user_id = user.get("id") if isinstance(user, dict) else None
    if not user_id:
        raise Unauthenticated("Token is not valid")
    return user_id


# Dependency: authenticated user id from the x-auth-token header
def get_current_user_id(x_auth_token: Optional[str] = Header(None)) -> str:
    if not x_auth_token:
        raise Unauthenticated("No token, authorization denied")
    return decode_access_token(x_auth_token)
