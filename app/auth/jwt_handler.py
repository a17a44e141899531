import logging
from datetime import datetime, timezone, timedelta

from fastapi import HTTPException, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError

from app.config import config

logger = logging.getLogger(__name__)

# Access tokens are issued by the identity provider in front of this service
oauth2_scheme_access = OAuth2PasswordBearer(tokenUrl="auth/token")


def verify_jwt_token(token: str = Depends(oauth2_scheme_access)) -> dict:
    """
    Verify JWT access token for correctness and expiration time.

    Returns the caller identity as {"email", "role", "id"}.
    """
    if config.ENVIRONMENT == "dev" and token == "dev_token":
        logger.debug("dev_token accepted as administrator")
        return {"email": config.DEV_ADMIN_EMAIL, "role": "ADMIN", "id": 1}

    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        logger.error(f"JWT verification error: {str(e)}")
        raise HTTPException(status_code=401, detail="Token is invalid or expired")

    exp = payload.get("exp")
    if exp is None:
        raise HTTPException(status_code=401, detail="Missing 'exp' field in token")
    if datetime.fromtimestamp(exp, tz=timezone.utc) < datetime.now(tz=timezone.utc):
        raise HTTPException(status_code=401, detail="Token has expired")

    if "role" not in payload or "id" not in payload:
        raise HTTPException(status_code=401, detail="Token is missing identity claims")

    # Handle both "sub" and "email" fields
    email = payload.get("sub") or payload.get("email")
    return {"email": email, "role": payload["role"], "id": int(payload["id"])}


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    """
    Create a new JWT access token.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)
