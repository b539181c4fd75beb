# utils/auth.py
"""
Bearer-token identity.

Tokens are issued by the auth service; we only decode them and trust the
user id they carry.
"""
from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt

import config
from config import logger


def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
     if not config.JWT_SECRET:
          logger.error("JWT_SECRET is not set; rejecting bearer token")
          raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Authentication not configured")
     token = auth.split(" ", 1)[1]
     try:
          payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
          return payload
     except JWTError:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")


def get_current_user_id(token: dict = Depends(verify_token)) -> str:
     """User id from the ``id`` claim, falling back to ``sub``."""
     user_id = token.get("id") or token.get("sub")
     if not user_id:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has no user id")
     return str(user_id)
