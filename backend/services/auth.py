"""
Bearer-token authentication.
Tokens are issued by the network's auth service; this API only verifies them
and reads the subject, email and role claims.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config import Settings, get_settings

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    subject: str,
    role: str,
    settings: Settings,
    email: Optional[str] = None,
    expires_minutes: int = 60
) -> str:
    payload = {
        "sub": subject,
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings)
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if not payload.get("sub") or not payload.get("role"):
        raise HTTPException(status_code=401, detail="Invalid token")

    return {
        "id": payload["sub"],
        "email": payload.get("email"),
        "role": payload["role"]
    }
