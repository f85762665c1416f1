"""
Authentication dependencies for FastAPI.

Sessions are issued by the external identity provider; this module only
verifies the bearer token and loads the matching portal user.
"""
import logging
from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.database import get_db
from portal.core.session import ViewerSession
from portal.models.user import User

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


class AuthenticationError(Exception):
    """Authentication related errors."""
    pass


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token and return its claims.
    
    Raises:
        AuthenticationError: If the token is invalid or has no subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {e}")
    
    if payload.get("sub") is None:
        raise AuthenticationError("Token has no subject")
    return payload


def create_token(user_id: int, **claims: Any) -> str:
    """Sign a token for ``user_id``; used by tooling and tests."""
    payload = {"sub": str(user_id), **claims}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


async def get_viewer_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> ViewerSession:
    """
    Dependency to get the session of the authenticated caller.
    
    Raises:
        HTTPException: If authentication fails
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    try:
        payload = decode_token(credentials.credentials)
        user_id = int(payload["sub"])
    except (AuthenticationError, ValueError) as e:
        logger.warning(f"Authentication failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account not found",
        )
    
    logger.info(
        f"Authenticated request: user={user.id}, role={user.role.value}, "
        f"endpoint={request.url.path}, method={request.method}"
    )
    return ViewerSession.from_user(user)
