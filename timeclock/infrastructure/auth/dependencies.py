"""
Authentication dependencies for FastAPI.
Resolves the acting user from the bearer token.
"""

from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from timeclock.infrastructure.auth.jwt_handler import JWTHandler
from timeclock.domain.models.base import ValidationError


# Security scheme
security = HTTPBearer()

# Global instance
jwt_handler = JWTHandler()


def get_jwt_handler() -> JWTHandler:
    """Dependency to get JWT handler."""
    return jwt_handler


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    jwt_handler: Annotated[JWTHandler, Depends(get_jwt_handler)]
) -> str:
    """
    FastAPI dependency to get current authenticated user ID.

    Raises:
        HTTPException: If authentication fails
    """
    try:
        return jwt_handler.get_user_id(credentials.credentials)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
