"""Authentication dependencies for the TalentRank service."""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from talentrank.database import get_db
from talentrank.models.database import UserDB
from talentrank.services.auth import auth_service
from talentrank.services.errors import AuthenticationError


# HTTP Bearer token scheme; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> UserDB:
    """
    Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials containing the JWT token
        db: Database session

    Returns:
        UserDB: The authenticated user

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    token = credentials.credentials if credentials else None
    try:
        return auth_service.authenticate_token(db, token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
