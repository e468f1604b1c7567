"""Authentication service for the TalentRank service."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from talentrank.config import get_settings
from talentrank.models.database import UserDB
from talentrank.services.errors import AuthenticationError


class AuthenticationService:
    """Service for issuing and verifying JWT bearer tokens."""

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a JWT access token.

        Args:
            data: The data to encode in the token
            expires_delta: Optional expiration time delta

        Returns:
            str: The encoded JWT token
        """
        settings = get_settings()
        to_encode = data.copy()
        now = datetime.now(timezone.utc)
        if expires_delta:
            expire = now + expires_delta
        else:
            expire = now + timedelta(minutes=settings.access_token_expire_minutes)

        to_encode.update({
            "exp": expire,
            "iat": now.timestamp()
        })
        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    def verify_token(self, token: str) -> Optional[dict]:
        """
        Verify and decode a JWT token.

        Args:
            token: The JWT token to verify

        Returns:
            dict: The decoded token payload if valid, None otherwise
        """
        settings = get_settings()
        try:
            return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except JWTError:
            return None

    def get_user_by_id(self, db: Session, user_id: str) -> Optional[UserDB]:
        """Get a user by their ID."""
        return db.query(UserDB).filter(UserDB.id == user_id).first()

    def authenticate_token(self, db: Session, token: Optional[str]) -> UserDB:
        """
        Resolve a bearer token to an active user.

        Raises:
            AuthenticationError: If the token is missing, invalid, or names
                an unknown or inactive user
        """
        if not token:
            raise AuthenticationError("Authentication required.")

        payload = self.verify_token(token)
        if payload is None:
            raise AuthenticationError("Could not validate credentials")

        user_id = payload.get("sub")
        if user_id is None:
            raise AuthenticationError("Could not validate credentials")

        user = self.get_user_by_id(db, user_id)
        if user is None:
            raise AuthenticationError("Could not validate credentials")
        if not user.is_active:
            raise AuthenticationError("Inactive user")
        return user


# Global authentication service instance
auth_service = AuthenticationService()
