"""
JWT token handler.
Validates bearer tokens and extracts the acting user.
"""

from typing import Optional, Dict, Any
from datetime import timedelta
from jose import JWTError, jwt as jose_jwt

from timeclock.config import get_settings
from timeclock.domain.models.base import ValidationError, utcnow


class JWTHandler:
    """Handles JWT token validation and user extraction."""

    def __init__(self, secret_key: Optional[str] = None, algorithm: Optional[str] = None):
        self.settings = get_settings()
        self.jwt_secret = secret_key or self.settings.jwt_secret_key
        self.jwt_algorithm = algorithm or self.settings.jwt_algorithm

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            Dict containing token payload

        Raises:
            ValidationError: If token is invalid or expired
        """
        # Remove 'Bearer ' prefix if present
        if token.startswith('Bearer '):
            token = token[7:]

        try:
            payload = jose_jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"verify_exp": True, "verify_aud": False}
            )
        except JWTError as e:
            raise ValidationError(f"Invalid JWT token: {str(e)}", "token")

        # Validate required claims
        if not payload.get('sub'):
            raise ValidationError("Token missing user ID (sub claim)", "token")

        if 'exp' not in payload:
            raise ValidationError("Token missing expiration (exp claim)", "token")

        return payload

    def get_user_id(self, token: str) -> str:
        """
        Extract user ID from JWT token.

        Raises:
            ValidationError: If token is invalid
        """
        payload = self.verify_token(token)
        return str(payload['sub'])

    def generate_token(self, user_id: str, expires_minutes: Optional[int] = None, **claims: Any) -> str:
        """
        Generate a signed token for development and testing.

        Args:
            user_id: User ID to include in token
            expires_minutes: Token lifetime, defaults to the configured access token lifetime
            claims: Additional claims to embed

        Returns:
            JWT token string
        """
        now = utcnow()
        lifetime = expires_minutes if expires_minutes is not None else self.settings.jwt_access_token_expire_minutes
        expire = now + timedelta(minutes=lifetime)

        payload = {
            **claims,
            "sub": user_id,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }

        return jose_jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)
