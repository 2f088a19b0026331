"""
JWT Service for bearer-token validation.

Tokens are issued by the external identity service and signed with the
shared secret; this service only decodes them. create_access_token exists
for local tooling and tests.
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from pydantic import BaseModel, ValidationError, field_validator

from core.config import JWT_ALGORITHM, JWT_SECRET_KEY


class TokenPayload(BaseModel):
    """Payload structure for JWT tokens."""
    sub: str  # User ID
    role: str  # "admin", "professional", "patient" or "company"
    iat: Optional[int] = None
    exp: Optional[int] = None

    @field_validator("sub")
    @classmethod
    def validate_sub(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError("sub must be a numeric user id")
        return v

    @property
    def user_id(self) -> int:
        return int(self.sub)


class JWTService:
    """Service for JWT token operations."""

    ALGORITHM = JWT_ALGORITHM
    ACCESS_TOKEN_EXPIRE_MINUTES = 60

    @classmethod
    def create_access_token(cls, user_id: int, role: str, expires_minutes: Optional[int] = None) -> str:
        """Create a signed access token."""
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": str(user_id),
            "role": role,
            "iat": now,
            "exp": now + timedelta(minutes=expires_minutes or cls.ACCESS_TOKEN_EXPIRE_MINUTES),
        }
        return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=cls.ALGORITHM)

    @classmethod
    def verify_token(cls, token: str) -> Optional[TokenPayload]:
        """Verify and decode a JWT token. Returns None for invalid or expired tokens."""
        try:
            payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[cls.ALGORITHM])
            return TokenPayload(**payload)
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None
        except ValidationError:
            return None


jwt_service = JWTService()
