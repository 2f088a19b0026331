# pyright: reportMissingTypeStubs=false
"""
Authentication and authorization dependencies for FastAPI.

Provides dependency injection functions for user authentication and
role-based access control. Identity comes from bearer tokens issued by the
external identity service.
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.database import get_db
from models import Professional
from services.jwt_service import jwt_service, TokenPayload
from shared_types import UserRole

logger = logging.getLogger(__name__)


class UserContext:
    """Authenticated user context extracted from JWT token."""

    def __init__(self, user_id: int, role: str, professional_id: Optional[int] = None):
        self.user_id = user_id
        self.role = role
        self.professional_id = professional_id  # Set for professionals only

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def is_professional(self) -> bool:
        return self.role == UserRole.PROFESSIONAL.value

    @property
    def acting_professional_id(self) -> Optional[int]:
        """Professional scope for ownership checks; None means unrestricted (admin)."""
        return None if self.is_admin() else self.professional_id

    def __repr__(self) -> str:
        return f"UserContext(user_id={self.user_id}, role='{self.role}')"


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenPayload]:
    """Extract and validate JWT token payload."""
    if not credentials:
        return None
    return jwt_service.verify_token(credentials.credentials)


def build_user_context(db: Session, payload: TokenPayload) -> UserContext:
    """Resolve a token payload into a UserContext, looking up the professional profile."""
    professional_id = None
    if payload.role == UserRole.PROFESSIONAL.value:
        professional = db.query(Professional).filter(Professional.user_id == payload.user_id).first()
        if not professional:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Professional profile not found"
            )
        professional_id = professional.id
    return UserContext(user_id=payload.user_id, role=payload.role, professional_id=professional_id)


def get_current_user(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> UserContext:
    """Get authenticated user context from JWT token."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials not provided"
        )
    if payload.role not in {role.value for role in UserRole}:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user role"
        )
    return build_user_context(db, payload)


# Role-based authorization dependencies
def require_admin(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require admin access."""
    if not user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user


def require_professional(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require professional role."""
    if not user.is_professional():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Professional access required"
        )
    return user


def require_professional_or_admin(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require professional or admin role."""
    if not (user.is_professional() or user.is_admin()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Professional or admin access required"
        )
    return user
