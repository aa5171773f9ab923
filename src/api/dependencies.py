"""FastAPI dependencies for authentication and services."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User
from src.services.analytics_service import AnalyticsService
from src.services.auth import resolve_subject
from src.services.inventory_service import InventoryService
from src.services.sharing_service import SharingService

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _authenticate(credentials: HTTPAuthorizationCredentials, db: Session) -> User:
    user = resolve_subject(db, credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    return _authenticate(credentials, db)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_security)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    """Get the current user if a bearer token was sent.

    A token that was sent but is invalid is still rejected.
    """
    if credentials is None:
        return None
    return _authenticate(credentials, db)


def get_inventory_service(
    db: Annotated[Session, Depends(get_db)],
) -> InventoryService:
    return InventoryService(db)


def get_sharing_service(
    db: Annotated[Session, Depends(get_db)],
) -> SharingService:
    return SharingService(db)


def get_analytics_service(
    db: Annotated[Session, Depends(get_db)],
) -> AnalyticsService:
    return AnalyticsService(db)
