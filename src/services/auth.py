"""Identity: password hashing, JWT tokens, and resolving token subjects to users.

The rest of the application only ever sees internal user ids. Tokens carry
the id as ``sub``; ``resolve_subject`` is the single place that turns a
token back into a ``User``.
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.user import User
from src.schemas.auth import ProfileUpdate

logger = logging.getLogger(__name__)

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def normalize_email(email: str) -> str:
    """Lower-case and trim an email for storage and lookups."""
    return email.strip().lower()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt."""
    return pwd_context.hash(password)


def create_access_token(user: User) -> str:
    """Issue a token whose subject is the user's internal id."""
    expires_at = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    claims = {"sub": str(user.id), "email": user.email, "exp": expires_at}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Decode a token, returning None if it is malformed, forged or expired."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None


def resolve_subject(db: Session, token: str) -> User | None:
    """Map a bearer token to the user it was issued for."""
    claims = decode_access_token(token)
    if not claims:
        return None
    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        return None
    return get_user_by_id(db, user_id)


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get a user by internal id."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email, ignoring case."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Return the user if the credentials match."""
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str | None = None,
    location: str | None = None,
) -> User:
    """Create a user with a normalized email and hashed password."""
    user = User(
        email=normalize_email(email),
        password_hash=get_password_hash(password),
        name=name,
        location=location,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
    """Patch the profile fields that were sent."""
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user
