"""Authentication utilities"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import logging

from app.database.session import get_db
from app.exceptions import AuthenticationException
from app.models.user import User
from app.config import settings

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

# JWT settings
SECRET_KEY = settings.JWT_SECRET
ALGORITHM = settings.JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_DAYS = settings.ACCESS_TOKEN_EXPIRE_DAYS

# HTTP Bearer security scheme; missing headers are reported by get_current_user
security = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password from database

    Returns:
        True if password matches
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password

    Args:
        password: Plain text password

    Returns:
        Hashed password
    """
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Data to encode in token
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode JWT access token

    Args:
        token: JWT token string

    Returns:
        Decoded token data or None if invalid or expired
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def create_user_token(user: User) -> str:
    return create_access_token(data={"sub": user.id})


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token

    Raises:
        AuthenticationException: If the token is missing, invalid or stale
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("No token, authorization denied", code="AUTH_TOKEN_MISSING")

    payload = decode_access_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise AuthenticationException("Token is not valid")

    user = db.query(User).filter(User.id == payload["sub"]).first()
    if user is None:
        logger.warning(f"Token for unknown user: {payload['sub']}")
        raise AuthenticationException("Token is not valid")

    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Authenticate a user

    Args:
        db: Database session
        email: Email, any case
        password: Plain text password

    Returns:
        User if authentication successful, None otherwise
    """
    user = db.query(User).filter(User.email == User.normalize_email(email)).first()

    if not user or not verify_password(password, user.password_hash):
        return None

    return user
