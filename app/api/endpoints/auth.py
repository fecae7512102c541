"""Authentication API endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from app.api.dependencies import get_conversation_store
from app.database.session import get_db
from app.exceptions import InvalidCredentialsException, UserExistsException
from app.models.settings import UserSettings
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    UserOut,
    VerifyResponse
)
from app.security.auth import (
    authenticate_user,
    create_user_token,
    get_current_user,
    get_password_hash
)
from app.services.conversation_store import ConversationStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register a new user and return a JWT token
    """
    if db.query(User).filter(User.email == register_data.email).first():
        logger.warning(f"Registration attempt with existing email: {register_data.email}")
        raise UserExistsException("User already exists")

    user = User(
        email=register_data.email,
        password_hash=get_password_hash(register_data.password),
        created_at=datetime.utcnow()
    )
    user.settings = UserSettings()
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User registered: {user.id}")

    return AuthResponse(
        message="User registered successfully",
        token=create_user_token(user),
        user=UserOut.model_validate(user)
    )


@router.post("/auth/login", response_model=AuthResponse)
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate a user and return a JWT token
    """
    user = authenticate_user(db, login_data.email, login_data.password)

    if not user:
        logger.warning(f"Failed login attempt for email: {login_data.email}")
        raise InvalidCredentialsException("Invalid credentials")

    # Update last login
    user.last_login = datetime.utcnow()
    db.commit()

    logger.info(f"User logged in: {user.id}")

    return AuthResponse(
        message="Login successful",
        token=create_user_token(user),
        user=UserOut.model_validate(user)
    )


@router.get("/auth/verify", response_model=VerifyResponse)
async def verify_token(
    current_user: User = Depends(get_current_user)
):
    """
    Check that the bearer token is still valid
    """
    return VerifyResponse(valid=True, user=UserOut.model_validate(current_user))


@router.get("/auth/me", response_model=ProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    store: ConversationStore = Depends(get_conversation_store)
):
    """
    Get the current user's profile and statistics
    """
    total_messages = await store.count_messages(current_user.id)

    return ProfileResponse(
        id=current_user.id,
        email=current_user.email,
        created_at=current_user.created_at,
        last_login=current_user.last_login,
        conversation_count=current_user.conversation_count,
        total_messages=total_messages
    )
