import logging

from fastapi import APIRouter, Depends, HTTPException, status

from jobconnect.database import get_repository
from jobconnect.exceptions import ConflictError, DuplicateRecordError
from jobconnect.models.user import User
from jobconnect.repositories.base import Repository
from jobconnect.schemas.common import ApiResponse
from jobconnect.schemas.user import AuthData, UserCreate, UserData, UserLogin, UserResponse
from jobconnect.utils.auth import create_access_token, get_current_user
from jobconnect.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

DUPLICATE_USER = "User with this email or username already exists"


# ===========================
# PUBLIC ENDPOINTS
# ===========================

@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserCreate, repository: Repository = Depends(get_repository)):
    """Register a new user (job_seeker, recruiter, or admin)."""

    if await repository.find_user_by_email_or_username(payload.email, payload.username):
        raise ConflictError(DUPLICATE_USER)

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        role=payload.role,
        profile=payload.profile,
    )

    try:
        user = await repository.create_user(user)
    except DuplicateRecordError:
        raise ConflictError(DUPLICATE_USER) from None

    logger.info("Registered %s user %s", user.role, user.id)

    return {
        "success": True,
        "message": "User registered successfully",
        "data": {"user": UserResponse.from_user(user), "token": create_access_token(user.id)},
    }


@router.post("/login", response_model=ApiResponse[AuthData])
async def login(credentials: UserLogin, repository: Repository = Depends(get_repository)):
    """Login and get JWT access token."""

    user = await repository.get_user_by_email(credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")

    return {
        "success": True,
        "message": "Login successful",
        "data": {"user": UserResponse.from_user(user), "token": create_access_token(user.id)},
    }


# ===========================
# AUTHENTICATED USER ENDPOINTS
# ===========================

@router.get("/me", response_model=ApiResponse[UserData])
async def get_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": {"user": UserResponse.from_user(current_user)}}
