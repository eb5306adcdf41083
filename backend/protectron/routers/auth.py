"""
Protectron - Authentication Router
Handles user registration (with organization), login and session verification.
"""
from uuid import uuid4
from typing import Optional
import logging
import re

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, field_validator
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.db_models import OrganizationDB, UserDB
from ..auth import hash_password, verify_password, create_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    username: str
    password: str
    organization_name: str
    organization_logo_url: Optional[str] = None
    full_name: Optional[str] = None

    @field_validator('password')
    @classmethod
    def validate_password_strength(cls, v):
        if len(v) < 8:
            raise ValueError('Password must be at least 8 characters')
        return v

    @field_validator('organization_name')
    @classmethod
    def validate_organization_name(cls, v):
        if not v.strip():
            raise ValueError('Organization name is required')
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterResponse(BaseModel):
    message: str
    user_id: str
    organization_id: str
    organization_slug: str


class UserResponse(BaseModel):
    id: str
    email: str
    username: str
    full_name: Optional[str] = None
    role: str = "member"
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    organization_slug: Optional[str] = None
    organization_logo_url: Optional[str] = None


def slugify(name: str) -> str:
    """'Acme AI' -> 'acme-ai-1f2e3d' (public trust center path)"""
    slug = re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-')
    return f"{slug or 'org'}-{uuid4().hex[:6]}"


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user account together with its organization.
    The first user of an organization is its admin.
    """
    # Check if email already exists
    existing_email = db.query(UserDB).filter(UserDB.email == request.email).first()
    if existing_email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    # Check if username already exists
    existing_username = db.query(UserDB).filter(UserDB.username == request.username).first()
    if existing_username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already taken"
        )

    organization = OrganizationDB(
        id=str(uuid4()),
        name=request.organization_name,
        slug=slugify(request.organization_name),
        logo_url=request.organization_logo_url,
    )
    user = UserDB(
        id=str(uuid4()),
        email=request.email,
        username=request.username,
        full_name=request.full_name,
        password_hash=hash_password(request.password),
        role="admin",
        organization_id=organization.id,
    )

    db.add(organization)
    db.add(user)
    db.commit()

    logger.info(f"User registered: {request.email} (organization {organization.id})")
    return RegisterResponse(
        message="User created successfully",
        user_id=user.id,
        organization_id=organization.id,
        organization_slug=organization.slug,
    )


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate user and return JWT token.
    """
    user = db.query(UserDB).filter(UserDB.email == request.email).first()

    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(user.id, user.email, user.organization_id, user.role or "member")

    logger.info(f"User logged in: {request.email}")
    return TokenResponse(access_token=access_token)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserDB = Depends(get_current_user)):
    """
    Get current authenticated user info.
    """
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        username=current_user.username,
        full_name=current_user.full_name,
        role=current_user.role or "member",
        organization_id=current_user.organization_id,
        organization_name=current_user.organization.name if current_user.organization else None,
        organization_slug=current_user.organization.slug if current_user.organization else None,
        organization_logo_url=current_user.organization.logo_url if current_user.organization else None,
    )
