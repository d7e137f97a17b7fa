from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.core.database import get_db
from app.auth.schemas import UserLogin, UserResponse, Token
from app.auth.service import AuthService
from app.auth.models import User
from app.core.dependencies import get_current_user, get_current_roles

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=Token)
async def login_user(login_data: UserLogin, db: Session = Depends(get_db)):
    """Login user and return a JWT access token."""
    auth_service = AuthService(db)
    user = auth_service.authenticate_user(login_data)
    return auth_service.create_tokens(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
    roles: List[str] = Depends(get_current_roles)
):
    """Get current user information."""
    return UserResponse(
        id=current_user.id,
        username=current_user.username,
        employee_id=current_user.employee_id,
        roles=roles
    )
