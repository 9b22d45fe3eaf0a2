from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from docversion.core.auth import get_current_user
from docversion.core.db import get_db
from docversion.core.errors import AuthenticationError
from docversion.domains.identity.entities import User
from docversion.domains.identity.schemas import (
    UserCreate, UserLogin, UserResponse, AuthResponse, MessageResponse
)
from docversion.domains.identity.services import IdentityService

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Регистрация нового пользователя"""
    identity_service = IdentityService(db)
    user, token = await identity_service.register_user(user_data)

    return AuthResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Вход пользователя"""
    identity_service = IdentityService(db)
    result = await identity_service.login_user(login_data)

    if not result:
        raise AuthenticationError("Invalid credentials.")

    user, token = result
    return AuthResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/validate", response_model=UserResponse)
async def validate(current_user: User = Depends(get_current_user)):
    """Проверка токена и получение текущего пользователя"""
    return UserResponse.model_validate(current_user)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """Выход пользователя (токен без состояния, клиент просто забывает его)"""
    return MessageResponse(message="Logged out.")
