import logging
from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from docversion.core.errors import ValidationError
from docversion.core.security import create_access_token
from docversion.db.repositories.user_repository import UserRepository
from docversion.domains.identity.entities import User
from docversion.domains.identity.schemas import UserCreate, UserLogin

logger = logging.getLogger(__name__)


class IdentityService:
    """Сервис для регистрации и аутентификации пользователей"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)

    async def register_user(self, user_data: UserCreate) -> Tuple[User, str]:
        """Регистрация нового пользователя; возвращает пользователя и токен"""
        if await self.user_repository.email_exists(user_data.email):
            raise ValidationError("Email already registered.")

        user = User.create_user(
            email=user_data.email,
            name=user_data.name,
            password=user_data.password
        )
        created_user = await self.user_repository.create(user)
        logger.info("Registered user %s", created_user.uuid)

        return created_user, self.issue_token(created_user)

    async def authenticate_user(self, login_data: UserLogin) -> Optional[User]:
        """Аутентификация пользователя"""
        user = await self.user_repository.get_by_email(login_data.email)

        if not user or not user.is_active:
            return None

        if not user.authenticate(login_data.password):
            return None

        return user

    async def login_user(self, login_data: UserLogin) -> Optional[Tuple[User, str]]:
        """Вход пользователя и создание JWT токена"""
        user = await self.authenticate_user(login_data)

        if not user:
            logger.info("Failed login attempt")
            return None

        return user, self.issue_token(user)

    @staticmethod
    def issue_token(user: User) -> str:
        """Создание JWT токена для пользователя"""
        return create_access_token(data={"sub": str(user.uuid), "email": user.email})
