import logging
import uuid
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from docversion.core.db import get_db
from docversion.core.errors import AuthenticationError
from docversion.core.security import verify_token
from docversion.db.repositories.user_repository import UserRepository
from docversion.domains.identity.entities import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Зависимость для получения текущего пользователя по Bearer токену"""
    if credentials is None:
        raise AuthenticationError("No token provided")

    payload = verify_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")

    try:
        user_uuid = uuid.UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid or expired token")

    user = await UserRepository(db).get_by_uuid(user_uuid)
    if user is None or not user.is_active:
        logger.info("Token refers to unknown or inactive user %s", user_uuid)
        raise AuthenticationError("Invalid token")

    return user
