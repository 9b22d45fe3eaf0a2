from docversion.domains.identity.entities import User
from docversion.domains.identity.schemas import (
    UserCreate, UserLogin, UserResponse, AuthResponse, MessageResponse
)
from docversion.domains.identity.services import IdentityService

__all__ = [
    "User",
    "UserCreate", "UserLogin", "UserResponse", "AuthResponse", "MessageResponse",
    "IdentityService"
]
