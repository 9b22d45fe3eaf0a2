from docversion.api.http.health import router as health_router
from docversion.api.http.auth import router as auth_router
from docversion.api.http.documents import router as documents_router
from docversion.api.http.versions import router as versions_router

__all__ = [
    "health_router",
    "auth_router",
    "documents_router",
    "versions_router"
]
