from docversion.db.repositories.user_repository import UserRepository
from docversion.db.repositories.document_repository import DocumentRepository, DocumentVersionRepository

__all__ = [
    "UserRepository",
    "DocumentRepository",
    "DocumentVersionRepository"
]
