from docversion.db.models.user import User
from docversion.db.models.document import Document, DocumentVersion

__all__ = [
    "User",
    "Document",
    "DocumentVersion",
]
