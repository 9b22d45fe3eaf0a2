from docversion.domains.documents.entities import Document, DocumentVersion, DocumentAccess
from docversion.domains.documents.codec import ContentCodec, Opaque, Parsed
from docversion.domains.documents.diff import Change, Diff, DiffEngine, default_identity
from docversion.domains.documents.schemas import (
    DocumentCreate, DocumentRename, DocumentResponse, DocumentListResponse,
    VersionCreate, VersionContentUpdate, VersionResponse, MergeResponse
)
from docversion.domains.documents.services import DocumentService, DocumentVersionService, MergeCoordinator

__all__ = [
    "Document", "DocumentVersion", "DocumentAccess",
    "ContentCodec", "Opaque", "Parsed",
    "Change", "Diff", "DiffEngine", "default_identity",
    "DocumentCreate", "DocumentRename", "DocumentResponse", "DocumentListResponse",
    "VersionCreate", "VersionContentUpdate", "VersionResponse", "MergeResponse",
    "DocumentService", "DocumentVersionService", "MergeCoordinator"
]
