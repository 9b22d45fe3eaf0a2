import uuid

from docversion.core.errors import NotFoundError
from docversion.domains.documents.entities import Document, DocumentAccess, DocumentVersion
from docversion.domains.documents.services import DocumentService, DocumentVersionService
from docversion.domains.identity.entities import User


def parse_id(value: str, not_found_message: str) -> uuid.UUID:
    """Разбор идентификатора из пути; некорректный считается ненайденным"""
    try:
        return uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        raise NotFoundError(not_found_message)


async def load_owned_document(
    document_service: DocumentService,
    document_id: str,
    user: User
) -> Document:
    """Документ текущего пользователя: сначала проверка существования, потом владения"""
    document = await document_service.get_document(parse_id(document_id, "Document not found"))
    DocumentAccess(document).authorize(user.uuid)
    return document


async def load_owned_version(
    document_service: DocumentService,
    version_service: DocumentVersionService,
    version_id: str,
    user: User
) -> DocumentVersion:
    """Версия по UUID, доступная текущему пользователю через родительский документ"""
    version = await version_service.get_version_by_id(parse_id(version_id, "Version not found"))
    try:
        document = await document_service.get_document(version.document_id)
    except NotFoundError:
        raise NotFoundError("Parent document not found")
    DocumentAccess(document).authorize(user.uuid)
    return version
