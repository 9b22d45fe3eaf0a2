import logging
import math
from typing import Optional, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from docversion.core.config import settings
from docversion.core.db import commit
from docversion.core.errors import NotFoundError, ValidationError
from docversion.core.locks import DocumentLocks, document_locks
from docversion.db.repositories.document_repository import DocumentRepository, DocumentVersionRepository
from docversion.domains.documents.diff import EMPTY_DIFF, Diff, DiffEngine, ObjectIdentity
from docversion.domains.documents.entities import Document, DocumentVersion

logger = logging.getLogger(__name__)


def build_diff_engine(identify: Optional[ObjectIdentity] = None) -> DiffEngine:
    """Движок диффа с настройками приложения"""
    return DiffEngine(identify=identify, ignored_keys=settings.diff_ignored_keys)


def _ensure_content(content) -> None:
    if not isinstance(content, str):
        raise ValidationError("Content must be a string.")


class DocumentService:
    """Сервис для работы с документами: создание, чтение, название, списки"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.version_repository = DocumentVersionRepository(session)

    async def create_document(self, name: str, content: str, owner_id: uuid.UUID) -> Tuple[Document, DocumentVersion]:
        """Создание документа вместе с его первой версией (пустой дифф)"""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Name must be a non-empty string.")
        _ensure_content(content)

        document = Document.create_document(name=name.strip(), owner_id=owner_id, content=content)
        created_document = await self.document_repository.create(document)

        initial_version = DocumentVersion.create_version(
            document_id=created_document.uuid,
            version_number=created_document.version,
            content=content,
            is_auto_save=False,
            diff=EMPTY_DIFF.to_list(),
            author_id=owner_id
        )
        created_version = await self.version_repository.create(initial_version)
        await commit(self.session)

        logger.info("Created document %s with initial version %s", created_document.uuid, created_version.uuid)
        return created_document, created_version

    async def get_document(self, document_uuid: uuid.UUID) -> Document:
        """Получение документа по UUID"""
        document = await self.document_repository.find_by_id(document_uuid)
        if document is None:
            raise NotFoundError("Document not found")
        return document

    async def rename_document(self, document: Document, name: str) -> Document:
        """Переименование документа; содержимое и версии не меняются"""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Name must be a non-empty string.")

        document.rename(name.strip())
        await self.document_repository.save_name(document)
        await commit(self.session)
        return document

    async def list_documents(self, owner_id: uuid.UUID, page: int = 1, limit: int = 10) -> dict:
        """Постраничный список документов владельца, новые сначала"""
        if page <= 0:
            raise ValidationError("Page number must be a positive integer.")
        if limit <= 0:
            raise ValidationError("Limit must be a positive integer.")
        if limit > settings.documents_max_page_size:
            raise ValidationError(f"Limit cannot exceed {settings.documents_max_page_size}.")

        total = await self.document_repository.count(owner_id)
        if total == 0:
            return {"documents": [], "page": page, "total_pages": 0, "total": 0}

        total_pages = math.ceil(total / limit)
        if page > total_pages:
            raise ValidationError("Page number exceeds total pages.")

        documents = await self.document_repository.find(
            owner_id=owner_id,
            skip=(page - 1) * limit,
            limit=limit
        )
        return {"documents": documents, "page": page, "total_pages": total_pages, "total": total}


class DocumentVersionService:
    """Цепочка версий документа.

    Версии только добавляются; каждая хранит полный снимок и дифф к
    содержимому документа на момент создания. Чтение базы сравнения, запись
    версии и обновление документа выполняются под замком документа.
    """

    def __init__(
        self,
        session: AsyncSession,
        diff_engine: Optional[DiffEngine] = None,
        locks: Optional[DocumentLocks] = None
    ):
        self.session = session
        self.version_repository = DocumentVersionRepository(session)
        self.document_repository = DocumentRepository(session)
        self.diff_engine = diff_engine or build_diff_engine()
        self.locks = locks or document_locks

    async def create_version(
        self,
        document: Document,
        content: str,
        is_auto_save: bool = False,
        author_id: Optional[uuid.UUID] = None
    ) -> DocumentVersion:
        """Новая версия с диффом от текущего содержимого документа"""
        _ensure_content(content)
        if not isinstance(is_auto_save, bool):
            raise ValidationError("isAutoSave is required and must be a boolean.")

        async with self.locks.for_document(document.uuid):
            current = await self.load_for_update(document.uuid)
            diff = self.diff_engine.diff(current.content, content)
            version = await self.append_version(
                current,
                content,
                diff,
                is_auto_save=is_auto_save,
                author_id=author_id
            )
            await commit(self.session)

        document.refresh_from(current)
        logger.info(
            "Created version %s of document %s (auto_save=%s, changes=%d, whole_replace=%s)",
            version.uuid, document.uuid, is_auto_save, len(diff), diff.is_replacement
        )
        return version

    async def append_version(
        self,
        document: Document,
        content: str,
        diff: Diff,
        is_auto_save: bool = False,
        merged_from_version_id: Optional[uuid.UUID] = None,
        author_id: Optional[uuid.UUID] = None
    ) -> DocumentVersion:
        """Запись версии и перенос снимка в документ (без фиксации транзакции).

        Вызывающий должен держать замок документа.
        """
        version_number = document.update_content(content)
        version = DocumentVersion.create_version(
            document_id=document.uuid,
            version_number=version_number,
            content=content,
            is_auto_save=is_auto_save,
            diff=diff.to_list(),
            merged_from_version_id=merged_from_version_id,
            author_id=author_id
        )
        created_version = await self.version_repository.create(version)
        await self.document_repository.save(document)
        return created_version

    async def list_versions(self, document_id: uuid.UUID) -> List[DocumentVersion]:
        """Все версии документа, новые сначала"""
        return await self.version_repository.find(document_id, newest_first=True)

    async def get_version(self, document_id: uuid.UUID, version_id: uuid.UUID) -> DocumentVersion:
        """Версия документа; чужая версия считается ненайденной"""
        version = await self.version_repository.find_one(document_id, version_id)
        if version is None:
            raise NotFoundError("Version not found")
        return version

    async def get_version_by_id(self, version_id: uuid.UUID) -> DocumentVersion:
        """Версия по UUID без привязки к документу"""
        version = await self.version_repository.find_by_id(version_id)
        if version is None:
            raise NotFoundError("Version not found")
        return version

    async def update_version_content(self, version_id: uuid.UUID, content: str) -> DocumentVersion:
        """Правка содержимого существующей версии на месте.

        Новая версия не создается, дифф не пересчитывается, содержимое
        документа не меняется.
        """
        _ensure_content(content)

        version = await self.get_version_by_id(version_id)
        version.replace_content(content)
        await self.version_repository.save(version)
        await commit(self.session)

        logger.info("Edited content of version %s in place", version.uuid)
        return version

    async def load_for_update(self, document_uuid: uuid.UUID) -> Document:
        current = await self.document_repository.find_by_id(document_uuid, for_update=True)
        if current is None:
            raise NotFoundError("Document not found")
        return current


class MergeCoordinator:
    """Восстановление прежней версии документа.

    Это восстановление снимка, а не трехстороннее слияние: содержимое
    выбранной версии переносится в документ целиком и записывается новой
    версией со ссылкой на источник.
    """

    def __init__(self, session: AsyncSession, version_service: Optional[DocumentVersionService] = None):
        self.session = session
        self.version_service = version_service or DocumentVersionService(session)

    async def merge(
        self,
        document: Document,
        source_version: DocumentVersion,
        author_id: Optional[uuid.UUID] = None
    ) -> Tuple[Document, DocumentVersion]:
        """Восстановление source_version в документ; возвращает документ и новую версию"""
        if source_version.document_id != document.uuid:
            raise NotFoundError("Version not found")

        service = self.version_service
        async with service.locks.for_document(document.uuid):
            current = await service.load_for_update(document.uuid)
            diff = service.diff_engine.diff(current.content, source_version.content)
            merged_version = await service.append_version(
                current,
                source_version.content,
                diff,
                is_auto_save=False,
                merged_from_version_id=source_version.uuid,
                author_id=author_id if author_id is not None else current.owner_id
            )
            await commit(self.session)

        document.refresh_from(current)
        logger.info(
            "Restored version %s of document %s as version %s",
            source_version.uuid, document.uuid, merged_version.uuid
        )
        return document, merged_version
