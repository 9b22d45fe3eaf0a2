from typing import Optional, List, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
import uuid

from docversion.db.models.document import Document as DocumentModel, DocumentVersion as DocumentVersionModel

if TYPE_CHECKING:
    from docversion.domains.documents.entities import Document, DocumentVersion


class DocumentRepository:
    """Репозиторий для работы с документами.

    Репозиторий только сбрасывает изменения в сессию (flush); фиксацию
    транзакции выполняет сервис, чтобы запись версии и обновление документа
    попадали в одну транзакцию.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: "Document") -> "Document":
        """Создание нового документа"""
        db_document = DocumentModel(
            uuid=document.uuid,
            name=document.name,
            content=document.content,
            version=document.version,
            owner_id=document.owner_id,
            created_at=document.created_at,
            updated_at=document.updated_at
        )

        self.session.add(db_document)
        await self.session.flush()
        return self._to_domain(db_document)

    async def find_by_id(self, document_uuid: uuid.UUID, for_update: bool = False) -> Optional["Document"]:
        """Получение документа по UUID.

        С ``for_update`` строка блокируется до конца транзакции (где СУБД это
        поддерживает), а копия в identity map перечитывается из базы.
        """
        stmt = select(DocumentModel).where(DocumentModel.uuid == document_uuid)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def find(
        self,
        owner_id: Optional[uuid.UUID] = None,
        newest_first: bool = True,
        skip: int = 0,
        limit: int = 100
    ) -> List["Document"]:
        """Получение документов (по владельцу), отсортированных по дате создания"""
        query = select(DocumentModel)
        if owner_id is not None:
            query = query.where(DocumentModel.owner_id == owner_id)

        if newest_first:
            query = query.order_by(DocumentModel.created_at.desc(), DocumentModel.uuid)
        else:
            query = query.order_by(DocumentModel.created_at.asc(), DocumentModel.uuid)

        result = await self.session.execute(query.offset(skip).limit(limit))
        db_documents = result.scalars().all()
        return [self._to_domain(doc) for doc in db_documents]

    async def count(self, owner_id: Optional[uuid.UUID] = None) -> int:
        """Подсчет количества документов (по владельцу)"""
        query = select(func.count(DocumentModel.uuid))
        if owner_id is not None:
            query = query.where(DocumentModel.owner_id == owner_id)

        result = await self.session.execute(query)
        return result.scalar()

    async def save_name(self, document: "Document") -> None:
        """Сохранение только названия документа"""
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document.uuid)
            .values(name=document.name, updated_at=document.updated_at)
        )

        await self.session.execute(stmt)
        await self.session.flush()

    async def save(self, document: "Document") -> None:
        """Сохранение изменяемых полей документа"""
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document.uuid)
            .values(
                name=document.name,
                content=document.content,
                version=document.version,
                updated_at=document.updated_at
            )
        )

        await self.session.execute(stmt)
        await self.session.flush()

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from docversion.domains.documents.entities import Document

        return Document(
            uuid=db_document.uuid,
            name=db_document.name,
            content=db_document.content,
            owner_id=db_document.owner_id,
            version=db_document.version,
            created_at=db_document.created_at,
            updated_at=db_document.updated_at
        )


class DocumentVersionRepository:
    """Репозиторий для работы с версиями документов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, version: "DocumentVersion") -> "DocumentVersion":
        """Создание новой версии документа"""
        db_version = DocumentVersionModel(
            uuid=version.uuid,
            document_id=version.document_id,
            version_number=version.version_number,
            content=version.content,
            is_auto_save=version.is_auto_save,
            diff=version.diff,
            merged_from_version_id=version.merged_from_version_id,
            author_id=version.author_id,
            created_at=version.created_at,
            updated_at=version.updated_at
        )

        self.session.add(db_version)
        await self.session.flush()
        return self._to_domain(db_version)

    async def find_by_id(self, version_uuid: uuid.UUID) -> Optional["DocumentVersion"]:
        """Получение версии по UUID"""
        result = await self.session.execute(
            select(DocumentVersionModel).where(DocumentVersionModel.uuid == version_uuid)
        )
        db_version = result.scalar_one_or_none()
        return self._to_domain(db_version) if db_version else None

    async def find_one(self, document_id: uuid.UUID, version_uuid: uuid.UUID) -> Optional["DocumentVersion"]:
        """Получение версии, только если она принадлежит документу"""
        result = await self.session.execute(
            select(DocumentVersionModel).where(
                DocumentVersionModel.uuid == version_uuid,
                DocumentVersionModel.document_id == document_id
            )
        )
        db_version = result.scalar_one_or_none()
        return self._to_domain(db_version) if db_version else None

    async def find(self, document_id: uuid.UUID, newest_first: bool = True) -> List["DocumentVersion"]:
        """Получение всех версий документа в порядке создания"""
        if newest_first:
            ordering = (DocumentVersionModel.created_at.desc(), DocumentVersionModel.version_number.desc())
        else:
            ordering = (DocumentVersionModel.created_at.asc(), DocumentVersionModel.version_number.asc())

        result = await self.session.execute(
            select(DocumentVersionModel)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(*ordering)
        )
        db_versions = result.scalars().all()
        return [self._to_domain(version) for version in db_versions]

    async def save(self, version: "DocumentVersion") -> None:
        """Сохранение содержимого версии (правка на месте)"""
        stmt = (
            update(DocumentVersionModel)
            .where(DocumentVersionModel.uuid == version.uuid)
            .values(
                content=version.content,
                updated_at=version.updated_at
            )
        )

        await self.session.execute(stmt)
        await self.session.flush()

    def _to_domain(self, db_version: DocumentVersionModel) -> "DocumentVersion":
        """Преобразование модели БД в доменную сущность"""
        from docversion.domains.documents.entities import DocumentVersion

        return DocumentVersion(
            uuid=db_version.uuid,
            document_id=db_version.document_id,
            version_number=db_version.version_number,
            content=db_version.content,
            is_auto_save=db_version.is_auto_save,
            diff=db_version.diff,
            merged_from_version_id=db_version.merged_from_version_id,
            author_id=db_version.author_id,
            created_at=db_version.created_at,
            updated_at=db_version.updated_at
        )
