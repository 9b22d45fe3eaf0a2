import uuid
from datetime import datetime, timezone
from typing import Optional, List, Any

from docversion.core.errors import AccessDeniedError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document:
    """Сущность документа домена Documents"""

    def __init__(
        self,
        uuid: uuid.UUID,
        name: str,
        content: str,
        owner_id: uuid.UUID,
        version: int = 1,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.name = name
        self.content = content
        self.owner_id = owner_id
        self.version = version
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at

    def update_content(self, new_content: str) -> int:
        """Замена текущего снимка; возвращает номер новой головной версии"""
        self.content = new_content
        self.version += 1
        self.updated_at = utcnow()
        return self.version

    def rename(self, new_name: str) -> None:
        """Обновление названия документа"""
        self.name = new_name
        self.updated_at = utcnow()

    def refresh_from(self, other: "Document") -> None:
        """Перенос состояния из свежей копии того же документа"""
        self.name = other.name
        self.content = other.content
        self.version = other.version
        self.updated_at = other.updated_at

    @classmethod
    def create_document(cls, name: str, owner_id: uuid.UUID, content: str) -> "Document":
        """Создание нового документа"""
        return cls(
            uuid=uuid.uuid4(),
            name=name,
            content=content,
            owner_id=owner_id,
            version=1
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Document(uuid={self.uuid}, name={self.name}, version={self.version})"


class DocumentVersion:
    """Сущность версии документа.

    Версия хранит полный снимок содержимого, а не дельту: дифф к предыдущей
    версии сохраняется только для аудита и отображения.
    """

    def __init__(
        self,
        uuid: uuid.UUID,
        document_id: uuid.UUID,
        version_number: int,
        content: str,
        is_auto_save: bool = False,
        diff: Optional[List[Any]] = None,
        merged_from_version_id: Optional[uuid.UUID] = None,
        author_id: Optional[uuid.UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.document_id = document_id
        self.version_number = version_number
        self.content = content
        self.is_auto_save = is_auto_save
        self.diff = diff if diff is not None else []
        self.merged_from_version_id = merged_from_version_id
        self.author_id = author_id
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at

    def replace_content(self, new_content: str) -> None:
        """Правка содержимого на месте, без новой версии и без пересчета диффа"""
        self.content = new_content
        self.updated_at = utcnow()

    @classmethod
    def create_version(
        cls,
        document_id: uuid.UUID,
        version_number: int,
        content: str,
        is_auto_save: bool = False,
        diff: Optional[List[Any]] = None,
        merged_from_version_id: Optional[uuid.UUID] = None,
        author_id: Optional[uuid.UUID] = None
    ) -> "DocumentVersion":
        """Создание новой версии документа"""
        return cls(
            uuid=uuid.uuid4(),
            document_id=document_id,
            version_number=version_number,
            content=content,
            is_auto_save=is_auto_save,
            diff=diff,
            merged_from_version_id=merged_from_version_id,
            author_id=author_id
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, DocumentVersion):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"DocumentVersion(uuid={self.uuid}, document_id={self.document_id}, version={self.version_number})"


class DocumentAccess:
    """Проверка прав на документ: доступ есть только у владельца"""

    def __init__(self, document: Document):
        self.document_id = document.uuid
        self.owner_id = document.owner_id

    def is_owner(self, user_id: uuid.UUID) -> bool:
        """Проверка является ли пользователь владельцем"""
        return user_id is not None and user_id == self.owner_id

    def authorize(self, user_id: uuid.UUID) -> None:
        """Отказ в доступе, если пользователь не владелец документа"""
        if not self.is_owner(user_id):
            raise AccessDeniedError("Access denied.")
