from pydantic import BaseModel, Field, StrictBool, StrictStr, field_validator, ConfigDict
from typing import Any, Optional, List
import uuid
from datetime import datetime

# 1MB max content
MAX_CONTENT_LENGTH = 1000000


def _validate_name(v):
    if not v.strip():
        raise ValueError('Name must be a non-empty string.')
    return v.strip()


class DocumentCreate(BaseModel):
    """Схема для создания документа"""
    name: StrictStr = Field(..., min_length=1, max_length=255)
    content: StrictStr = Field(..., max_length=MAX_CONTENT_LENGTH)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)


class DocumentRename(BaseModel):
    """Схема для переименования документа (меняется только название)"""
    name: StrictStr = Field(..., min_length=1, max_length=255)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    uuid: uuid.UUID
    name: str
    content: str
    version: int
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DocumentListResponse(BaseModel):
    """Схема для постраничного списка документов"""
    data: List[DocumentResponse]
    current_page: int
    total_pages: int
    total_documents: int


class VersionCreate(BaseModel):
    """Схема для создания версии документа (флаг принимается и как isAutoSave)"""
    content: StrictStr = Field(..., max_length=MAX_CONTENT_LENGTH)
    is_auto_save: StrictBool = Field(..., alias="isAutoSave")

    model_config = ConfigDict(populate_by_name=True)


class VersionContentUpdate(BaseModel):
    """Схема для правки содержимого существующей версии"""
    content: StrictStr = Field(..., max_length=MAX_CONTENT_LENGTH)


class VersionResponse(BaseModel):
    """Схема для ответа с данными версии документа"""
    uuid: uuid.UUID
    document_id: uuid.UUID
    version_number: int
    content: str
    is_auto_save: bool
    diff: List[Any]
    merged_from_version_id: Optional[uuid.UUID] = None
    author_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MergeResponse(BaseModel):
    """Схема для ответа после восстановления версии"""
    document: DocumentResponse
    merged_version: VersionResponse
