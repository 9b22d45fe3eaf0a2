from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from docversion.api.http.deps import load_owned_document, load_owned_version, parse_id
from docversion.core.auth import get_current_user
from docversion.core.db import get_db
from docversion.domains.documents.schemas import (
    DocumentCreate, DocumentRename, DocumentResponse, DocumentListResponse,
    VersionCreate, VersionContentUpdate, VersionResponse, MergeResponse
)
from docversion.domains.documents.services import DocumentService, DocumentVersionService, MergeCoordinator
from docversion.domains.identity.entities import User

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Создание нового документа вместе с первой версией"""
    document_service = DocumentService(db)

    document, _ = await document_service.create_document(
        document_data.name,
        document_data.content,
        current_user.uuid
    )
    return DocumentResponse.model_validate(document)


@router.get("", response_model=DocumentListResponse)
async def get_user_documents(
    page: int = Query(1),
    limit: int = Query(10),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение списка документов текущего пользователя"""
    document_service = DocumentService(db)

    result = await document_service.list_documents(current_user.uuid, page=page, limit=limit)

    return DocumentListResponse(
        data=[DocumentResponse.model_validate(doc) for doc in result["documents"]],
        current_page=result["page"],
        total_pages=result["total_pages"],
        total_documents=result["total"]
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение документа по UUID"""
    document = await load_owned_document(DocumentService(db), document_id, current_user)
    return DocumentResponse.model_validate(document)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def rename_document(
    document_id: str,
    rename_data: DocumentRename,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Переименование документа"""
    document_service = DocumentService(db)

    document = await load_owned_document(document_service, document_id, current_user)
    document = await document_service.rename_document(document, rename_data.name)
    return DocumentResponse.model_validate(document)


# Версии документов
@router.post("/{document_id}/versions", response_model=VersionResponse, status_code=status.HTTP_201_CREATED)
async def create_version(
    document_id: str,
    version_data: VersionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Создание новой версии документа"""
    document = await load_owned_document(DocumentService(db), document_id, current_user)

    version = await DocumentVersionService(db).create_version(
        document,
        version_data.content,
        is_auto_save=version_data.is_auto_save,
        author_id=current_user.uuid
    )
    return VersionResponse.model_validate(version)


@router.get("/{document_id}/versions", response_model=List[VersionResponse])
async def get_document_versions(
    document_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение версий документа, новые сначала"""
    document = await load_owned_document(DocumentService(db), document_id, current_user)

    versions = await DocumentVersionService(db).list_versions(document.uuid)
    return [VersionResponse.model_validate(version) for version in versions]


@router.get("/{document_id}/versions/{version_id}", response_model=VersionResponse)
async def get_document_version(
    document_id: str,
    version_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение конкретной версии документа"""
    document = await load_owned_document(DocumentService(db), document_id, current_user)

    version = await DocumentVersionService(db).get_version(
        document.uuid,
        parse_id(version_id, "Version not found")
    )
    return VersionResponse.model_validate(version)


@router.post("/{document_id}/versions/{version_id}/merge", response_model=MergeResponse)
async def merge_document_version(
    document_id: str,
    version_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Восстановление документа из версии"""
    document = await load_owned_document(DocumentService(db), document_id, current_user)

    version_service = DocumentVersionService(db)
    source_version = await version_service.get_version(
        document.uuid,
        parse_id(version_id, "Version not found")
    )

    document, merged_version = await MergeCoordinator(db, version_service).merge(
        document,
        source_version,
        author_id=current_user.uuid
    )
    return MergeResponse(
        document=DocumentResponse.model_validate(document),
        merged_version=VersionResponse.model_validate(merged_version)
    )


@router.put("/{version_id}/current-version", response_model=VersionResponse)
async def update_current_version(
    version_id: str,
    update_data: VersionContentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Правка содержимого версии на месте (старый адрес; в пути UUID версии)"""
    version_service = DocumentVersionService(db)

    version = await load_owned_version(DocumentService(db), version_service, version_id, current_user)
    version = await version_service.update_version_content(version.uuid, update_data.content)
    return VersionResponse.model_validate(version)
