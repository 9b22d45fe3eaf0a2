from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from docversion.api.http.deps import load_owned_version
from docversion.core.auth import get_current_user
from docversion.core.db import get_db
from docversion.domains.documents.schemas import VersionContentUpdate, VersionResponse
from docversion.domains.documents.services import DocumentService, DocumentVersionService
from docversion.domains.identity.entities import User

router = APIRouter(prefix="/versions", tags=["versions"])


@router.put("/{version_id}", response_model=VersionResponse)
async def update_version_content(
    version_id: str,
    update_data: VersionContentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Правка содержимого версии на месте; документ и дифф не меняются"""
    version_service = DocumentVersionService(db)

    version = await load_owned_version(DocumentService(db), version_service, version_id, current_user)
    version = await version_service.update_version_content(version.uuid, update_data.content)
    return VersionResponse.model_validate(version)
