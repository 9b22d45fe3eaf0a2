import uuid

import pytest

from docversion.core.errors import AccessDeniedError, NotFoundError, ValidationError
from docversion.domains.documents.entities import DocumentAccess
from docversion.domains.documents.services import DocumentService, DocumentVersionService


@pytest.fixture
def service(db_session):
    return DocumentService(db_session)


class TestCreateDocument:
    """Создание документа и первой версии"""

    async def test_initial_version(self, db_session, service, owner):
        document, version = await service.create_document("Notes", '{"a": 1}', owner.uuid)

        assert document.version == 1
        assert document.content == '{"a": 1}'
        assert document.owner_id == owner.uuid

        assert version.document_id == document.uuid
        assert version.version_number == 1
        assert version.content == document.content
        assert version.diff == []
        assert version.is_auto_save is False
        assert version.author_id == owner.uuid
        assert version.merged_from_version_id is None

        versions = await DocumentVersionService(db_session).list_versions(document.uuid)
        assert versions == [version]

    async def test_name_is_trimmed(self, service, owner):
        document, _ = await service.create_document("  Plan  ", "", owner.uuid)
        assert document.name == "Plan"

    @pytest.mark.parametrize("name", ["", "   ", None, 5])
    async def test_invalid_name(self, service, owner, name):
        with pytest.raises(ValidationError):
            await service.create_document(name, "text", owner.uuid)

    @pytest.mark.parametrize("content", [None, 1, {"a": 1}, ["x"]])
    async def test_content_must_be_string(self, service, owner, content):
        with pytest.raises(ValidationError):
            await service.create_document("Doc", content, owner.uuid)
        assert await service.document_repository.count(owner.uuid) == 0


class TestReadAndRename:

    async def test_get_document(self, service, owner):
        document, _ = await service.create_document("Doc", "text", owner.uuid)
        found = await service.get_document(document.uuid)
        assert found == document
        assert found.content == "text"

    async def test_unknown_document(self, service):
        with pytest.raises(NotFoundError):
            await service.get_document(uuid.uuid4())

    async def test_rename_keeps_content_and_versions(self, db_session, service, owner):
        document, _ = await service.create_document("Old", "body", owner.uuid)

        renamed = await service.rename_document(document, "New")

        assert renamed.name == "New"
        stored = await service.get_document(document.uuid)
        assert stored.name == "New"
        assert stored.content == "body"
        assert stored.version == 1
        assert len(await DocumentVersionService(db_session).list_versions(document.uuid)) == 1

    async def test_rename_rejects_blank_name(self, service, owner):
        document, _ = await service.create_document("Old", "body", owner.uuid)
        with pytest.raises(ValidationError):
            await service.rename_document(document, " ")


class TestListDocuments:
    """Постраничный список документов владельца"""

    async def test_pages_newest_first(self, service, owner, stranger):
        for name in ("first", "second", "third"):
            await service.create_document(name, "", owner.uuid)
        await service.create_document("foreign", "", stranger.uuid)

        page_one = await service.list_documents(owner.uuid, page=1, limit=2)
        page_two = await service.list_documents(owner.uuid, page=2, limit=2)

        assert [doc.name for doc in page_one["documents"]] == ["third", "second"]
        assert [doc.name for doc in page_two["documents"]] == ["first"]
        assert page_one["total"] == 3
        assert page_one["total_pages"] == 2
        assert page_two["page"] == 2

    async def test_empty_list(self, service, owner):
        result = await service.list_documents(owner.uuid)
        assert result == {"documents": [], "page": 1, "total_pages": 0, "total": 0}

    @pytest.mark.parametrize("page, limit", [(0, 10), (-1, 10), (1, 0), (1, -5), (1, 101)])
    async def test_invalid_paging(self, service, owner, page, limit):
        with pytest.raises(ValidationError):
            await service.list_documents(owner.uuid, page=page, limit=limit)

    async def test_page_beyond_last(self, service, owner):
        await service.create_document("only", "", owner.uuid)
        with pytest.raises(ValidationError):
            await service.list_documents(owner.uuid, page=2, limit=10)


class TestDocumentAccess:

    async def test_only_owner_is_authorized(self, service, owner, stranger):
        document, _ = await service.create_document("Doc", "", owner.uuid)
        access = DocumentAccess(document)

        assert access.is_owner(owner.uuid)
        assert not access.is_owner(stranger.uuid)
        assert not access.is_owner(None)

        access.authorize(owner.uuid)
        with pytest.raises(AccessDeniedError):
            access.authorize(stranger.uuid)
