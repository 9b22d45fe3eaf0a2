from sqlalchemy import Column, String, Text, Integer, Boolean, ForeignKey, JSON, Uuid, Index
from sqlalchemy.orm import relationship

from docversion.db.base import BaseModel


class Document(BaseModel):
    __tablename__ = "documents"

    name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False, default=1)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.uuid"), nullable=False, index=True)

    # Relationships
    owner = relationship("User", back_populates="owned_documents")
    versions = relationship("DocumentVersion", back_populates="document", cascade="all, delete-orphan")


class DocumentVersion(BaseModel):
    __tablename__ = "document_versions"
    __table_args__ = (
        Index("ix_document_versions_document_number", "document_id", "version_number", unique=True),
    )

    document_id = Column(Uuid(as_uuid=True), ForeignKey("documents.uuid"), nullable=False)
    version_number = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    is_auto_save = Column(Boolean, nullable=False, default=False)
    diff = Column(JSON, nullable=False, default=list)
    merged_from_version_id = Column(Uuid(as_uuid=True), ForeignKey("document_versions.uuid"), nullable=True)
    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.uuid"), nullable=True)

    # Relationships
    document = relationship("Document", back_populates="versions")
    author = relationship("User")
