"""
Pydantic schemas for documents and folders
"""

from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator

from codecollab.schemas.common import CamelModel, NonBlankStr


class DocumentCreate(CamelModel):
    """Schema for creating a document, at the project root or inside a folder"""
    project_id: str = Field(..., min_length=1)
    folder_id: Optional[str] = None
    name: NonBlankStr = Field(..., max_length=255)
    language: str = Field("javascript", max_length=50)

    @field_validator("language")
    @classmethod
    def lower_language(cls, value: str) -> str:
        return (value or "javascript").strip().lower() or "javascript"


class DocumentRename(CamelModel):
    name: NonBlankStr = Field(..., max_length=255)


class DocumentMove(CamelModel):
    folder_id: Optional[str] = None


class DocumentContentUpdate(CamelModel):
    content: str


class DocumentResponse(CamelModel):
    id: str
    project_id: str
    folder_id: Optional[str] = None
    name: str
    language: str
    content: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FolderCreate(CamelModel):
    project_id: str = Field(..., min_length=1)
    name: NonBlankStr = Field(..., max_length=255)
    parent_id: Optional[str] = None


class FolderRename(CamelModel):
    name: NonBlankStr = Field(..., max_length=255)


class FolderResponse(CamelModel):
    id: str
    name: str
    project_id: str
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FolderTreeResponse(FolderResponse):
    """Folder with its direct children and documents"""
    children: List[FolderResponse] = []
    documents: List[DocumentResponse] = []
