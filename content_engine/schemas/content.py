"""
Input schemas for the lifecycle engine

Enumerated fields are normalized case-insensitively on the way in; an
unsupported value raises content_engine.exceptions.ValidationError rather than
a pydantic error so callers see one error type for bad input.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from content_engine.exceptions import ValidationError
from content_engine.models.enums import ContentMode, FileType, Language, PublishStatus, WorkflowStatus
from content_engine.utils.normalize import (
    normalize_file_type,
    normalize_language,
    normalize_mode,
    normalize_publish_status,
    normalize_workflow_status,
)


class MetaTagIn(BaseModel):
    title: str = Field("", description="SEO title")
    description: str = Field("", description="SEO description")
    cover_image: str = Field("", description="Social sharing image URL")


class ComponentIn(BaseModel):
    component_type: str = Field(..., description="Renderer key of the block")
    props: dict[str, Any] = Field(default_factory=dict, description="Opaque block properties")


class ContentFileIn(BaseModel):
    name: str
    download_url: str
    file_type: FileType

    @field_validator("file_type", mode="before")
    @classmethod
    def validate_file_type(cls, value):
        return normalize_file_type(value)


class RevisionIn(BaseModel):
    publish_status: PublishStatus = PublishStatus.UNPUBLISHED
    author: str = ""
    message: str = ""
    description: str = ""

    @field_validator("publish_status", mode="before")
    @classmethod
    def validate_publish_status(cls, value):
        return normalize_publish_status(value)


class CategoryRef(BaseModel):
    """Either an existing category id, or a (type_code, name) pair resolved on the fly."""

    id: Optional[uuid.UUID] = None
    type_code: Optional[str] = None
    name: Optional[str] = None
    language: Optional[Language] = None

    @field_validator("language", mode="before")
    @classmethod
    def validate_language(cls, value):
        return None if value is None else normalize_language(value)

    @model_validator(mode="after")
    def check_reference(self):
        if self.id is None and not (self.type_code and self.name):
            raise ValidationError("Category reference needs an id or a type_code and name", field="categories")
        return self


class ContentBase(BaseModel):
    language: Language = Language.TH
    mode: ContentMode = ContentMode.DRAFT
    workflow_status: WorkflowStatus = WorkflowStatus.DRAFT
    publish_status: PublishStatus = PublishStatus.UNPUBLISHED

    title: str = ""
    html_input: str = ""
    url_alias: str = ""
    authored_at: Optional[datetime] = None
    authored_on: Optional[datetime] = None
    publish_on: Optional[datetime] = None
    unpublish_on: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    approval_email: list[str] = Field(default_factory=list, description="Approvers notified at the approval gate")

    meta_tag: MetaTagIn = Field(default_factory=MetaTagIn)
    revision: Optional[RevisionIn] = None
    categories: list[CategoryRef] = Field(default_factory=list)
    components: list[ComponentIn] = Field(default_factory=list)

    @field_validator("language", mode="before")
    @classmethod
    def validate_language(cls, value):
        return normalize_language(value)

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, value):
        return normalize_mode(value)

    @field_validator("workflow_status", mode="before")
    @classmethod
    def validate_workflow_status(cls, value):
        return normalize_workflow_status(value)

    @field_validator("publish_status", mode="before")
    @classmethod
    def validate_publish_status(cls, value):
        return normalize_publish_status(value)

    @field_validator("approval_email", mode="before")
    @classmethod
    def split_approval_email(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [address.strip() for address in value.split(",") if address.strip()]
        return value


class LandingContentIn(ContentBase):
    files: list[ContentFileIn] = Field(default_factory=list)


class PartnerContentIn(ContentBase):
    url: str = ""
    thumbnail_image: str = ""
    thumbnail_alt_text: str = ""
    company_logo: str = ""
    company_alt_text: str = ""
    company_name: str = ""
    company_detail: str = ""
    lead_body: str = ""
    challenges: str = ""
    solutions: str = ""
    results: str = ""
    is_recommended: bool = False


class FaqContentIn(ContentBase):
    url: str = ""


class ContentFilter(BaseModel):
    """Listing filters for find_pages; every filter is optional and combined with AND."""

    title: Optional[str] = None
    url_alias: Optional[str] = None
    workflow_status: Optional[WorkflowStatus] = None
    category_keyword: Optional[str] = None

    @field_validator("workflow_status", mode="before")
    @classmethod
    def validate_workflow_status(cls, value):
        return None if value in (None, "") else normalize_workflow_status(value)
