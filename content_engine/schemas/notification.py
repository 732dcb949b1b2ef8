import uuid
from typing import Optional

from pydantic import BaseModel, Field

from content_engine.models.enums import Language


class SendEmailRequest(BaseModel):
    """Request handed to the email service for one template."""

    email_category: str = Field(..., description="Template category title, e.g. 'Approve'")
    content_label: str = Field(..., description="Template label within the category")
    language: Language
    recipients: list[str] = Field(default_factory=list)
    data: dict[str, str] = Field(default_factory=dict, description="Template variables")


class ApprovalNotification(BaseModel):
    """Job queued after a content row enters the approval gate."""

    kind: str
    page_id: uuid.UUID
    content_id: uuid.UUID
    language: Language
    title: str = ""
    approval_email: list[str] = Field(default_factory=list)
    author: Optional[str] = None
