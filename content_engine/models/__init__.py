from .category import (
    Category,
    CategoryType,
    faq_content_categories,
    landing_content_categories,
    partner_content_categories,
)
from .component import Component
from .content import FaqContent, LandingContent, PartnerContent
from .content_file import LandingContentFile
from .email import EmailCategory, EmailContent
from .enums import ContentMode, FileType, Language, PublishStatus, WorkflowStatus
from .meta_tag import MetaTag
from .page import FaqPage, LandingPage, PartnerPage
from .revision import Revision

__all__ = [
    "Category",
    "CategoryType",
    "Component",
    "ContentMode",
    "EmailCategory",
    "EmailContent",
    "FaqContent",
    "FaqPage",
    "FileType",
    "LandingContent",
    "LandingContentFile",
    "LandingPage",
    "Language",
    "MetaTag",
    "PartnerContent",
    "PartnerPage",
    "PublishStatus",
    "Revision",
    "WorkflowStatus",
    "faq_content_categories",
    "landing_content_categories",
    "partner_content_categories",
]
