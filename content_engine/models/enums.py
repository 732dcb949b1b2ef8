"""
Enumerations shared by the content models

Values are the exact strings stored in the database and exchanged with
editors; parsing from loose input lives in content_engine.utils.normalize.
"""

import enum


class Language(str, enum.Enum):
    """Supported content languages."""

    TH = "th"
    EN = "en"

    @property
    def other(self) -> "Language":
        return Language.EN if self is Language.TH else Language.TH


class ContentMode(str, enum.Enum):
    """Slot a content row occupies for its (page, language)."""

    PUBLISHED = "Published"
    PREVIEW = "Preview"
    HISTORIES = "Histories"  # Superseded rows, never updated in place
    DRAFT = "Draft"


class PublishStatus(str, enum.Enum):
    UNPUBLISHED = "UnPublished"
    PUBLISHED = "Published"


class WorkflowStatus(str, enum.Enum):
    """Editorial process state, independent of the slot."""

    DRAFT = "Draft"
    APPROVAL_PENDING = "Approval_Pending"
    WAITING_DESIGN_APPROVED = "Waiting_Design_Approved"  # Approval gate
    SCHEDULE = "Schedule"
    PUBLISHED = "Published"
    UNPUBLISHED = "UnPublished"
    WAITING_DELETION = "Waiting_Deletion"
    DELETE = "Delete"


class FileType(str, enum.Enum):
    CSS = "CSS"
    JS = "JS"


def enum_values(enum_cls):
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]
