"""
Case-insensitive parsing of identifiers and enumerated values

Editors and upstream callers send "EN", "draft" or "published"; every value
is folded onto the canonical enum member before it reaches the store.
"""

import uuid
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from content_engine.exceptions import ValidationError
from content_engine.models.enums import ContentMode, FileType, Language, PublishStatus, WorkflowStatus

E = TypeVar("E", bound=Enum)
M = TypeVar("M", bound=BaseModel)


def _normalize(value: Any, enum_cls: type[E], field: str) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        folded = value.strip().casefold()
        for member in enum_cls:
            if member.value.casefold() == folded:
                return member
    raise ValidationError(
        f"Invalid {field} '{value}'",
        field=field,
        details={"allowed": [member.value for member in enum_cls]},
    )


def normalize_language(value: Any) -> Language:
    return _normalize(value, Language, "language")


def normalize_mode(value: Any) -> ContentMode:
    return _normalize(value, ContentMode, "mode")


def normalize_workflow_status(value: Any) -> WorkflowStatus:
    return _normalize(value, WorkflowStatus, "workflow_status")


def normalize_publish_status(value: Any) -> PublishStatus:
    return _normalize(value, PublishStatus, "publish_status")


def normalize_file_type(value: Any) -> FileType:
    return _normalize(value, FileType, "file_type")


def parse_uuid(value: Any, field: str = "id") -> uuid.UUID:
    """Accept a UUID or its string form; anything else is a ValidationError."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"Invalid {field} '{value}'", field=field)


def validate_model(schema: type[M], data: Any, label: str) -> M:
    """Validate ``data`` against ``schema``; schema errors become ValidationError."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        field = ".".join(str(part) for part in errors[0]["loc"]) if errors and errors[0]["loc"] else None
        raise ValidationError(f"Invalid {label}", field=field, details={"errors": errors}) from e
