"""
Exception classes for the content engine

Every error raised by the lifecycle engine derives from CMSException and
carries an HTTP-flavoured status code so an outer API layer can turn it into
a consistent error response (see exception_handlers.py).
"""

from typing import Any

from fastapi import status


class CMSException(Exception):
    """Base exception class for all content engine exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class NotFoundError(CMSException):
    """Base class for resource not found errors"""

    def __init__(self, resource_type: str, resource_id: Any | None = None, message: str | None = None):
        if message is None:
            message = f"{resource_type} not found"
            if resource_id is not None:
                message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": str(resource_id) if resource_id else None},
        )


class PageNotFoundError(NotFoundError):
    """Raised when a page is not found"""

    def __init__(self, page_id: Any | None = None):
        super().__init__(resource_type="Page", resource_id=page_id)


class ContentNotFoundError(NotFoundError):
    """Raised when content is not found"""

    def __init__(self, content_id: Any | None = None, message: str | None = None):
        super().__init__(resource_type="Content", resource_id=content_id, message=message)


class RevisionNotFoundError(NotFoundError):
    """Raised when a revision is not found"""

    def __init__(self, revision_id: Any | None = None):
        super().__init__(resource_type="Revision", resource_id=revision_id)


class CategoryNotFoundError(NotFoundError):
    """Raised when a category is not found"""

    def __init__(self, category_id: Any | None = None):
        super().__init__(resource_type="Category", resource_id=category_id)


# ============================================================================
# Validation & Conflict Exceptions
# ============================================================================


class ValidationError(CMSException):
    """Raised when an identifier or enumerated value is malformed or unsupported"""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


class ConflictError(CMSException):
    """Raised when a write collides with existing state"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT, details=details or {})


class DuplicateURLError(ConflictError):
    """Raised when a URL or URL alias is already used by another page of the same kind"""

    def __init__(self, field: str, value: Any):
        super().__init__(
            message=f"Content with {field} '{value}' already exists",
            details={"field": field, "value": value},
        )


# ============================================================================
# Store & Service Exceptions
# ============================================================================


class InternalError(CMSException):
    """Raised when the store or a collaborating service fails"""

    def __init__(self, message: str = "An internal error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
