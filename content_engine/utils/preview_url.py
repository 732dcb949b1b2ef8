import posixpath
import uuid
from urllib.parse import SplitResult, urlencode, urlsplit, urlunsplit

from content_engine.exceptions import ValidationError


def parse_preview_base(base: str) -> SplitResult:
    """Split the configured preview base; it must be an absolute URL."""
    parts = urlsplit(base or "")
    if not parts.scheme or not parts.netloc:
        raise ValidationError(f"Invalid preview base url '{base}'", field="preview_base_url")
    return parts


def build_preview_url(base: str, language: str, kind: str, content_id: uuid.UUID) -> str:
    """
    Build the public preview link for a content row.

    >>> build_preview_url("https://web.example", "en", "landing", uuid.UUID(int=1))
    'https://web.example/preview/en/landing?id=00000000-0000-0000-0000-000000000001'
    """
    parts = parse_preview_base(base)
    path = posixpath.join(parts.path or "/", "preview", language, kind)
    query = urlencode({"id": str(content_id)})
    return urlunsplit((parts.scheme, parts.netloc, path, query, ""))
