"""
Revision Ledger

Revisions are append-only: one is written alongside every non-preview content
row and none is ever modified. This service builds new entries and reads the
history of a page.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from content_engine.exceptions import PageNotFoundError, RevisionNotFoundError
from content_engine.models.enums import PublishStatus
from content_engine.models.revision import Revision
from content_engine.schemas.content import RevisionIn
from content_engine.services.content_kinds import ContentDescriptor
from content_engine.utils.normalize import normalize_language, parse_uuid, validate_model

logger = logging.getLogger(__name__)

DEFAULT_REVISION_MESSAGE = "Created"


def build_revision(payload: Optional[RevisionIn], publish_status: PublishStatus) -> Revision:
    """New, unattached revision; a missing payload yields the default entry."""
    if payload is None:
        return Revision(author="", message=DEFAULT_REVISION_MESSAGE, publish_status=publish_status)
    if not isinstance(payload, RevisionIn):
        payload = validate_model(RevisionIn, payload, "revision")
    return Revision(
        publish_status=payload.publish_status,
        author=payload.author,
        message=payload.message,
        description=payload.description,
    )


class RevisionService:
    """Read side of the revision ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_revision(self, descriptor: ContentDescriptor, revision_id) -> Revision:
        """Load a revision owned by a content row of the given kind."""
        revision_id = parse_uuid(revision_id, "revision_id")
        owner = getattr(Revision, descriptor.owner_column)

        result = await self.db.execute(select(Revision).where(Revision.id == revision_id, owner.is_not(None)))
        revision = result.scalars().first()
        if revision is None:
            raise RevisionNotFoundError(revision_id)
        return revision

    async def find_revisions(self, descriptor: ContentDescriptor, page_id, language) -> list[Revision]:
        """Every revision of a page in one language, newest first."""
        page_id = parse_uuid(page_id, "page_id")
        language = normalize_language(language)

        page = await self.db.get(descriptor.page_model, page_id)
        if page is None:
            raise PageNotFoundError(page_id)

        model = descriptor.content_model
        owner = getattr(Revision, descriptor.owner_column)
        content_ids = select(model.id).where(model.page_id == page_id, model.language == language)

        result = await self.db.execute(
            select(Revision).where(owner.in_(content_ids)).order_by(Revision.created_at.desc())
        )
        revisions = list(result.scalars().all())
        logger.debug("Loaded %d revisions for %s page %s (%s)", len(revisions), descriptor.kind, page_id, language.value)
        return revisions
