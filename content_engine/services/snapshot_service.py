"""
Content Snapshot Store

Store-level primitives the lifecycle engine composes into transactions:
slot lookups, compare-and-set retirement of a row to Histories, URL
uniqueness checks, building new rows with their owned associations, deep
copies of existing rows and the explicit delete cascade.

Nothing here commits; callers wrap the calls in ``transactional``.
"""

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from content_engine.exceptions import ConflictError, ContentNotFoundError, DuplicateURLError, PageNotFoundError
from content_engine.models.category import Category
from content_engine.models.component import Component
from content_engine.models.content_file import LandingContentFile
from content_engine.models.enums import ContentMode, Language
from content_engine.models.meta_tag import MetaTag
from content_engine.models.revision import Revision
from content_engine.schemas.content import ComponentIn, ContentFileIn, MetaTagIn
from content_engine.services.content_kinds import ContentDescriptor

logger = logging.getLogger(__name__)

CURRENT_MODES = (ContentMode.DRAFT, ContentMode.PUBLISHED)


class ContentSnapshotStore:
    """Row-level operations on the content tables of one kind."""

    def __init__(self, db: AsyncSession, descriptor: ContentDescriptor):
        self.db = db
        self.descriptor = descriptor
        self.model = descriptor.content_model

    # ============== Reads ==============

    async def get_content(self, content_id: uuid.UUID):
        """Content row in any mode with every association loaded."""
        result = await self.db.execute(select(self.model).where(self.model.id == content_id))
        content = result.scalars().first()
        if content is None:
            raise ContentNotFoundError(content_id)
        return content

    async def find_slot(self, page_id: uuid.UUID, language: Language, mode: ContentMode):
        result = await self.db.execute(
            select(self.model).where(
                self.model.page_id == page_id,
                self.model.language == language,
                self.model.mode == mode,
            )
        )
        return result.scalars().first()

    async def find_latest(self, page_id: uuid.UUID, language: Language):
        result = await self.db.execute(
            select(self.model)
            .where(self.model.page_id == page_id, self.model.language == language)
            .order_by(self.model.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def page_exists(self, page_id: uuid.UUID) -> bool:
        page_model = self.descriptor.page_model
        result = await self.db.execute(select(func.count()).select_from(page_model).where(page_model.id == page_id))
        return result.scalar_one() > 0

    async def load_page(self, page_id: uuid.UUID):
        """Page with its current (Draft and Published) contents attached."""
        page_model = self.descriptor.page_model
        result = await self.db.execute(
            select(page_model)
            .where(page_model.id == page_id)
            .options(selectinload(page_model.contents.and_(self.model.mode.in_(CURRENT_MODES))))
            .execution_options(populate_existing=True)
        )
        page = result.scalars().first()
        if page is None:
            raise PageNotFoundError(page_id)
        return page

    async def hydrate(self, content_id: uuid.UUID):
        """Reload a row after commit so every association reflects the store."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == content_id).execution_options(populate_existing=True)
        )
        return result.scalars().one()

    # ============== Guards ==============

    async def check_unique_urls(self, values: dict[str, Any], exclude_page_id: Optional[uuid.UUID] = None) -> None:
        """
        Reject URL fields already used by another page of this kind.

        Empty values are never compared.

        Raises:
            DuplicateURLError: If any unique field collides
        """
        for field in self.descriptor.unique_fields:
            value = values.get(field)
            if not value:
                continue
            column = getattr(self.model, field)
            stmt = select(self.model.id).where(column == value).limit(1)
            if exclude_page_id is not None:
                stmt = stmt.where(self.model.page_id != exclude_page_id)
            result = await self.db.execute(stmt)
            if result.first() is not None:
                raise DuplicateURLError(field, value)

    # ============== Slot transitions ==============

    async def retire(self, content_id: uuid.UUID, expected_mode: ContentMode) -> None:
        """
        Flip one row to Histories if it still occupies ``expected_mode``.

        Raises:
            ConflictError: If another writer retired or moved the row first
        """
        result = await self.db.execute(
            update(self.model)
            .where(self.model.id == content_id, self.model.mode == expected_mode)
            .values(mode=ContentMode.HISTORIES)
        )
        if result.rowcount != 1:
            raise ConflictError(
                "Content was modified by another editor",
                details={"content_id": str(content_id), "expected_mode": expected_mode.value},
            )
        logger.debug(f"Retired {self.descriptor.kind} content {content_id} from {expected_mode.value}")

    async def vacate_slot(
        self,
        page_id: uuid.UUID,
        language: Language,
        mode: ContentMode,
        keep_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Retire whatever row holds a slot so a new row can take it."""
        stmt = (
            update(self.model)
            .where(self.model.page_id == page_id, self.model.language == language, self.model.mode == mode)
            .values(mode=ContentMode.HISTORIES)
        )
        if keep_id is not None:
            stmt = stmt.where(self.model.id != keep_id)
        result = await self.db.execute(stmt)
        return result.rowcount

    async def touch_page(self, page_id: uuid.UUID) -> None:
        page_model = self.descriptor.page_model
        await self.db.execute(
            update(page_model).where(page_model.id == page_id).values(updated_at=datetime.now(timezone.utc))
        )

    # ============== Writes ==============

    def build_content(
        self,
        page_id: uuid.UUID,
        language: Language,
        mode: ContentMode,
        values: dict[str, Any],
        meta_tag: MetaTag,
        components: Iterable[Component] = (),
        categories: Iterable[Category] = (),
        revision: Optional[Revision] = None,
        files: Iterable[LandingContentFile] = (),
    ):
        """Add a new content row and its owned associations to the session."""
        content = self.model(id=uuid.uuid4(), page_id=page_id, language=language, mode=mode, **values)
        content.meta_tag = meta_tag
        content.components = list(components)
        content.categories = list(categories)
        content.revision = revision
        if self.descriptor.has_files:
            content.files = list(files)
        self.db.add(content)
        return content

    def body_values(self, body) -> dict[str, Any]:
        """Scalar body columns from an input schema or an existing row."""
        values = {field: getattr(body, field) for field in self.descriptor.body_fields}
        values["approval_email"] = list(values.get("approval_email") or [])
        return values

    @staticmethod
    def new_meta_tag(meta_tag: MetaTagIn) -> MetaTag:
        return MetaTag(title=meta_tag.title, description=meta_tag.description, cover_image=meta_tag.cover_image)

    @staticmethod
    def new_components(components: Iterable[ComponentIn]) -> list[Component]:
        return [
            Component(component_type=component.component_type, props=dict(component.props), position=position)
            for position, component in enumerate(components)
        ]

    @staticmethod
    def new_files(files: Iterable[ContentFileIn]) -> list[LandingContentFile]:
        return [LandingContentFile(name=f.name, download_url=f.download_url, file_type=f.file_type) for f in files]

    def copy_files(self, content) -> list[LandingContentFile]:
        if not self.descriptor.has_files:
            return []
        return [f.clone() for f in content.files]

    async def replace_components(self, content, components: Iterable[ComponentIn]) -> None:
        """Delete a row's components and insert fresh ones, keeping the row id."""
        owner = getattr(Component, self.descriptor.owner_column)
        await self.db.execute(delete(Component).where(owner == content.id))
        for component in self.new_components(components):
            setattr(component, self.descriptor.owner_column, content.id)
            self.db.add(component)

    async def replace_files(self, content, files: Iterable[ContentFileIn]) -> None:
        await self.db.execute(delete(LandingContentFile).where(LandingContentFile.landing_content_id == content.id))
        for content_file in self.new_files(files):
            content_file.landing_content_id = content.id
            self.db.add(content_file)

    # ============== Delete cascade ==============

    async def delete_contents(self, content_ids: list[uuid.UUID]) -> None:
        """Remove rows with everything they own; shared categories stay."""
        if not content_ids:
            return

        owner_column = self.descriptor.owner_column
        result = await self.db.execute(select(self.model.meta_tag_id).where(self.model.id.in_(content_ids)))
        meta_tag_ids = list(result.scalars().all())

        await self.db.execute(delete(Component).where(getattr(Component, owner_column).in_(content_ids)))
        await self.db.execute(
            delete(self.descriptor.category_table).where(self.descriptor.category_owner_column.in_(content_ids))
        )
        await self.db.execute(delete(Revision).where(getattr(Revision, owner_column).in_(content_ids)))
        if self.descriptor.has_files:
            await self.db.execute(
                delete(LandingContentFile).where(LandingContentFile.landing_content_id.in_(content_ids))
            )
        await self.db.execute(delete(self.model).where(self.model.id.in_(content_ids)))
        if meta_tag_ids:
            await self.db.execute(delete(MetaTag).where(MetaTag.id.in_(meta_tag_ids)))

        logger.info(f"Deleted {len(content_ids)} {self.descriptor.kind} content row(s)")

    async def content_ids_for_page(self, page_id: uuid.UUID) -> list[uuid.UUID]:
        result = await self.db.execute(select(self.model.id).where(self.model.page_id == page_id))
        return list(result.scalars().all())
