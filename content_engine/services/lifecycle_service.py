"""
Lifecycle Engine

Create, edit, preview, publish, revert, duplicate and delete content for one
page kind. Every write is a single transaction; the approval notification is
submitted only after the update has committed.

Slot rules:
- per (page, language) at most one Draft, one Preview and one Published row
- Histories rows are frozen; an edit retires the edited row and inserts a new one
- every non-preview row is written together with its revision
"""

import logging
import secrets
import string
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from content_engine.config import settings
from content_engine.exceptions import (
    ConflictError,
    ContentNotFoundError,
    PageNotFoundError,
    ValidationError,
)
from content_engine.models.category import Category, CategoryType
from content_engine.models.enums import ContentMode, PublishStatus, WorkflowStatus
from content_engine.schemas.content import ContentBase, ContentFilter, RevisionIn
from content_engine.schemas.notification import ApprovalNotification
from content_engine.services.category_service import CategoryService
from content_engine.services.content_kinds import ContentDescriptor, get_content_kind
from content_engine.services.notification_service import get_notification_dispatcher
from content_engine.services.revision_service import RevisionService, build_revision
from content_engine.services.snapshot_service import CURRENT_MODES, ContentSnapshotStore
from content_engine.utils.normalize import normalize_language, normalize_mode, parse_uuid, validate_model
from content_engine.utils.preview_url import build_preview_url, parse_preview_base
from content_engine.utils.transaction import transactional

logger = logging.getLogger(__name__)

CATEGORY_KEYWORDS_TYPE = "category_keywords"
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits

SORTABLE_CONTENT_COLUMNS = {"title": "title", "url_alias": "url_alias", "status": "workflow_status"}
SORTABLE_PAGE_COLUMNS = {"created_at": "created_at", "updated_at": "updated_at"}


def random_suffix(length: int = 3) -> str:
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


class LifecycleService:
    """Content lifecycle for one page kind (landing, partner or faq)."""

    def __init__(self, db: AsyncSession, kind, dispatcher=None):
        self.db = db
        self.descriptor: ContentDescriptor = get_content_kind(kind)
        self.store = ContentSnapshotStore(db, self.descriptor)
        self.categories = CategoryService(db)
        self.revisions = RevisionService(db)
        self.dispatcher = dispatcher if dispatcher is not None else get_notification_dispatcher()

    # ============== Create ==============

    async def create_page(self, contents: list[Any]):
        """
        Create a page with one or more contents.

        Args:
            contents: Content bodies (schemas or mappings), one per (language, mode) slot

        Returns:
            The new page with its current contents

        Raises:
            ValidationError: If no content is given, a body targets Preview/Histories,
                or two bodies claim the same slot
            DuplicateURLError: If a URL field is already taken by another page
        """
        if not contents:
            raise ValidationError("At least one content is required to create a page", field="contents")

        bodies = [self.descriptor.validate_body(body) for body in contents]
        slots = set()
        for body in bodies:
            self._check_target_mode(body.mode)
            slot = (body.language, body.mode)
            if slot in slots:
                raise ValidationError(
                    f"More than one {body.mode.value} content for language '{body.language.value}'",
                    field="contents",
                )
            slots.add(slot)

        page_id = uuid.uuid4()
        async with transactional(self.db, "create_page"):
            for body in bodies:
                await self.store.check_unique_urls(self.store.body_values(body))

            self.db.add(self.descriptor.page_model(id=page_id))
            await self.db.flush()

            for body in bodies:
                await self._insert_from_body(page_id, body.language, body.mode, body)

        logger.info(f"Created {self.descriptor.kind} page {page_id} with {len(bodies)} content(s)")
        return await self.store.load_page(page_id)

    # ============== Update ==============

    async def update_content(self, content_id, body):
        """
        Replace a content row with a new version.

        The edited row moves to Histories and a new row takes the target slot
        with fresh associations. Page and language come from the edited row.

        Raises:
            ContentNotFoundError: If the row does not exist
            ConflictError: If the row was already superseded
            ValidationError: If the row is a preview or the target mode is not Draft/Published
        """
        content_id = parse_uuid(content_id, "content_id")
        body = self.descriptor.validate_body(body)
        self._check_target_mode(body.mode)

        async with transactional(self.db, "update_content"):
            existing = await self.store.get_content(content_id)
            if existing.mode == ContentMode.HISTORIES:
                raise ConflictError(
                    "Content has already been superseded by a newer version",
                    details={"content_id": str(content_id)},
                )
            if existing.mode == ContentMode.PREVIEW:
                raise ValidationError("Preview content can only be changed through preview", field="mode")

            page_id, language, previous_mode = existing.page_id, existing.language, existing.mode
            await self.store.check_unique_urls(self.store.body_values(body), exclude_page_id=page_id)

            await self.store.retire(content_id, previous_mode)
            if body.mode != previous_mode:
                await self.store.vacate_slot(page_id, language, body.mode)

            content = await self._insert_from_body(page_id, language, body.mode, body)
            await self.store.touch_page(page_id)
            new_id = content.id

        content = await self.store.hydrate(new_id)
        logger.info(
            f"Updated {self.descriptor.kind} content {content_id} -> {content.id} "
            f"({language.value}, {content.mode.value}, {content.workflow_status.value})"
        )

        if content.workflow_status == WorkflowStatus.WAITING_DESIGN_APPROVED and content.approval_email:
            self._notify_approval(content)

        return content

    def _notify_approval(self, content) -> None:
        try:
            self.dispatcher.submit(
                ApprovalNotification(
                    kind=self.descriptor.kind,
                    page_id=content.page_id,
                    content_id=content.id,
                    language=content.language,
                    title=content.title,
                    approval_email=list(content.approval_email),
                    author=content.revision.author if content.revision else None,
                )
            )
        except Exception:
            logger.exception(f"Could not submit approval notification for content {content.id}")

    # ============== Revert & duplicate ==============

    async def revert_content(self, revision_id, revision: Optional[RevisionIn]):
        """
        Make the content captured by a revision the live draft again.

        Raises:
            RevisionNotFoundError: If the revision does not exist for this kind
            ValidationError: If no new revision is supplied
        """
        if revision is None:
            raise ValidationError("A revision is required to revert content", field="revision")

        async with transactional(self.db, "revert_content"):
            source_revision = await self.revisions.get_revision(self.descriptor, revision_id)
            source_revision_id = source_revision.id
            snapshot = await self.store.get_content(getattr(source_revision, self.descriptor.owner_column))
            page_id, language = snapshot.page_id, snapshot.language

            values = self.store.body_values(snapshot)
            meta_tag = snapshot.meta_tag.clone()
            components = [component.clone() for component in snapshot.components]
            files = self.store.copy_files(snapshot)
            categories = list(snapshot.categories)

            await self.store.vacate_slot(page_id, language, ContentMode.DRAFT)
            content = self.store.build_content(
                page_id,
                language,
                ContentMode.DRAFT,
                values,
                meta_tag=meta_tag,
                components=components,
                categories=categories,
                revision=build_revision(revision, snapshot.publish_status),
                files=files,
            )
            await self.db.flush()
            new_id = content.id

        logger.info(f"Reverted {self.descriptor.kind} page {page_id} ({language.value}) to revision {source_revision_id}")
        return await self.store.hydrate(new_id)

    async def duplicate_content_to_language(self, content_id, revision: Optional[RevisionIn]):
        """
        Clone a content row into the other language as a new draft.

        Components are not copied.
        """
        content_id = parse_uuid(content_id, "content_id")
        if revision is None:
            raise ValidationError("A revision is required to duplicate content", field="revision")

        async with transactional(self.db, "duplicate_content_to_language"):
            source = await self.store.get_content(content_id)
            target = source.language.other

            await self.store.vacate_slot(source.page_id, target, ContentMode.DRAFT)
            content = self.store.build_content(
                source.page_id,
                target,
                ContentMode.DRAFT,
                self.store.body_values(source),
                meta_tag=source.meta_tag.clone(),
                categories=list(source.categories),
                revision=build_revision(revision, source.publish_status),
            )
            await self.db.flush()
            new_id = content.id

        logger.info(f"Duplicated {self.descriptor.kind} content {content_id} to '{target.value}' as {new_id}")
        return await self.store.hydrate(new_id)

    async def duplicate_page(self, page_id):
        """
        Copy a page and its current contents into a new page.

        URL fields get a random "-xxx" suffix so the copy stays unique.

        Raises:
            PageNotFoundError: If the page does not exist
            ValidationError: If the page has no current content
        """
        page_id = parse_uuid(page_id, "page_id")
        new_page_id = uuid.uuid4()

        async with transactional(self.db, "duplicate_page"):
            source = await self.store.load_page(page_id)
            if not source.contents:
                raise ValidationError("Page has no content to duplicate", field="page_id")

            self.db.add(self.descriptor.page_model(id=new_page_id))
            await self.db.flush()

            suffix = random_suffix()
            for original in source.contents:
                values = self.store.body_values(original)
                for position, field in enumerate(self.descriptor.unique_fields):
                    if position == 0 or values.get(field):
                        values[field] = f"{values.get(field) or ''}-{suffix}"
                await self.store.check_unique_urls(values, exclude_page_id=new_page_id)

                revision = original.revision.clone() if original.revision else build_revision(None, original.publish_status)
                self.store.build_content(
                    new_page_id,
                    original.language,
                    original.mode,
                    values,
                    meta_tag=original.meta_tag.clone(),
                    components=[component.clone() for component in original.components],
                    categories=list(original.categories),
                    revision=revision,
                    files=self.store.copy_files(original),
                )
            await self.db.flush()

        logger.info(f"Duplicated {self.descriptor.kind} page {page_id} as {new_page_id}")
        return await self.store.load_page(new_page_id)

    # ============== Preview ==============

    async def preview_content(self, page_id, language, body) -> str:
        """
        Write the page's preview row for a language and return its public link.

        Calling it again for the same (page, language) replaces the preview in
        place; the row id, and therefore the link, stays the same.
        """
        page_id = parse_uuid(page_id, "page_id")
        language = normalize_language(language)
        body = self.descriptor.validate_body(body)
        parse_preview_base(settings.preview_base_url)

        values = self.store.body_values(body)
        now = datetime.now(timezone.utc)
        values.update(
            publish_status=PublishStatus.UNPUBLISHED,
            workflow_status=WorkflowStatus.UNPUBLISHED,
            expired_at=now + timedelta(minutes=settings.preview_ttl_minutes),
            updated_at=now,
        )

        async with transactional(self.db, "preview_content"):
            if not await self.store.page_exists(page_id):
                raise PageNotFoundError(page_id)
            await self.store.check_unique_urls(values, exclude_page_id=page_id)

            preview = await self.store.find_slot(page_id, language, ContentMode.PREVIEW)
            if preview is None:
                preview = self.store.build_content(
                    page_id,
                    language,
                    ContentMode.PREVIEW,
                    values,
                    meta_tag=self.store.new_meta_tag(body.meta_tag),
                    components=self.store.new_components(body.components),
                    files=self.store.new_files(getattr(body, "files", [])),
                )
            else:
                for field, value in values.items():
                    setattr(preview, field, value)
                preview.meta_tag.title = body.meta_tag.title
                preview.meta_tag.description = body.meta_tag.description
                preview.meta_tag.cover_image = body.meta_tag.cover_image
                await self.store.replace_components(preview, body.components)
                if self.descriptor.has_files:
                    await self.store.replace_files(preview, body.files)
            await self.db.flush()
            preview_id = preview.id

        logger.info(f"Saved {self.descriptor.kind} preview {preview_id} for page {page_id} ({language.value})")
        return build_preview_url(settings.preview_base_url, language.value, self.descriptor.path_segment, preview_id)

    # ============== Delete ==============

    async def delete_page(self, page_id) -> None:
        """Delete a page and every content row it owns, in any mode."""
        page_id = parse_uuid(page_id, "page_id")
        page_model = self.descriptor.page_model

        async with transactional(self.db, "delete_page"):
            if not await self.store.page_exists(page_id):
                raise PageNotFoundError(page_id)
            await self.store.delete_contents(await self.store.content_ids_for_page(page_id))
            await self.db.execute(delete(page_model).where(page_model.id == page_id))

        logger.info(f"Deleted {self.descriptor.kind} page {page_id}")

    async def delete_content(self, page_id, language, mode) -> None:
        """
        Delete the single content row in a slot.

        Histories is not a slot and cannot be targeted; history goes away with
        the page.
        """
        page_id = parse_uuid(page_id, "page_id")
        language = normalize_language(language)
        mode = normalize_mode(mode)
        if mode == ContentMode.HISTORIES:
            raise ValidationError("Histories content cannot be deleted individually", field="mode")

        async with transactional(self.db, "delete_content"):
            content = await self.store.find_slot(page_id, language, mode)
            if content is None:
                raise ContentNotFoundError(
                    message=f"No {mode.value} content for page '{page_id}' in language '{language.value}'"
                )
            deleted_id = content.id
            await self.store.delete_contents([deleted_id])

        logger.info(f"Deleted {self.descriptor.kind} content {deleted_id} ({language.value}, {mode.value})")

    # ============== Reads ==============

    async def find_page_by_id(self, page_id):
        return await self.store.load_page(parse_uuid(page_id, "page_id"))

    async def find_pages(
        self,
        filters: ContentFilter | dict | None = None,
        sort: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        language=None,
    ) -> tuple[list, int]:
        """
        List pages by their current contents.

        Args:
            filters: Title, url alias, workflow status and category keyword filters
            sort: "<column>:<asc|desc>" with column one of title, url_alias,
                status, created_at, updated_at; defaults to newest first
            page: 1-based page number
            limit: Page size
            language: Only consider contents in this language

        Returns:
            (pages, total) where total counts every matching page
        """
        if not isinstance(filters, ContentFilter):
            filters = validate_model(ContentFilter, filters or {}, "content filter")
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive", field="page")

        model = self.descriptor.content_model
        page_model = self.descriptor.page_model

        conditions = [model.mode.in_(CURRENT_MODES)]
        if filters.title:
            conditions.append(model.title.ilike(f"%{filters.title}%"))
        if filters.url_alias:
            conditions.append(model.url_alias.ilike(f"%{filters.url_alias}%"))
        if filters.workflow_status:
            conditions.append(model.workflow_status == filters.workflow_status)
        if language:
            conditions.append(model.language == normalize_language(language))
        if filters.category_keyword:
            tagged = (
                select(self.descriptor.category_owner_column)
                .join(Category, Category.id == self.descriptor.category_id_column)
                .join(CategoryType, CategoryType.id == Category.category_type_id)
                .where(
                    CategoryType.type_code == CATEGORY_KEYWORDS_TYPE,
                    Category.name.ilike(f"%{filters.category_keyword}%"),
                )
            )
            conditions.append(model.id.in_(tagged))

        result = await self.db.execute(select(func.count(func.distinct(model.page_id))).where(*conditions))
        total = result.scalar_one()

        column, descending = self._parse_sort(sort)
        if column in SORTABLE_CONTENT_COLUMNS:
            order = func.min(getattr(model, SORTABLE_CONTENT_COLUMNS[column]))
            stmt = (
                select(page_model)
                .join(model, model.page_id == page_model.id)
                .where(*conditions)
                .group_by(page_model.id)
            )
        else:
            order = getattr(page_model, SORTABLE_PAGE_COLUMNS[column])
            stmt = select(page_model).where(page_model.id.in_(select(model.page_id).where(*conditions)))

        stmt = (
            stmt.order_by(order.desc() if descending else order.asc(), page_model.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .options(selectinload(page_model.contents.and_(model.mode.in_(CURRENT_MODES))))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    @staticmethod
    def _parse_sort(sort: Optional[str]) -> tuple[str, bool]:
        if not sort:
            return "created_at", True
        column, _, direction = sort.partition(":")
        column = column.strip()
        if column not in SORTABLE_CONTENT_COLUMNS and column not in SORTABLE_PAGE_COLUMNS:
            return "created_at", True
        return column, direction.strip().lower() != "asc"

    async def find_content_by_page_id(self, page_id, language, mode):
        page_id = parse_uuid(page_id, "page_id")
        language = normalize_language(language)
        mode = normalize_mode(mode)
        if mode == ContentMode.HISTORIES:
            raise ValidationError("Histories holds many rows; use find_revisions instead", field="mode")

        content = await self.store.find_slot(page_id, language, mode)
        if content is None:
            raise ContentNotFoundError(
                message=f"No {mode.value} content for page '{page_id}' in language '{language.value}'"
            )
        return content

    async def find_latest_content_by_page_id(self, page_id, language):
        page_id = parse_uuid(page_id, "page_id")
        language = normalize_language(language)

        content = await self.store.find_latest(page_id, language)
        if content is None:
            raise ContentNotFoundError(message=f"No content for page '{page_id}' in language '{language.value}'")
        return content

    async def find_categories(self, page_id, category_type_code: str, language, mode) -> list[Category]:
        return await self.categories.find_categories(self.descriptor, page_id, category_type_code, language, mode)

    async def find_revisions(self, page_id, language):
        return await self.revisions.find_revisions(self.descriptor, page_id, language)

    # ============== Internals ==============

    @staticmethod
    def _check_target_mode(mode: ContentMode) -> None:
        if mode not in CURRENT_MODES:
            raise ValidationError(
                f"Content can only be saved as Draft or Published, not {mode.value}",
                field="mode",
            )

    async def _insert_from_body(self, page_id: uuid.UUID, language, mode: ContentMode, body: ContentBase):
        """New row with fresh MetaTag, Components, Files, Categories and Revision."""
        categories = await self.categories.resolve_categories(body.categories, language)
        content = self.store.build_content(
            page_id,
            language,
            mode,
            self.store.body_values(body),
            meta_tag=self.store.new_meta_tag(body.meta_tag),
            components=self.store.new_components(body.components),
            categories=categories,
            revision=build_revision(body.revision, body.publish_status),
            files=self.store.new_files(getattr(body, "files", [])),
        )
        await self.db.flush()
        return content
