"""
Tests for preview content
"""

import uuid
from urllib.parse import parse_qs, urlsplit

import pytest
from sqlalchemy import func, select

from content_engine.exceptions import PageNotFoundError, ValidationError
from content_engine.models import Component, ContentMode, LandingContent, PublishStatus, Revision, WorkflowStatus


async def preview_rows(db, page_id):
    result = await db.execute(
        select(LandingContent)
        .where(LandingContent.page_id == page_id, LandingContent.mode == ContentMode.PREVIEW)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


class TestPreviewContent:
    """Test LifecycleService.preview_content"""

    @pytest.mark.asyncio
    async def test_preview_returns_link_to_preview_row(self, landing_service, test_db, make_body):
        """Test the returned URL points at the preview row"""
        page = await landing_service.create_page([make_body("Live")])
        page_id = page.id

        url = await landing_service.preview_content(page_id, "EN", make_body("Preview me"))

        rows = await preview_rows(test_db, page_id)
        assert len(rows) == 1
        parts = urlsplit(url)
        assert parts.path.endswith("/preview/en/landing")
        assert parse_qs(parts.query) == {"id": [str(rows[0].id)]}

    @pytest.mark.asyncio
    async def test_preview_is_idempotent(self, landing_service, test_db, make_body):
        """Test calling preview twice updates the same row and returns the same link"""
        page = await landing_service.create_page([make_body("Live")])
        page_id = page.id

        first_url = await landing_service.preview_content(
            page_id, "en", make_body("First", components=[{"component_type": "hero", "props": {"n": 1}}])
        )
        second_url = await landing_service.preview_content(
            page_id,
            "en",
            make_body(
                "Second",
                components=[
                    {"component_type": "text", "props": {"n": 2}},
                    {"component_type": "text", "props": {"n": 3}},
                ],
            ),
        )

        assert first_url == second_url
        rows = await preview_rows(test_db, page_id)
        assert len(rows) == 1
        preview = rows[0]
        assert preview.title == "Second"
        assert preview.meta_tag.title == "Second meta"

        result = await test_db.execute(
            select(Component.props)
            .where(Component.landing_content_id == preview.id)
            .order_by(Component.position)
        )
        assert list(result.scalars().all()) == [{"n": 2}, {"n": 3}]

    @pytest.mark.asyncio
    async def test_preview_row_state(self, landing_service, test_db, make_body):
        """Test a preview is unpublished, expires and writes no revision"""
        page = await landing_service.create_page([make_body("Live")])
        page_id = page.id

        await landing_service.preview_content(
            page_id, "en", make_body("Preview", workflow_status="Published", publish_status="Published")
        )

        preview = (await preview_rows(test_db, page_id))[0]
        assert preview.publish_status == PublishStatus.UNPUBLISHED
        assert preview.workflow_status == WorkflowStatus.UNPUBLISHED
        assert preview.expired_at is not None
        result = await test_db.execute(select(func.count()).select_from(Revision))
        assert result.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_preview_leaves_draft_untouched(self, landing_service, make_body):
        """Test preview does not retire or change the current draft"""
        page = await landing_service.create_page([make_body("Live")])
        page_id, draft_id = page.id, page.contents[0].id

        await landing_service.preview_content(page_id, "en", make_body("Preview"))

        draft = await landing_service.find_content_by_page_id(page_id, "en", "Draft")
        assert draft.id == draft_id
        assert draft.title == "Live"

    @pytest.mark.asyncio
    async def test_preview_per_language(self, landing_service, test_db, make_body):
        """Test each language gets its own preview row"""
        page = await landing_service.create_page([make_body("Live")])
        page_id = page.id

        en_url = await landing_service.preview_content(page_id, "en", make_body("EN"))
        th_url = await landing_service.preview_content(page_id, "th", make_body("TH"))

        assert en_url != th_url
        assert "/preview/th/landing" in th_url
        assert len(await preview_rows(test_db, page_id)) == 2

    @pytest.mark.asyncio
    async def test_preview_unknown_page(self, landing_service, make_body):
        """Test previewing a missing page raises PageNotFoundError"""
        with pytest.raises(PageNotFoundError):
            await landing_service.preview_content(uuid.uuid4(), "en", make_body("Preview"))

    @pytest.mark.asyncio
    async def test_preview_bad_language(self, landing_service, make_body):
        """Test an unsupported language raises ValidationError"""
        page = await landing_service.create_page([make_body("Live")])

        with pytest.raises(ValidationError):
            await landing_service.preview_content(page.id, "jp", make_body("Preview"))

    @pytest.mark.asyncio
    async def test_preview_bad_base_url_writes_nothing(self, landing_service, test_db, make_body, monkeypatch):
        """Test a misconfigured preview base fails before any preview row is saved"""
        from content_engine.config import settings

        page = await landing_service.create_page([make_body("Live")])
        page_id = page.id
        monkeypatch.setattr(settings, "preview_base_url", "not a url")

        with pytest.raises(ValidationError) as exc_info:
            await landing_service.preview_content(page_id, "en", make_body("Preview"))

        assert exc_info.value.details["field"] == "preview_base_url"
        assert await preview_rows(test_db, page_id) == []
