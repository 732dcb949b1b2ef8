"""
Tests for page listing, lookups and page duplication
"""

import uuid

import pytest

from content_engine.exceptions import ContentNotFoundError, PageNotFoundError, ValidationError
from content_engine.models import ContentMode


class TestFindPages:
    """Test LifecycleService.find_pages"""

    @pytest.mark.asyncio
    async def test_find_pages_returns_current_contents_only(self, faq_service, make_body):
        """Test listed pages carry Draft and Published rows, never history or preview"""
        page = await faq_service.create_page([make_body("V1")])
        page_id = page.id
        await faq_service.update_content(page.contents[0].id, make_body("V2"))
        await faq_service.preview_content(page_id, "en", make_body("Preview"))

        pages, total = await faq_service.find_pages()

        assert total == 1
        assert [c.title for c in pages[0].contents] == ["V2"]

    @pytest.mark.asyncio
    async def test_find_pages_filters(self, faq_service, make_body):
        """Test title, url alias and workflow filters combine with AND"""
        await faq_service.create_page([make_body("Shipping times", url_alias="shipping")])
        await faq_service.create_page(
            [make_body("Shipping costs", url_alias="costs", workflow_status="Approval_Pending")]
        )
        await faq_service.create_page([make_body("Returns", url_alias="returns")])

        pages, total = await faq_service.find_pages({"title": "shipping"})
        assert total == 2

        pages, total = await faq_service.find_pages({"title": "shipping", "workflow_status": "approval_pending"})
        assert total == 1
        assert pages[0].contents[0].title == "Shipping costs"

        pages, total = await faq_service.find_pages({"url_alias": "ret"})
        assert [p.contents[0].title for p in pages] == ["Returns"]

    @pytest.mark.asyncio
    async def test_find_pages_by_category_keyword(self, faq_service, make_body):
        """Test the keyword filter matches category_keywords categories only"""
        await faq_service.create_page(
            [make_body("Refunds", categories=[{"type_code": "category_keywords", "name": "refund policy"}])]
        )
        await faq_service.create_page([make_body("Other", categories=[{"type_code": "faq", "name": "refund"}])])

        pages, total = await faq_service.find_pages({"category_keyword": "REFUND"})

        assert total == 1
        assert pages[0].contents[0].title == "Refunds"

    @pytest.mark.asyncio
    async def test_find_pages_language_filter(self, faq_service, make_body):
        """Test the language filter only considers rows in that language"""
        await faq_service.create_page([make_body("English")])
        await faq_service.create_page([make_body("Thai", language="th")])

        pages, total = await faq_service.find_pages(language="TH")

        assert total == 1
        assert pages[0].contents[0].title == "Thai"

    @pytest.mark.asyncio
    async def test_find_pages_sort_and_paging(self, faq_service, make_body):
        """Test sorting by title and splitting into pages"""
        for title in ("Charlie", "Alpha", "Bravo"):
            await faq_service.create_page([make_body(title)])

        first, total = await faq_service.find_pages(sort="title:asc", page=1, limit=2)
        second, _ = await faq_service.find_pages(sort="title:asc", page=2, limit=2)
        descending, _ = await faq_service.find_pages(sort="title:desc", limit=1)

        assert total == 3
        assert [p.contents[0].title for p in first] == ["Alpha", "Bravo"]
        assert [p.contents[0].title for p in second] == ["Charlie"]
        assert descending[0].contents[0].title == "Charlie"

    @pytest.mark.asyncio
    async def test_find_pages_defaults_to_newest_first(self, faq_service, make_body):
        """Test an unknown sort column falls back to created_at descending"""
        await faq_service.create_page([make_body("Older")])
        await faq_service.create_page([make_body("Newer")])

        pages, _ = await faq_service.find_pages(sort="nonsense:asc")

        assert [p.contents[0].title for p in pages] == ["Newer", "Older"]

    @pytest.mark.asyncio
    async def test_find_pages_rejects_bad_paging(self, faq_service):
        """Test non-positive page numbers are rejected"""
        with pytest.raises(ValidationError):
            await faq_service.find_pages(page=0)


class TestFindContent:
    """Test the single-row lookups"""

    @pytest.mark.asyncio
    async def test_find_page_by_id(self, partner_service, make_body):
        """Test a page is returned with its current contents"""
        page = await partner_service.create_page([make_body("Partner"), make_body("Live", mode="published")])
        page_id = page.id

        found = await partner_service.find_page_by_id(str(page_id))

        assert found.id == page_id
        assert {c.mode for c in found.contents} == {ContentMode.DRAFT, ContentMode.PUBLISHED}

    @pytest.mark.asyncio
    async def test_find_page_by_id_missing(self, partner_service):
        """Test an unknown page raises PageNotFoundError"""
        with pytest.raises(PageNotFoundError):
            await partner_service.find_page_by_id(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_find_content_by_page_id(self, partner_service, make_body):
        """Test a slot lookup is case-insensitive on language and mode"""
        page = await partner_service.create_page([make_body("Live", mode="Published", company_name="Acme")])

        content = await partner_service.find_content_by_page_id(page.id, "EN", "PUBLISHED")

        assert content.company_name == "Acme"

    @pytest.mark.asyncio
    async def test_find_content_by_page_id_empty_slot(self, partner_service, make_body):
        """Test an empty slot raises ContentNotFoundError"""
        page = await partner_service.create_page([make_body("Draft")])

        with pytest.raises(ContentNotFoundError):
            await partner_service.find_content_by_page_id(page.id, "en", "Published")

    @pytest.mark.asyncio
    async def test_find_content_by_page_id_rejects_histories(self, partner_service, make_body):
        """Test Histories is not a slot and cannot be looked up"""
        page = await partner_service.create_page([make_body("Draft")])
        page_id = page.id
        await partner_service.update_content(page.contents[0].id, make_body("Draft v2"))

        with pytest.raises(ValidationError):
            await partner_service.find_content_by_page_id(page_id, "en", "histories")

    @pytest.mark.asyncio
    async def test_find_latest_content(self, faq_service, make_body):
        """Test the most recently created row wins regardless of mode"""
        page = await faq_service.create_page([make_body("V1")])
        page_id = page.id
        v2 = await faq_service.update_content(page.contents[0].id, make_body("V2"))

        latest = await faq_service.find_latest_content_by_page_id(page_id, "en")

        assert latest.id == v2.id

    @pytest.mark.asyncio
    async def test_find_latest_content_missing_language(self, faq_service, make_body):
        """Test a language with no rows raises ContentNotFoundError"""
        page = await faq_service.create_page([make_body("English")])

        with pytest.raises(ContentNotFoundError):
            await faq_service.find_latest_content_by_page_id(page.id, "th")


class TestDuplicatePage:
    """Test LifecycleService.duplicate_page"""

    @pytest.mark.asyncio
    async def test_duplicate_page_copies_current_contents(self, faq_service, make_body):
        """Test the copy is a new page with suffixed URLs and deep-copied rows"""
        page = await faq_service.create_page(
            [
                make_body(
                    "Original",
                    url="/faq/original",
                    url_alias="original",
                    components=[{"component_type": "hero", "props": {"heading": "Hi"}}],
                    categories=[{"type_code": "faq", "name": "General"}],
                ),
                make_body("Thai", language="th"),
            ]
        )
        page_id = page.id
        source = {c.language.value: c for c in page.contents}
        source_ids = {c.id for c in page.contents}

        copy = await faq_service.duplicate_page(page_id)

        assert copy.id != page_id
        assert len(copy.contents) == 2
        copied = {c.language.value: c for c in copy.contents}
        assert not source_ids & {c.id for c in copy.contents}

        english = copied["en"]
        assert english.title == "Original"
        assert english.url.startswith("/faq/original-")
        assert len(english.url) == len("/faq/original-") + 3
        assert english.url_alias.startswith("original-")
        assert english.meta_tag.id != source["en"].meta_tag.id
        assert [c.props for c in english.components] == [{"heading": "Hi"}]
        assert english.components[0].id != source["en"].components[0].id
        assert english.category_ids == source["en"].category_ids
        assert english.revision.id != source["en"].revision.id
        assert english.revision.author == source["en"].revision.author

        thai = copied["th"]
        assert thai.url.startswith("-")
        assert thai.url_alias == ""

    @pytest.mark.asyncio
    async def test_duplicate_page_twice(self, faq_service, make_body):
        """Test duplicating the same page twice yields two distinct copies"""
        page = await faq_service.create_page([make_body("Original", url="/faq/original")])
        page_id = page.id

        first = await faq_service.duplicate_page(page_id)
        first_id, first_url = first.id, first.contents[0].url
        second = await faq_service.duplicate_page(page_id)

        assert second.id != first_id
        assert second.contents[0].url != first_url

    @pytest.mark.asyncio
    async def test_duplicate_missing_page(self, faq_service):
        """Test duplicating an unknown page raises PageNotFoundError"""
        with pytest.raises(PageNotFoundError):
            await faq_service.duplicate_page(uuid.uuid4())
