"""
Content Models

One content row is one version of a page in one language. Rows move between
slots (Draft, Preview, Published, Histories) but a Histories row is frozen:
edits always insert a new row and retire the old one.

The three kinds share their columns through ContentMixin; each concrete class
adds its own foreign keys, association tables and kind-specific fields.
"""

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import declared_attr, relationship

from content_engine.database import Base
from content_engine.models.category import (
    faq_content_categories,
    landing_content_categories,
    partner_content_categories,
)
from content_engine.models.enums import ContentMode, Language, PublishStatus, WorkflowStatus, enum_values
from content_engine.models.page import _utcnow


class ContentMixin:
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Identity & state
    language = Column(Enum(Language, native_enum=False, values_callable=enum_values, length=8), nullable=False)
    mode = Column(Enum(ContentMode, native_enum=False, values_callable=enum_values, length=32), nullable=False)
    workflow_status = Column(
        Enum(WorkflowStatus, native_enum=False, values_callable=enum_values, length=32),
        default=WorkflowStatus.DRAFT,
        nullable=False,
    )
    publish_status = Column(
        Enum(PublishStatus, native_enum=False, values_callable=enum_values, length=32),
        default=PublishStatus.UNPUBLISHED,
        nullable=False,
    )

    # Body
    title = Column(String(255), nullable=False, default="")
    html_input = Column(Text, nullable=False, default="")
    url_alias = Column(String(255), nullable=False, default="", index=True)
    authored_at = Column(DateTime(timezone=True), nullable=True)
    authored_on = Column(DateTime(timezone=True), nullable=True)
    publish_on = Column(DateTime(timezone=True), nullable=True)
    unpublish_on = Column(DateTime(timezone=True), nullable=True)
    expired_at = Column(DateTime(timezone=True), nullable=True)
    approval_email = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    @declared_attr
    def meta_tag_id(cls):
        return Column(Uuid, ForeignKey("meta_tags.id"), unique=True, nullable=False)

    @declared_attr
    def meta_tag(cls):
        return relationship("MetaTag", lazy="selectin")

    @declared_attr
    def revision(cls):
        return relationship("Revision", uselist=False, lazy="selectin")

    @declared_attr
    def components(cls):
        return relationship("Component", lazy="selectin", order_by="Component.position")

    @property
    def category_ids(self) -> list[uuid.UUID]:
        return [category.id for category in self.categories]


def _slot_index(table_name: str) -> Index:
    """At most one Draft, Preview and Published row per (page, language)."""
    where = text("mode != 'Histories'")
    return Index(
        f"uq_{table_name}_slot",
        "page_id",
        "language",
        "mode",
        unique=True,
        sqlite_where=where,
        postgresql_where=where,
    )


class LandingContent(ContentMixin, Base):
    __tablename__ = "landing_contents"

    page_id = Column(Uuid, ForeignKey("landing_pages.id"), nullable=False, index=True)

    categories = relationship("Category", secondary=landing_content_categories, lazy="selectin")
    files = relationship("LandingContentFile", lazy="selectin")

    __table_args__ = (_slot_index("landing_contents"),)


class PartnerContent(ContentMixin, Base):
    __tablename__ = "partner_contents"

    page_id = Column(Uuid, ForeignKey("partner_pages.id"), nullable=False, index=True)

    url = Column(String(255), nullable=False, default="", index=True)
    thumbnail_image = Column(String(1024), nullable=False, default="")
    thumbnail_alt_text = Column(String(255), nullable=False, default="")
    company_logo = Column(String(1024), nullable=False, default="")
    company_alt_text = Column(String(255), nullable=False, default="")
    company_name = Column(String(255), nullable=False, default="")
    company_detail = Column(Text, nullable=False, default="")
    lead_body = Column(Text, nullable=False, default="")
    challenges = Column(Text, nullable=False, default="")
    solutions = Column(Text, nullable=False, default="")
    results = Column(Text, nullable=False, default="")
    is_recommended = Column(Boolean, nullable=False, default=False)

    categories = relationship("Category", secondary=partner_content_categories, lazy="selectin")

    __table_args__ = (_slot_index("partner_contents"),)


class FaqContent(ContentMixin, Base):
    __tablename__ = "faq_contents"

    page_id = Column(Uuid, ForeignKey("faq_pages.id"), nullable=False, index=True)

    url = Column(String(255), nullable=False, default="", index=True)

    categories = relationship("Category", secondary=faq_content_categories, lazy="selectin")

    __table_args__ = (_slot_index("faq_contents"),)
