from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import relationship

from content_engine.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class PageMixin:
    """Columns shared by every page kind; a page only groups its contents."""

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


# Page.contents is never lazy loaded; callers attach the rows they need with
# selectinload(Page.contents.and_(...)) so histories stay out of page reads.


class LandingPage(PageMixin, Base):
    __tablename__ = "landing_pages"

    contents = relationship("LandingContent", lazy="raise", order_by="LandingContent.created_at")


class PartnerPage(PageMixin, Base):
    __tablename__ = "partner_pages"

    contents = relationship("PartnerContent", lazy="raise", order_by="PartnerContent.created_at")


class FaqPage(PageMixin, Base):
    __tablename__ = "faq_pages"

    contents = relationship("FaqContent", lazy="raise", order_by="FaqContent.created_at")
