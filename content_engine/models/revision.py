"""
Revision ledger entries

A revision is written once, in the same transaction as the content row it
describes, and is never updated afterwards. Exactly one of the three owner
columns is set.
"""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Index, String, Text, Uuid

from content_engine.database import Base
from content_engine.models.enums import PublishStatus, enum_values
from content_engine.models.page import _utcnow


class Revision(Base):
    __tablename__ = "revisions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Owner, one per content kind
    landing_content_id = Column(Uuid, ForeignKey("landing_contents.id"), nullable=True, unique=True)
    partner_content_id = Column(Uuid, ForeignKey("partner_contents.id"), nullable=True, unique=True)
    faq_content_id = Column(Uuid, ForeignKey("faq_contents.id"), nullable=True, unique=True)

    publish_status = Column(
        Enum(PublishStatus, native_enum=False, values_callable=enum_values, length=32),
        default=PublishStatus.UNPUBLISHED,
        nullable=False,
    )
    author = Column(String(255), nullable=False, default="")
    message = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN landing_content_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN partner_content_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN faq_content_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_revision_single_owner",
        ),
        Index("idx_revision_created_at", "created_at"),
    )

    def clone(self) -> "Revision":
        return Revision(
            publish_status=self.publish_status,
            author=self.author,
            message=self.message,
            description=self.description,
        )
