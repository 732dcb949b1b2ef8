"""
Email template catalogue

Templates are grouped by category (e.g. "Approve") and selected by language
and label. The label decides who receives the message when the approval
mailer sends it.
"""

import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import relationship

from content_engine.database import Base
from content_engine.models.enums import Language, enum_values
from content_engine.models.page import _utcnow


class EmailCategory(Base):
    __tablename__ = "email_categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    email_contents = relationship("EmailContent", back_populates="email_category", lazy="selectin")


class EmailContent(Base):
    __tablename__ = "email_contents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email_category_id = Column(Uuid, ForeignKey("email_categories.id"), nullable=False)
    language = Column(Enum(Language, native_enum=False, values_callable=enum_values, length=8), nullable=False)
    label = Column(String(255), nullable=False)

    # Recipients, comma separated
    send_to = Column(String(255), nullable=False, default="")
    cc_email = Column(String(255), nullable=False, default="")
    bcc_email = Column(String(255), nullable=False, default="")
    send_from_email = Column(String(100), nullable=False)
    send_from_name = Column(String(100), nullable=False, default="")

    # Jinja2 templates rendered with the notification data
    subject = Column(String(255), nullable=False)
    top_img_link = Column(String(255), nullable=False, default="")
    header = Column(Text, nullable=False, default="")
    paragraph = Column(Text, nullable=False, default="")
    footer = Column(Text, nullable=False, default="")
    footer_image_link = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    email_category = relationship("EmailCategory", back_populates="email_contents")

    __table_args__ = (Index("idx_email_content_category_lang_label", "email_category_id", "language", "label"),)
