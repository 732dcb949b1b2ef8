import uuid

from sqlalchemy import Boolean, Column, Enum, ForeignKey, Integer, String, Table, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from content_engine.database import Base
from content_engine.models.enums import PublishStatus, enum_values


class CategoryType(Base):
    __tablename__ = "category_types"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    type_code = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)


class Category(Base):
    """Shared, long-lived tag; content rows only link to it."""

    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    category_type_id = Column(Uuid, ForeignKey("category_types.id"), nullable=False, index=True)
    language_code = Column(String(8), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    weight = Column(Integer, nullable=False, default=0)
    publish_status = Column(
        Enum(PublishStatus, native_enum=False, values_callable=enum_values, length=32),
        default=PublishStatus.PUBLISHED,
        nullable=False,
    )

    category_type = relationship("CategoryType", lazy="selectin")

    __table_args__ = (UniqueConstraint("category_type_id", "language_code", "name", name="unique_category_name"),)

    @property
    def type_code(self) -> str:
        return self.category_type.type_code


landing_content_categories = Table(
    "landing_content_categories",
    Base.metadata,
    Column("landing_content_id", Uuid, ForeignKey("landing_contents.id"), primary_key=True),
    Column("category_id", Uuid, ForeignKey("categories.id"), primary_key=True),
)

partner_content_categories = Table(
    "partner_content_categories",
    Base.metadata,
    Column("partner_content_id", Uuid, ForeignKey("partner_contents.id"), primary_key=True),
    Column("category_id", Uuid, ForeignKey("categories.id"), primary_key=True),
)

faq_content_categories = Table(
    "faq_content_categories",
    Base.metadata,
    Column("faq_content_id", Uuid, ForeignKey("faq_contents.id"), primary_key=True),
    Column("category_id", Uuid, ForeignKey("categories.id"), primary_key=True),
)
