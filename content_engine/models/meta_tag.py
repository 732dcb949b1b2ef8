import uuid

from sqlalchemy import Column, String, Text, Uuid

from content_engine.database import Base


class MetaTag(Base):
    """SEO metadata owned by exactly one content row."""

    __tablename__ = "meta_tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    cover_image = Column(String(1024), nullable=False, default="")

    def clone(self) -> "MetaTag":
        return MetaTag(title=self.title, description=self.description, cover_image=self.cover_image)
