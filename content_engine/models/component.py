import uuid

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Uuid

from content_engine.database import Base


class Component(Base):
    """A typed block of a content body; ``props`` is opaque JSON."""

    __tablename__ = "components"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    landing_content_id = Column(Uuid, ForeignKey("landing_contents.id"), nullable=True, index=True)
    partner_content_id = Column(Uuid, ForeignKey("partner_contents.id"), nullable=True, index=True)
    faq_content_id = Column(Uuid, ForeignKey("faq_contents.id"), nullable=True, index=True)

    component_type = Column(String(100), nullable=False)
    props = Column(JSON, nullable=False, default=dict)
    position = Column(Integer, nullable=False, default=0)

    def clone(self) -> "Component":
        return Component(component_type=self.component_type, props=dict(self.props or {}), position=self.position)
