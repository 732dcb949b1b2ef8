import uuid

from sqlalchemy import Column, Enum, ForeignKey, String, Uuid

from content_engine.database import Base
from content_engine.models.enums import FileType, enum_values


class LandingContentFile(Base):
    """Stylesheet or script attached to a landing content row."""

    __tablename__ = "landing_content_files"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    landing_content_id = Column(Uuid, ForeignKey("landing_contents.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    download_url = Column(String(2048), nullable=False)
    file_type = Column(Enum(FileType, native_enum=False, values_callable=enum_values, length=8), nullable=False)

    def clone(self) -> "LandingContentFile":
        return LandingContentFile(name=self.name, download_url=self.download_url, file_type=self.file_type)
