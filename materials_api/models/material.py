"""Material model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from materials_api.database import Base, utcnow
from materials_api.models.user import User


class Material(Base):
    """Represents an educational resource, optionally with an attached file."""
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    content = Column(Text, nullable=True)
    file_url = Column(String(500), nullable=True)
    file_type = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    owner = relationship(User)

    @property
    def has_file(self) -> bool:
        return self.file_url is not None
