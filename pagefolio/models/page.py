from sqlalchemy import Column, String, DateTime, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from ..database import Base


class Theme(str, enum.Enum):
    OCEAN = "ocean"
    EARTH = "earth"


class Page(Base):
    """
    A user's public profile page. One row per owner; the owner id doubles as
    the primary key so a second page for the same owner is a key violation.
    """
    __tablename__ = "pages"

    owner_id = Column(String(64), primary_key=True)
    url_slug = Column(String(30), unique=True, index=True, nullable=False)
    theme = Column(String(50), nullable=False, default=Theme.OCEAN.value)  # Storing Enum as String

    # Validated profile record (JSON), NULL until the first upload
    content = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    projects = relationship(
        "Project",
        back_populates="page",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("length(url_slug) >= 3 AND length(url_slug) <= 30", name="ck_pages_url_slug_length"),
    )
