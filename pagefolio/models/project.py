from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base


class Project(Base):
    __tablename__ = "projects"

    # Composite key: slugs are only unique inside one owner's namespace
    owner_id = Column(String(64), ForeignKey("pages.owner_id", ondelete="CASCADE"), primary_key=True)
    project_slug = Column(String(110), primary_key=True)

    display_name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    content = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    page = relationship("Page", back_populates="projects")

    __table_args__ = (
        CheckConstraint("position >= 0", name="ck_projects_position_non_negative"),
    )
