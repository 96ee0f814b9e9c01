# Models package - exports all models
from ..database import Base

from .page import Theme, Page
from .project import Project

__all__ = [
    'Base',
    'Theme', 'Page',
    'Project',
]
