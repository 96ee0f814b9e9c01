from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from typing import List, Optional
from datetime import date, datetime

from .models.page import Theme


class FieldIssue(BaseModel):
    field: str
    issue: str


def format_field_path(loc) -> str:
    """('experience', 0, 'job_title') -> 'experience[0].job_title'"""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


# === Profile content (uploaded YAML) ===

class ContactInfo(BaseModel):
    label: str = Field(max_length=50, title="Label")
    value: str = Field(max_length=100, title="Value")

class Experience(BaseModel):
    job_title: str = Field(max_length=100, title="Job title")
    job_description: Optional[str] = Field(None, max_length=500, title="Job description")

class Education(BaseModel):
    school_title: str = Field(max_length=100, title="School title")
    school_description: Optional[str] = Field(None, max_length=300, title="School description")

class Skill(BaseModel):
    name: str = Field(max_length=50, title="Skill name")

class ProfileContent(BaseModel):
    name: str = Field(min_length=1, max_length=100, title="Name")
    bio: str = Field(min_length=1, max_length=500, title="Bio")
    contact_info: Optional[List[ContactInfo]] = None
    experience: Optional[List[Experience]] = None
    education: Optional[List[Education]] = None
    skills: Optional[List[Skill]] = None


# === Project content (uploaded YAML) ===

class ProjectContent(BaseModel):
    name: str = Field(min_length=1, max_length=100, title="Project name")
    description: str = Field(min_length=1, max_length=500, title="Description")
    tech_stack: Optional[str] = Field(None, max_length=500, title="Tech stack")
    prod_link: Optional[str] = Field(None, max_length=100, title="Production link")
    start_date: Optional[date] = Field(None, title="Start date")
    end_date: Optional[date] = Field(None, title="End date")

    @field_validator("end_date")
    @classmethod
    def end_not_before_start(cls, value: Optional[date], info: ValidationInfo) -> Optional[date]:
        # start_date is absent from info.data when it failed its own validation
        start = info.data.get("start_date")
        if value is not None and start is not None and value < start:
            raise PydanticCustomError("end_before_start", "End date must be after or equal to start date")
        return value


# === Page API ===

class PageCreate(BaseModel):
    url: str
    theme: Theme
    data: Optional[str] = None

class PageThemeUpdate(BaseModel):
    theme: Theme

class PageUrlUpdate(BaseModel):
    url: str

class ContentUpload(BaseModel):
    data: str = Field(min_length=1)

class PageOut(BaseModel):
    owner_id: str
    url_slug: str
    theme: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# === Project API ===

class ProjectCreate(BaseModel):
    project_name: str = Field(min_length=1, max_length=100)
    display_order: int = Field(0, ge=0)

    @field_validator("project_name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

class ProjectRename(BaseModel):
    project_name: str = Field(min_length=1, max_length=100)

    @field_validator("project_name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

class ProjectOrderEntry(BaseModel):
    project_id: str = Field(min_length=1, max_length=110)
    display_order: int

class ProjectsReorder(BaseModel):
    project_orders: List[ProjectOrderEntry]

class ProjectOut(BaseModel):
    owner_id: str
    project_slug: str
    display_name: str
    position: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class PublicPageOut(BaseModel):
    url_slug: str
    theme: str
    content: Optional[ProfileContent] = None
    projects: List[ProjectOut] = []
