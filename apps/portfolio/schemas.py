"""
Pydantic schemas for the Portfolio API.

Drafts and updates validate admin input; Project and SuccessStory are the
normalized read models served to the listing pages.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

Category = Literal["Web Application", "Automation"]
AchievementType = Literal["job_placement", "certification", "promotion", "startup", "other"]
SortMode = Literal["latest", "oldest", "date"]


def split_tags(value):
    """Accept "React, Node , SQL" as well as a list; trim tags and drop empty ones."""
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    return [str(tag).strip() for tag in value if str(tag).strip()]


class ProjectDraft(BaseModel):
    """Admin input for a new project."""
    student_name: str = Field(..., min_length=1, max_length=200)
    project_title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Category
    tools_technologies: list[str] = Field(default_factory=list)
    main_project_image: Optional[str] = None
    linkedin_link: Optional[str] = None
    linkedin_profile_picture: Optional[str] = None
    github_link: Optional[str] = None
    live_project_link: Optional[str] = None
    project_video: Optional[str] = None

    @field_validator("tools_technologies", mode="before")
    @classmethod
    def split_tools(cls, value):
        return split_tags(value)


class ProjectUpdate(BaseModel):
    """Partial project update. Only fields the caller sets are sent to the store."""
    student_name: Optional[str] = Field(None, min_length=1, max_length=200)
    project_title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[Category] = None
    tools_technologies: Optional[list[str]] = None
    main_project_image: Optional[str] = None
    linkedin_link: Optional[str] = None
    linkedin_profile_picture: Optional[str] = None
    github_link: Optional[str] = None
    live_project_link: Optional[str] = None
    project_video: Optional[str] = None
    likes_count: Optional[int] = Field(None, ge=0)
    comments_count: Optional[int] = Field(None, ge=0)

    @field_validator("tools_technologies", mode="before")
    @classmethod
    def split_tools(cls, value):
        return split_tags(value)


class Project(BaseModel):
    """A project as shown on the listing pages, every default filled in."""
    id: str
    student_name: str = ""
    project_title: str = ""
    description: str = ""
    category: str = ""
    tools_technologies: list[str] = Field(default_factory=list)
    main_project_image: str = ""
    linkedin_link: str = ""
    linkedin_profile_picture: str = ""
    github_link: str = ""
    live_project_link: str = ""
    project_video: str = ""
    likes_count: int = 0
    comments_count: int = 0
    created_at: Optional[str] = None


class SuccessStoryDraft(BaseModel):
    student_name: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    company: Optional[str] = None
    position: Optional[str] = None
    linkedin_link: Optional[str] = None
    achievement_type: AchievementType = "other"
    student_image: Optional[str] = None


class SuccessStoryUpdate(BaseModel):
    student_name: Optional[str] = Field(None, min_length=1, max_length=200)
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = Field(None, min_length=1)
    company: Optional[str] = None
    position: Optional[str] = None
    linkedin_link: Optional[str] = None
    achievement_type: Optional[AchievementType] = None
    student_image: Optional[str] = None


class SuccessStory(BaseModel):
    id: str
    student_name: str = ""
    title: str = ""
    content: str = ""
    company: str = ""
    position: str = ""
    linkedin_link: str = ""
    achievement_type: str = "other"
    student_image: str = ""
    created_at: Optional[str] = None


class ListingFilter(BaseModel):
    """Filter state of the portfolio listing page."""
    search: str = ""
    category: str = ""
    sort: SortMode = "latest"
    date: str = ""


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    state: str
    is_authenticated: bool
    is_admin: bool
    email: Optional[str] = None
    # Bearer token for admin requests; only returned by login
    token: Optional[str] = None


class MutationResponse(BaseModel):
    ok: bool
    message: str


class NoticeResponse(BaseModel):
    level: str
    message: str
