"""
Portfolio database models.

One table per store collection: projects, success_stories and admins.
Ids and creation timestamps are assigned by the store on insert.
"""
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON

from apps.shared.database import Base


def new_record_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class ProjectRecord(Base):
    """
    A showcased student project.

    Stores:
    - Who built it (student_name, LinkedIn details)
    - What it is (title, description, category, tools)
    - Media and links (image, GitHub, live demo, video)
    - Engagement counters (likes, comments)
    """
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True, default=new_record_id)
    student_name = Column(String(200), nullable=False)
    project_title = Column(String(200), nullable=False)
    description = Column(Text, default="")
    category = Column(String(100))
    tools_technologies = Column(JSON, default=list)  # ["React", "Supabase"]
    main_project_image = Column(Text)  # URL or data: URI
    linkedin_link = Column(String(500), default="")
    linkedin_profile_picture = Column(String(500), default="")
    github_link = Column(String(500), default="")
    live_project_link = Column(String(500), default="")
    project_video = Column(String(500), default="")
    likes_count = Column(Integer, default=0)
    comments_count = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    def to_dict(self) -> dict:
        """Convert project to a plain document."""
        return {
            "id": self.id,
            "student_name": self.student_name,
            "project_title": self.project_title,
            "description": self.description,
            "category": self.category,
            "tools_technologies": self.tools_technologies,
            "main_project_image": self.main_project_image,
            "linkedin_link": self.linkedin_link,
            "linkedin_profile_picture": self.linkedin_profile_picture,
            "github_link": self.github_link,
            "live_project_link": self.live_project_link,
            "project_video": self.project_video,
            "likes_count": self.likes_count,
            "comments_count": self.comments_count,
            "created_at": isoformat(self.created_at),
        }


class SuccessStoryRecord(Base):
    """A student achievement shown on the Wall of Fame."""
    __tablename__ = "success_stories"

    id = Column(String(32), primary_key=True, default=new_record_id)
    student_name = Column(String(200), nullable=False)
    title = Column(String(300), nullable=False)
    content = Column(Text, nullable=False)
    company = Column(String(200), default="")
    position = Column(String(200), default="")
    linkedin_link = Column(String(500), default="")
    achievement_type = Column(String(50), default="other")
    student_image = Column(String(500))
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_name": self.student_name,
            "title": self.title,
            "content": self.content,
            "company": self.company,
            "position": self.position,
            "linkedin_link": self.linkedin_link,
            "achievement_type": self.achievement_type,
            "student_image": self.student_image,
            "created_at": isoformat(self.created_at),
        }


class AdminRecord(Base):
    """Admin credential record. password_hash holds a pbkdf2 hash (or a legacy plaintext value)."""
    __tablename__ = "admins"

    id = Column(String(32), primary_key=True, default=new_record_id)
    email = Column(String(320), unique=True, index=True, nullable=False)
    username = Column(String(100))
    password_hash = Column(String(500), nullable=False)
    role = Column(String(20), default="admin")
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "password_hash": self.password_hash,
            "role": self.role,
            "created_at": isoformat(self.created_at),
        }
