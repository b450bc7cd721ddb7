"""
Project and success story directories

Each directory owns the cached list behind a listing page. The cache is
never patched in place: every create, update or delete is followed by a
full reload so the list always mirrors what the store holds.

Callers get a boolean back (or, from the apply_* variants, the Notice that
was posted for their own request); store failures never propagate past
this layer.
"""
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Type, Union
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from apps.portfolio.notices import Notice, NoticeBoard
from apps.portfolio.schemas import (
    Project,
    ProjectDraft,
    ProjectUpdate,
    SuccessStory,
    SuccessStoryDraft,
    SuccessStoryUpdate,
)
from apps.portfolio.store import PROJECTS, SUCCESS_STORIES

logger = logging.getLogger(__name__)

PLACEHOLDER_PROJECT_IMAGE = "https://via.placeholder.com/400x300/6366f1/ffffff?text=Project"
PLACEHOLDER_PROFILE_PICTURE = "https://via.placeholder.com/40x40/a855f7/ffffff?text=👤"
UNCATEGORIZED = "Uncategorized"

LINKEDIN_USERNAME_PATTERNS = [
    re.compile(r"linkedin\.com/in/([^/?]+)"),
    re.compile(r"linkedin\.com/pub/([^/?]+)"),
]


def ui_avatar_url(name: str) -> str:
    """Generated initials avatar for a name."""
    return (
        "https://ui-avatars.com/api/?name="
        + quote(name or "", safe="-_.!~*'()")
        + "&background=6366f1&color=ffffff&size=200&rounded=true"
    )


def linkedin_username(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    for pattern in LINKEDIN_USERNAME_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def describe_validation_error(error: ValidationError) -> str:
    """Turn the first pydantic error into a short form message."""
    first = error.errors()[0]
    field = str(first["loc"][0]) if first.get("loc") else "input"
    label = field.replace("_", " ").capitalize()
    if first.get("type") == "missing":
        return f"{label} is required"
    return f"Invalid {label.lower()}: {first.get('msg', 'invalid value')}"


class CollectionDirectory:
    """
    Cached, store-synchronized list of one collection.

    Subclasses supply the collection name, the schemas and the defaults.
    """

    collection: str = ""
    label: str = ""
    plural: str = ""
    draft_model: Type[BaseModel]
    update_model: Type[BaseModel]
    read_model: Type[BaseModel]

    # Field -> value used when the field is missing or empty
    defaults: Dict[str, Any] = {}
    # Fields an update may change but never clear
    required: tuple = ()

    def __init__(self, store, notices: NoticeBoard):
        self.store = store
        self.notices = notices
        self.items: List[BaseModel] = []
        self.loading = False

    def default_for(self, field: str, document: Mapping[str, Any]) -> Any:
        value = self.defaults[field]
        return list(value) if isinstance(value, list) else value

    def fill_defaults(self, document: Mapping[str, Any]) -> dict:
        """Copy of the document with every empty defaulted field filled in."""
        filled = dict(document)
        for field in self.defaults:
            if not filled.get(field):
                filled[field] = self.default_for(field, filled)
        return filled

    def normalize(self, document: Mapping[str, Any]) -> BaseModel:
        return self.read_model.model_validate(self.fill_defaults(document))

    def prepare_insert(self, draft: BaseModel) -> dict:
        return self.fill_defaults(draft.model_dump())

    def current_document(self, record_id: str) -> dict:
        """Stored fields of a record: the cache first, then a tolerant store lookup."""
        cached = self.get(record_id)
        if cached is not None:
            return cached.model_dump()
        return self.store.find_one(self.collection, "id", record_id) or {}

    def prepare_update(self, record_id: str, update: BaseModel) -> dict:
        """Only the fields the caller set; explicit nulls become defaults or are dropped."""
        supplied = update.model_dump(exclude_unset=True)
        context = {key: value for key, value in supplied.items() if value is not None}
        fields = {}
        for key, value in supplied.items():
            if value is None:
                if key in self.required or key not in self.defaults:
                    continue
                value = self.default_for(key, context)
            fields[key] = value
        return fields

    def get(self, record_id: str) -> Optional[BaseModel]:
        for item in self.items:
            if item.id == record_id:
                return item
        return None

    def load_all(self) -> Optional[List[BaseModel]]:
        """
        Fetch the whole collection, newest first, and replace the cache.

        Returns the new list, or None if the fetch failed (the cache keeps its previous value).
        """
        self.loading = True
        try:
            documents = self.store.select_all(self.collection)
            self.items = [self.normalize(document) for document in documents]
            return self.items
        except Exception as e:
            logger.error(f"Loading {self.plural} failed: {type(e).__name__}: {e}", exc_info=True)
            self.notices.error(f"Failed to load {self.plural}")
            return None
        finally:
            self.loading = False

    def _rejected(self, error: ValidationError, action: str) -> Notice:
        message = describe_validation_error(error)
        logger.warning(f"Rejected {action}: {message}")
        return self.notices.error(message)

    def apply_create(self, draft: Union[BaseModel, Mapping[str, Any]]) -> Notice:
        """Validate, fill defaults, insert, then reload. Returns the notice it posted."""
        try:
            if not isinstance(draft, self.draft_model):
                draft = self.draft_model.model_validate(draft)
        except ValidationError as e:
            return self._rejected(e, f"new {self.label.lower()}")

        try:
            self.store.insert(self.collection, self.prepare_insert(draft))
            ok = True
        except Exception as e:
            logger.error(f"Creating {self.label.lower()} failed: {type(e).__name__}: {e}", exc_info=True)
            ok = False

        # The store assigns id and created_at; only a reload shows them
        self.load_all()
        if ok:
            return self.notices.success(f"{self.label} created successfully!")
        return self.notices.error(f"Failed to create {self.label.lower()}")

    def apply_update(self, record_id: str, partial: Union[BaseModel, Mapping[str, Any]]) -> Notice:
        """Send only the supplied fields, then reload. Returns the notice it posted."""
        try:
            if not isinstance(partial, self.update_model):
                partial = self.update_model.model_validate(partial)
        except ValidationError as e:
            return self._rejected(e, f"update of {self.label.lower()} {record_id}")

        try:
            self.store.update(self.collection, record_id, self.prepare_update(record_id, partial))
            ok = True
        except Exception as e:
            logger.error(f"Updating {self.label.lower()} {record_id} failed: {type(e).__name__}: {e}", exc_info=True)
            ok = False

        self.load_all()
        if ok:
            return self.notices.success(f"{self.label} updated successfully!")
        return self.notices.error(f"Failed to update {self.label.lower()}")

    def apply_delete(self, record_id: str) -> Notice:
        """Delete permanently, then reload. Returns the notice it posted."""
        try:
            self.store.delete(self.collection, record_id)
            ok = True
        except Exception as e:
            logger.error(f"Deleting {self.label.lower()} {record_id} failed: {type(e).__name__}: {e}", exc_info=True)
            ok = False

        self.load_all()
        if ok:
            return self.notices.success(f"{self.label} deleted successfully!")
        return self.notices.error(f"Failed to delete {self.label.lower()}")

    def create(self, draft: Union[BaseModel, Mapping[str, Any]]) -> bool:
        return self.apply_create(draft).ok

    def update(self, record_id: str, partial: Union[BaseModel, Mapping[str, Any]]) -> bool:
        return self.apply_update(record_id, partial).ok

    def delete(self, record_id: str) -> bool:
        return self.apply_delete(record_id).ok


class ProjectDirectory(CollectionDirectory):
    collection = PROJECTS
    label = "Project"
    plural = "projects"
    draft_model = ProjectDraft
    update_model = ProjectUpdate
    read_model = Project
    required = ("student_name", "project_title", "category")

    defaults = {
        "student_name": "",
        "project_title": "",
        "description": "",
        "category": UNCATEGORIZED,
        "tools_technologies": [],
        "main_project_image": PLACEHOLDER_PROJECT_IMAGE,
        "linkedin_link": "",
        "linkedin_profile_picture": PLACEHOLDER_PROFILE_PICTURE,
        "github_link": "",
        "live_project_link": "",
        "project_video": "",
        "likes_count": 0,
        "comments_count": 0,
    }

    @property
    def projects(self) -> List[Project]:
        return self.items

    def prepare_insert(self, draft: ProjectDraft) -> dict:
        document = draft.model_dump()
        if not document.get("linkedin_profile_picture"):
            username = linkedin_username(document.get("linkedin_link"))
            if username:
                document["linkedin_profile_picture"] = ui_avatar_url(username)
        # New projects start without engagement
        document["likes_count"] = 0
        document["comments_count"] = 0
        return self.fill_defaults(document)

    def prepare_update(self, record_id: str, update: ProjectUpdate) -> dict:
        fields = super().prepare_update(record_id, update)
        if "linkedin_link" in fields and "linkedin_profile_picture" not in fields:
            username = linkedin_username(fields["linkedin_link"])
            if username:
                fields["linkedin_profile_picture"] = ui_avatar_url(username)
        return fields


class StoryDirectory(CollectionDirectory):
    collection = SUCCESS_STORIES
    label = "Success story"
    plural = "success stories"
    draft_model = SuccessStoryDraft
    update_model = SuccessStoryUpdate
    read_model = SuccessStory
    required = ("student_name", "title", "content")

    defaults = {
        "student_name": "",
        "title": "",
        "content": "",
        "company": "",
        "position": "",
        "linkedin_link": "",
        "achievement_type": "other",
        "student_image": None,
    }

    @property
    def stories(self) -> List[SuccessStory]:
        return self.items

    def prepare_update(self, record_id: str, update: SuccessStoryUpdate) -> dict:
        fields = super().prepare_update(record_id, update)
        # A cleared image falls back to the avatar of the stored name
        if update.student_image is None and "student_image" in fields and "student_name" not in fields:
            name = self.current_document(record_id).get("student_name")
            if name:
                fields["student_image"] = ui_avatar_url(name)
            else:
                del fields["student_image"]
        return fields

    def default_for(self, field: str, document: Mapping[str, Any]) -> Any:
        # Avatar is keyed by the student's name
        if field == "student_image":
            return ui_avatar_url(document.get("student_name") or "")
        return super().default_for(field, document)
