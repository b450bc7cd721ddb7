"""
Portfolio API

Student projects and success stories for the portfolio site, with a small
admin login guarding the create/update/delete endpoints.

Admin requests carry `Authorization: Bearer <token>`, where the token is
the one returned by /auth/login. It is checked against the store on every
request.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, APIRouter, Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from apps.shared.cors import setup_cors
from apps.shared.errors import setup_error_handlers
from apps.portfolio.auth import session_payload
from apps.portfolio.listing import filter_projects, filter_stories
from apps.portfolio.notices import Notice
from apps.portfolio.schemas import (
    ListingFilter,
    LoginRequest,
    MutationResponse,
    NoticeResponse,
    Project,
    ProjectDraft,
    ProjectUpdate,
    SessionResponse,
    SortMode,
    SuccessStory,
    SuccessStoryDraft,
    SuccessStoryUpdate,
)
from apps.portfolio.state import PortfolioState, build_state

logger = logging.getLogger("portfolio-service")
logging.basicConfig(level=logging.INFO)

state = build_state()


@asynccontextmanager
async def lifespan(app: FastAPI):
    state.startup()
    yield


app = FastAPI(
    title="Portfolio API",
    version="1.0.0",
    description="Student projects and success stories with admin management",
    docs_url="/portfolio/docs",
    openapi_url="/portfolio/openapi.json",
    lifespan=lifespan,
)

# Setup CORS and error payloads from shared configuration
setup_cors(app)
setup_error_handlers(app)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

# FastAPI dependency for the admin session token
admin_bearer = HTTPBearer(auto_error=False)


def get_state() -> PortfolioState:
    return state


def bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(admin_bearer),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def require_admin(
    token: Optional[str] = Depends(bearer_token),
    state: PortfolioState = Depends(get_state),
) -> PortfolioState:
    """Dependency for endpoints that change content: the caller's token must belong to an admin."""
    if state.auth.admin_for_token(token) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "message": "Admin login required",
                "category": "security",
            },
        )
    return state


def mutation_result(notice: Notice) -> MutationResponse:
    """Turn the notice a directory posted for this request into a response."""
    if not notice.ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=notice.message)
    return MutationResponse(ok=True, message=notice.message)


# ──────────────────────────────────────────────────────────────────────────────
# Public endpoints (no auth required)
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/health")
def health(state: PortfolioState = Depends(get_state)):
    """Health check endpoint."""
    db_connected = state.store.ping()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "portfolio",
        "database": "connected" if db_connected else "disconnected",
    }


@router.get("/projects", response_model=list[Project])
def list_projects(
    search: str = "",
    category: str = "",
    sort: SortMode = "latest",
    date: str = "",
    state: PortfolioState = Depends(get_state),
):
    """
    Projects for the listing page, filtered and sorted from the cache.
    With sort=date, date is a created_at prefix such as 2024-05 or 2024-05-17.
    """
    listing = ListingFilter(search=search, category=category, sort=sort, date=date)
    return filter_projects(state.projects.items, listing)


@router.post("/projects/refresh", response_model=list[Project])
def refresh_projects(state: PortfolioState = Depends(get_state)):
    """Reload the project cache from the store."""
    if state.projects.load_all() is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load projects")
    return state.projects.items


@router.get("/projects/{project_id}", response_model=Project)
def get_project(project_id: str, state: PortfolioState = Depends(get_state)):
    project = state.projects.get(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.get("/stories", response_model=list[SuccessStory])
def list_stories(
    achievement_type: Optional[str] = None,
    state: PortfolioState = Depends(get_state),
):
    """Success stories, optionally of one achievement type ("all" for every type)."""
    return filter_stories(state.stories.items, achievement_type)


@router.post("/stories/refresh", response_model=list[SuccessStory])
def refresh_stories(state: PortfolioState = Depends(get_state)):
    if state.stories.load_all() is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load success stories")
    return state.stories.items


# ──────────────────────────────────────────────────────────────────────────────
# Admin session
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/auth/login", response_model=SessionResponse)
def login(body: LoginRequest, state: PortfolioState = Depends(get_state)):
    """Check credentials and hand back the bearer token for admin requests."""
    outcome = state.auth.check_credentials(body.email, body.password)
    state.notices.post(outcome.notice)
    if not outcome.ok:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=outcome.notice.message)
    return SessionResponse(**session_payload(outcome.admin), token=outcome.token)


@router.post("/auth/logout", response_model=MutationResponse)
def logout(state: PortfolioState = Depends(get_state)):
    """Tokens live with the client; logging out is the client dropping its token."""
    return mutation_result(state.notices.success("Logged out successfully"))


@router.get("/auth/session", response_model=SessionResponse)
def session(token: Optional[str] = Depends(bearer_token), state: PortfolioState = Depends(get_state)):
    """Session of the caller's token (anonymous without one)."""
    return SessionResponse(**session_payload(state.auth.admin_for_token(token)))


# ──────────────────────────────────────────────────────────────────────────────
# Admin endpoints (admin session required)
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/notices", response_model=list[NoticeResponse])
def drain_notices(state: PortfolioState = Depends(require_admin)):
    """Pending user-visible notices, oldest first. Reading clears them."""
    return [NoticeResponse(level=n.level, message=n.message) for n in state.notices.drain()]


@router.post("/projects", response_model=MutationResponse, status_code=201)
def create_project(draft: ProjectDraft, state: PortfolioState = Depends(require_admin)):
    """Create a project. The list is reloaded so the new id and timestamp show up."""
    return mutation_result(state.projects.apply_create(draft))


@router.put("/projects/{project_id}", response_model=MutationResponse)
def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    state: PortfolioState = Depends(require_admin),
):
    """Update only the provided fields."""
    return mutation_result(state.projects.apply_update(project_id, project_data))


@router.delete("/projects/{project_id}", response_model=MutationResponse)
def delete_project(project_id: str, state: PortfolioState = Depends(require_admin)):
    return mutation_result(state.projects.apply_delete(project_id))


@router.post("/stories", response_model=MutationResponse, status_code=201)
def create_story(draft: SuccessStoryDraft, state: PortfolioState = Depends(require_admin)):
    return mutation_result(state.stories.apply_create(draft))


@router.put("/stories/{story_id}", response_model=MutationResponse)
def update_story(
    story_id: str,
    story_data: SuccessStoryUpdate,
    state: PortfolioState = Depends(require_admin),
):
    return mutation_result(state.stories.apply_update(story_id, story_data))


@router.delete("/stories/{story_id}", response_model=MutationResponse)
def delete_story(story_id: str, state: PortfolioState = Depends(require_admin)):
    return mutation_result(state.stories.apply_delete(story_id))


app.include_router(router)
