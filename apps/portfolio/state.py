"""
Portfolio service state

One object owns the store client, the cached directories, the admin
session and the notice board. The API gets it through a dependency.
"""
import os
import logging

from apps.shared.database import DATABASE_URL, DATABASE_KEY
from apps.portfolio.auth import AdminAuthGate
from apps.portfolio.directory import ProjectDirectory, StoryDirectory
from apps.portfolio.notices import NoticeBoard
from apps.portfolio.session_slot import FileSessionSlot
from apps.portfolio.store import connect_store

logger = logging.getLogger(__name__)

SESSION_FILE = os.getenv("SESSION_FILE", ".portfolio_session.json")


class PortfolioState:
    def __init__(self, store, session_slot):
        self.store = store
        self.notices = NoticeBoard()
        self.projects = ProjectDirectory(store, self.notices)
        self.stories = StoryDirectory(store, self.notices)
        self.auth = AdminAuthGate(store, session_slot, self.notices)

    def startup(self) -> None:
        """Restore the admin session and fill both caches."""
        self.auth.hydrate()
        self.projects.load_all()
        self.stories.load_all()
        logger.info(
            f"Portfolio ready: {len(self.projects.items)} projects, "
            f"{len(self.stories.items)} success stories"
        )


def build_state() -> PortfolioState:
    """State wired from environment configuration."""
    store = connect_store(DATABASE_URL, DATABASE_KEY)
    return PortfolioState(store, FileSessionSlot(SESSION_FILE))
