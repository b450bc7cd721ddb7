"""
Listing filters for the portfolio and Wall of Fame pages.

Pure functions over the cached lists; the input list is never modified.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from apps.portfolio.schemas import ListingFilter, Project, SuccessStory

CATEGORIES = ["Web Application", "Automation"]
SORT_MODES = ["latest", "oldest", "date"]
ACHIEVEMENT_TYPES = ["job_placement", "certification", "promotion", "startup", "other"]

# Date-only prefixes accepted besides full ISO-8601 timestamps
PARTIAL_DATE_FORMATS = ["%Y-%m", "%Y"]


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp, or a partial date such as "2024-05" or "2024".

    Naive values are read as UTC. Returns None if the value cannot be parsed.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in PARTIAL_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamp_sort_key(value: Optional[str]) -> Tuple[int, float]:
    """
    Sort key for a timestamp string.

    Unparsable or missing values rank below every valid timestamp.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return (0, 0.0)
    return (1, parsed.timestamp())


def matches_search(project: Project, term: str) -> bool:
    needle = term.lower()
    if needle in project.project_title.lower() or needle in project.student_name.lower():
        return True
    return any(needle in tag.lower() for tag in project.tools_technologies)


def filter_projects(projects: Iterable[Project], state: Optional[ListingFilter] = None) -> List[Project]:
    """
    Filter and sort projects for the listing page.

    Steps, in order:
    1. sort == "date" with a date set: keep projects whose created_at starts with it
       ("2024-05" keeps all of May 2024)
    2. search term: case-insensitive match on title, student name or any tool
    3. category: exact match
    4. latest / oldest: order by created_at; "date" keeps the store order (newest first)
    """
    state = state or ListingFilter()
    filtered = list(projects)

    if state.sort == "date" and state.date:
        filtered = [p for p in filtered if p.created_at and p.created_at.startswith(state.date)]

    if state.search:
        filtered = [p for p in filtered if matches_search(p, state.search)]

    if state.category:
        filtered = [p for p in filtered if p.category == state.category]

    if state.sort == "latest":
        filtered.sort(key=lambda p: timestamp_sort_key(p.created_at), reverse=True)
    elif state.sort == "oldest":
        filtered.sort(key=lambda p: timestamp_sort_key(p.created_at))

    return filtered


def filter_stories(stories: Iterable[SuccessStory], achievement_type: Optional[str] = None) -> List[SuccessStory]:
    """Stories of one achievement type; "all" or empty keeps everything."""
    if not achievement_type or achievement_type == "all":
        return list(stories)
    return [s for s in stories if s.achievement_type == achievement_type]
