"""
Persisted admin session token

A single named slot holding the admin record id. Absent means anonymous.
"""
import json
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

SLOT_NAME = "admin_token"


class MemorySessionSlot:
    """Slot that lives as long as the process."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def read(self) -> Optional[str]:
        return self._token

    def write(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileSessionSlot:
    """
    Slot stored in a small JSON file, e.g. {"admin_token": "<id>"}.

    A missing or unreadable file reads as an empty slot.
    """

    def __init__(self, path: str, name: str = SLOT_NAME):
        self.path = path
        self.name = name

    def _load(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read session file {self.path}: {e}")
            return {}

    def read(self) -> Optional[str]:
        token = self._load().get(self.name)
        return str(token) if token else None

    def write(self, token: str) -> None:
        data = self._load()
        data[self.name] = token
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def clear(self) -> None:
        data = self._load()
        if self.name not in data:
            return
        data.pop(self.name)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)
