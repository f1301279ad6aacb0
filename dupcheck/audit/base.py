"""Abstract base class for audit stores.

An audit store is append-only: it creates each ``DuplicateCheck`` exactly
once and only ever reads it back. No update or delete operation exists.
"""

import uuid
from abc import ABC, abstractmethod
from typing import List

from dupcheck.models import DuplicateCheck
from dupcheck.errors import InvalidInputError

MAX_LIST_LIMIT = 200


def new_check_id() -> str:
    """Generate a record id like DC-1A2B3C4D5E6F."""
    return f"DC-{uuid.uuid4().hex[:12].upper()}"


class AuditStore(ABC):
    """Abstract base class for audit stores."""

    def __init__(self, name: str):
        self.name = name
        self.writes = 0

    @abstractmethod
    async def record(self, check: DuplicateCheck) -> str:
        """Persist ``check`` and return its id."""

    @abstractmethod
    async def get_by_id(self, check_id: str) -> DuplicateCheck:
        """Return the record, raising ``NotFoundError`` when absent."""

    @abstractmethod
    async def list_by_project(self, project_id: str, limit: int = 50) -> List[DuplicateCheck]:
        """Return up to ``limit`` records for a project, most recent first."""

    async def close(self) -> None:
        """Release backend resources."""

    def _check_limit(self, limit: int) -> None:
        if not 1 <= limit <= MAX_LIST_LIMIT:
            raise InvalidInputError(f"limit must be between 1 and {MAX_LIST_LIMIT}, got {limit}")

    def _record_write(self) -> None:
        self.writes += 1
