"""In-memory audit store."""

import asyncio
from dataclasses import replace
from typing import Dict, List

from dupcheck.models import DuplicateCheck
from dupcheck.errors import NotFoundError

from .base import AuditStore, new_check_id


class MemoryAuditStore(AuditStore):
    """Audit store that keeps records for the lifetime of the process."""

    def __init__(self, name: str = "memory"):
        super().__init__(name)
        self._records: Dict[str, DuplicateCheck] = {}
        self._order: List[str] = []
        self._lock = asyncio.Lock()

    async def record(self, check: DuplicateCheck) -> str:
        async with self._lock:
            stored = replace(check, id=check.id or new_check_id())
            if stored.id in self._records:
                raise ValueError(f"duplicate check id already recorded: {stored.id}")
            self._records[stored.id] = stored
            self._order.append(stored.id)
            self._record_write()
            return stored.id

    async def get_by_id(self, check_id: str) -> DuplicateCheck:
        async with self._lock:
            check = self._records.get(check_id)
        if check is None:
            raise NotFoundError("DuplicateCheck", check_id)
        return check

    async def list_by_project(self, project_id: str, limit: int = 50) -> List[DuplicateCheck]:
        self._check_limit(limit)
        async with self._lock:
            matches = []
            for check_id in reversed(self._order):
                check = self._records[check_id]
                if check.project_id == project_id:
                    matches.append(check)
                    if len(matches) >= limit:
                        break
            return matches

    def __len__(self) -> int:
        return len(self._order)
