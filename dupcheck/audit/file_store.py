"""Append-only JSON Lines audit store.

Each record is one line of JSON. Records are never rewritten; reads scan
the file, so lookups are O(records) and meant for modest audit volumes.
"""

import asyncio
import json
from dataclasses import replace
from pathlib import Path
from typing import Iterator, List, Union

from dupcheck.models import DuplicateCheck
from dupcheck.errors import NotFoundError
from dupcheck.utils.logger import log_warning

from .base import AuditStore, new_check_id


class JsonlAuditStore(AuditStore):
    """Audit store persisting records to a JSONL file."""

    def __init__(self, path: Union[str, Path] = ".dupcheck/audit.jsonl", name: str = "file"):
        super().__init__(name)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    async def record(self, check: DuplicateCheck) -> str:
        async with self._lock:
            stored = replace(check, id=check.id or new_check_id())
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(stored.to_dict(), ensure_ascii=False) + "\n")
            self._record_write()
            return stored.id

    async def get_by_id(self, check_id: str) -> DuplicateCheck:
        async with self._lock:
            for check in self._iter_records():
                if check.id == check_id:
                    return check
        raise NotFoundError("DuplicateCheck", check_id)

    async def list_by_project(self, project_id: str, limit: int = 50) -> List[DuplicateCheck]:
        self._check_limit(limit)
        async with self._lock:
            matches = [c for c in self._iter_records() if c.project_id == project_id]
        matches.reverse()
        return matches[:limit]

    def _iter_records(self) -> Iterator[DuplicateCheck]:
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield DuplicateCheck.from_dict(json.loads(line))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    log_warning(
                        "Skipping unreadable audit line",
                        path=str(self.path),
                        line=line_no,
                        error=str(e),
                    )
