"""In-memory candidate source for embedding callers and tests."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional

from .base import (
    CandidateSource,
    GenerationSession,
    ScriptRecord,
    TestCaseRecord,
)


class MemoryCandidateSource(CandidateSource):
    """Holds test cases, scripts and sessions in plain dictionaries."""

    def __init__(self):
        self._test_cases: Dict[str, List[TestCaseRecord]] = defaultdict(list)
        self._scripts: Dict[str, List[ScriptRecord]] = defaultdict(list)
        self._sessions: Dict[str, GenerationSession] = {}
        self.calls: List[tuple] = []

    def add_test_case(self, project_id: str, record: TestCaseRecord) -> None:
        self._test_cases[project_id].append(record)

    def add_script(self, project_id: str, record: ScriptRecord) -> None:
        self._scripts[project_id].append(record)

    def add_session(self, session: GenerationSession) -> None:
        self._sessions[session.id] = session

    async def list_test_cases(
        self, project_id: str, exclude_id: Optional[str] = None
    ) -> List[TestCaseRecord]:
        self.calls.append(("list_test_cases", project_id, exclude_id))
        return [r for r in self._test_cases.get(project_id, []) if r.id != exclude_id]

    async def list_scripts(
        self, project_id: str, exclude_id: Optional[str] = None
    ) -> List[ScriptRecord]:
        self.calls.append(("list_scripts", project_id, exclude_id))
        return [r for r in self._scripts.get(project_id, []) if r.id != exclude_id]

    async def get_session(self, session_id: str) -> Optional[GenerationSession]:
        self.calls.append(("get_session", session_id))
        return self._sessions.get(session_id)
