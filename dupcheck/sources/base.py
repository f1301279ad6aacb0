"""Read-only interface to the stored corpus a check compares against.

The relational persistence layer lives outside this package; it plugs in by
implementing ``CandidateSource``. Every listing is scoped to one project and
honors ``exclude_id`` so an item being edited never matches itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from dupcheck.models import TestStep


@dataclass(frozen=True)
class TestCaseRecord:
    """A stored test case, fields as the persistence layer holds them."""

    __test__ = False

    id: str
    title: str
    description: Optional[str] = None
    steps: Sequence[TestStep] = ()
    expected_result: Optional[str] = None


@dataclass(frozen=True)
class ScriptRecord:
    """A stored automation script."""

    id: str
    name: str
    code: str
    path: Optional[str] = None


@dataclass(frozen=True)
class SessionFile:
    id: str
    path: str
    content: str
    file_type: str = "test"


@dataclass(frozen=True)
class GenerationSession:
    """A multi-file script generation session.

    ``project_id`` is ``None`` for sessions started outside a project.
    """

    id: str
    project_id: Optional[str] = None
    files: Sequence[SessionFile] = field(default_factory=tuple)

    def test_files(self) -> List[SessionFile]:
        return [f for f in self.files if f.file_type == "test"]


class CandidateSource(ABC):
    """Abstract base class for candidate sources."""

    @abstractmethod
    async def list_test_cases(
        self, project_id: str, exclude_id: Optional[str] = None
    ) -> List[TestCaseRecord]:
        """Return the project's test cases, minus ``exclude_id``."""

    @abstractmethod
    async def list_scripts(
        self, project_id: str, exclude_id: Optional[str] = None
    ) -> List[ScriptRecord]:
        """Return the project's scripts, minus ``exclude_id``."""

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[GenerationSession]:
        """Return the session with its files, or ``None`` when unknown."""
