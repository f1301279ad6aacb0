"""Data classes shared by the duplicate detection pipeline and audit stores."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class MatchType(str, Enum):
    """Tier that produced a verdict.

    ``SEMANTIC`` is reserved for a future embedding tier and is never
    produced by the current pipeline.
    """

    EXACT = "exact"
    NEAR = "near"
    SEMANTIC = "semantic"
    NONE = "none"

    def to_wire(self) -> Optional[str]:
        """Plain-data value; ``NONE`` serializes as ``None``."""
        return None if self is MatchType.NONE else self.value

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "MatchType":
        return cls.NONE if value is None else cls(value)


class SourceType(str, Enum):
    TEST_CASE = "test_case"
    SCRIPT = "script"
    SESSION = "session"


@dataclass(frozen=True)
class NormalizedContent:
    """Canonical text plus its SHA-256 fingerprint."""

    canonical_text: str
    content_hash: str


@dataclass(frozen=True)
class TestStep:
    """One step of a structured test case."""

    __test__ = False

    action: str
    expected: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"action": self.action, "expected": self.expected}


def steps_from_json(raw: Optional[str]) -> List[TestStep]:
    """Parse a stored JSON array of steps into ``TestStep`` objects.

    Accepts ``{"action", "expected"}`` objects and bare strings; ``None`` or an
    empty string gives an empty list.
    """
    if not raw:
        return []
    return steps_from_data(json.loads(raw))


def steps_from_data(data: Any) -> List[TestStep]:
    """Build ``TestStep`` objects from an already-decoded JSON array."""
    if not isinstance(data, list):
        raise ValueError("steps must be a JSON array")
    steps = []
    for item in data:
        if isinstance(item, str):
            steps.append(TestStep(action=item))
        elif isinstance(item, dict):
            steps.append(
                TestStep(
                    action=str(item.get("action", "")),
                    expected=str(item.get("expected", item.get("expectedResult", ""))),
                )
            )
        else:
            raise ValueError(f"unsupported step entry: {item!r}")
    return steps


@dataclass(frozen=True)
class TestCaseContent:
    """Structured test-case fields in their canonical order."""

    __test__ = False

    title: str
    description: Optional[str] = None
    steps: Sequence[TestStep] = ()
    expected_result: Optional[str] = None


@dataclass(frozen=True)
class Candidate:
    """Read-only projection of a stored item that content is compared against.

    Attributes:
        id: Identifier of the stored test case or script.
        display_name: Title or file name shown to users.
        raw_content: Un-normalized content.
        path: File path for script-like candidates, ``None`` for test cases.
    """

    id: str
    display_name: str
    raw_content: str
    path: Optional[str] = None


@dataclass(frozen=True)
class SimilarityResult:
    candidate: Candidate
    similarity: int

    def to_dict(self) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "id": self.candidate.id,
            "name": self.candidate.display_name,
            "similarity": self.similarity,
        }
        if self.candidate.path is not None:
            item["path"] = self.candidate.path
        return item


@dataclass(frozen=True)
class Verdict:
    """Classifier output before the audit record is written."""

    is_duplicate: bool
    confidence: int
    match_type: MatchType
    recommendation: str


@dataclass
class DuplicateResult:
    """Result of a duplicate check, returned to the caller.

    Attributes:
        is_duplicate: Whether the content was classified as a duplicate.
        confidence: 0-100 certainty that the content duplicates existing items.
            Callers that surface advisory warnings key off this independently
            of ``is_duplicate``.
        match_type: Tier that produced the verdict.
        similar_items: Ranked most-similar first, capped at the configured top-k.
        recommendation: Human-readable advice derived from the verdict.
        check_id: Id of the audit record, ``None`` when nothing was recorded.
        partial: True when a deadline cut candidate scanning short.
    """

    is_duplicate: bool
    confidence: int
    match_type: MatchType
    similar_items: List[SimilarityResult] = field(default_factory=list)
    recommendation: str = ""
    check_id: Optional[str] = None
    partial: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data shape used by API responses."""
        return {
            "isDuplicate": self.is_duplicate,
            "confidence": self.confidence,
            "matchType": self.match_type.to_wire(),
            "similarItems": [item.to_dict() for item in self.similar_items],
            "recommendation": self.recommendation,
            "checkId": self.check_id,
            "partial": self.partial,
        }


@dataclass(frozen=True)
class DuplicateCheck:
    """Immutable audit record of one duplicate check.

    ``id`` is left empty by callers and assigned by the audit store.
    """

    project_id: str
    source_type: SourceType
    is_duplicate: bool
    confidence: int
    match_type: MatchType
    checked_at: datetime
    id: str = ""
    source_id: Optional[str] = None
    session_id: Optional[str] = None
    content_hash: Optional[str] = None
    similar_items: Sequence[Dict[str, Any]] = ()
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "sourceType": self.source_type.value,
            "sourceId": self.source_id,
            "sessionId": self.session_id,
            "contentHash": self.content_hash,
            "isDuplicate": self.is_duplicate,
            "confidence": self.confidence,
            "matchType": self.match_type.to_wire(),
            "similarItems": [dict(item) for item in self.similar_items],
            "reason": self.reason,
            "checkedAt": self.checked_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DuplicateCheck":
        return cls(
            id=data["id"],
            project_id=data["projectId"],
            source_type=SourceType(data["sourceType"]),
            source_id=data.get("sourceId"),
            session_id=data.get("sessionId"),
            content_hash=data.get("contentHash"),
            is_duplicate=bool(data["isDuplicate"]),
            confidence=int(data["confidence"]),
            match_type=MatchType.from_wire(data.get("matchType")),
            similar_items=tuple(data.get("similarItems") or ()),
            reason=data.get("reason"),
            checked_at=datetime.fromisoformat(data["checkedAt"]),
        )
