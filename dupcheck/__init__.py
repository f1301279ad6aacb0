"""Duplicate content detection engine for test-management platforms."""

from dupcheck.dedup import DuplicateDetector, SimilarityRanker, safe_check
from dupcheck.errors import DuplicateDetectionError, InvalidInputError, NotFoundError
from dupcheck.models import (
    Candidate,
    DuplicateCheck,
    DuplicateResult,
    MatchType,
    TestCaseContent,
    TestStep,
)

__version__ = "0.1.0"

__all__ = [
    "Candidate",
    "DuplicateCheck",
    "DuplicateDetectionError",
    "DuplicateDetector",
    "DuplicateResult",
    "InvalidInputError",
    "MatchType",
    "NotFoundError",
    "SimilarityRanker",
    "TestCaseContent",
    "TestStep",
    "safe_check",
]
