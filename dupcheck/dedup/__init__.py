"""Duplicate and near-duplicate detection for test cases and scripts.

Checks run from cheapest to most expensive tier: an exact content
fingerprint lookup first, then bounded Levenshtein similarity ranking.
"""

from dupcheck.dedup.classifier import classify
from dupcheck.dedup.detector import DuplicateDetector, safe_check
from dupcheck.dedup.fingerprint import fingerprint
from dupcheck.dedup.normalize import normalize_script, normalize_test_case, normalize_text
from dupcheck.dedup.ranker import SimilarityRanker

__all__ = [
    "DuplicateDetector",
    "SimilarityRanker",
    "classify",
    "fingerprint",
    "normalize_script",
    "normalize_test_case",
    "normalize_text",
    "safe_check",
]
