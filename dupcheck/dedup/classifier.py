"""Turn an exact hit or the top similarity score into a graded verdict.

Rules are evaluated in priority order, first match wins:

  1. Exact hit                          -> duplicate, confidence 100, ``exact``
  2. top >= near_threshold              -> duplicate, confidence top, ``near``
  3. top >= review_threshold            -> not a duplicate, confidence top, ``near``
  4. otherwise                          -> not a duplicate, confidence top or 0, ``none``

Rule 3 flags content for human review without auto-classifying it; callers
that show advisory warnings key off the confidence alone.
"""
from __future__ import annotations

from typing import Optional, Sequence

from dupcheck.models import Candidate, MatchType, SimilarityResult, Verdict

NEAR_THRESHOLD = 85
REVIEW_THRESHOLD = 60

RECOMMEND_EXACT = "Exact duplicate found. This content already exists; consider reusing the existing item."
RECOMMEND_NEAR = "Near duplicate found. Content is very similar to existing items; consider updating one of them instead."
RECOMMEND_REVIEW = "Similar items found. Review them before saving."
RECOMMEND_NONE = "No similar items found."


def classify(
    exact_hit: Optional[Candidate],
    ranked: Sequence[SimilarityResult],
    near_threshold: int = NEAR_THRESHOLD,
    review_threshold: int = REVIEW_THRESHOLD,
) -> Verdict:
    if exact_hit is not None:
        return Verdict(
            is_duplicate=True,
            confidence=100,
            match_type=MatchType.EXACT,
            recommendation=RECOMMEND_EXACT,
        )

    top = ranked[0].similarity if ranked else 0

    if ranked and top >= near_threshold:
        return Verdict(True, top, MatchType.NEAR, RECOMMEND_NEAR)
    if ranked and top >= review_threshold:
        return Verdict(False, top, MatchType.NEAR, RECOMMEND_REVIEW)
    return Verdict(False, top, MatchType.NONE, RECOMMEND_NONE)
