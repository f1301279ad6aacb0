"""Approximate-similarity ranking of candidates against normalized input.

Each candidate first passes a length-ratio prune: when the shorter text is
less than ``length_ratio_floor`` of the longer one, the pair is skipped and
scored 0 without computing an edit distance. This is an approximation, so a
pruned pair never shows up in the output even if a full comparison would
have scored it above ``min_similarity``.

Surviving pairs are scored with Levenshtein distance::

    similarity = round((1 - distance / max(len_a, len_b)) * 100)

which costs O(n*m) per candidate. The ranker imposes no size limit of its
own; callers are expected to cap input size upstream.
"""
from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from dupcheck.models import Candidate, SimilarityResult
from dupcheck.utils.deadline import Deadline
from dupcheck.utils.logger import log_debug, log_warning


def length_ratio(a: str, b: str) -> float:
    """``min(len)/max(len)``; two empty strings have ratio 1.0."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return min(len(a), len(b)) / longest


def similarity_percent(a: str, b: str) -> int:
    """Levenshtein similarity of two canonical texts, 0-100 and symmetric."""
    if a == b:
        return 100
    if not a or not b:
        return 0
    distance = Levenshtein.distance(a, b)
    score = round((1 - distance / max(len(a), len(b))) * 100)
    return max(0, min(100, score))


@dataclass
class Ranking:
    """Outcome of one ranking pass.

    Attributes:
        results: Ranked similar items, highest first.
        partial: True when the deadline stopped the scan early.
        scanned: Candidates visited before completion or expiry.
        pruned: Candidates skipped by the length-ratio filter.
    """

    results: List[SimilarityResult] = field(default_factory=list)
    partial: bool = False
    scanned: int = 0
    pruned: int = 0


@dataclass
class _ChunkOutcome:
    scored: List[Tuple[Candidate, int]]
    scanned: int
    pruned: int
    stopped: bool


class SimilarityRanker:
    """Score candidates against input text and keep the best ``top_k``.

    Args:
        top_k: Maximum number of results returned.
        min_similarity: Results below this score are dropped.
        length_ratio_floor: Length ratio below which a pair is skipped.
        max_workers: Threads used for scoring. ``None`` uses the CPU count,
            ``1`` keeps everything on the calling thread.
        parallel_threshold: Minimum candidate count before fanning out.
    """

    def __init__(
        self,
        top_k: int = 5,
        min_similarity: int = 30,
        length_ratio_floor: float = 0.5,
        max_workers: Optional[int] = 1,
        parallel_threshold: int = 64,
    ):
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        self.top_k = top_k
        self.min_similarity = min_similarity
        self.length_ratio_floor = length_ratio_floor
        self.max_workers = max_workers if max_workers is not None else (os.cpu_count() or 1)
        self.parallel_threshold = parallel_threshold

    def rank(
        self,
        input_text: str,
        candidates: Sequence[Candidate],
        deadline: Optional[Deadline] = None,
        texts: Optional[Sequence[str]] = None,
    ) -> List[SimilarityResult]:
        """Return ranked similar items (see ``run`` for arguments)."""
        return self.run(input_text, candidates, deadline=deadline, texts=texts).results

    def run(
        self,
        input_text: str,
        candidates: Sequence[Candidate],
        deadline: Optional[Deadline] = None,
        texts: Optional[Sequence[str]] = None,
    ) -> Ranking:
        """Score every candidate and return the full ``Ranking``.

        Args:
            input_text: Canonical text of the content being checked.
            candidates: Corpus to compare against.
            deadline: Optional deadline; scanning stops once it expires and
                whatever was scored so far is ranked.
            texts: Canonical text per candidate. Defaults to each
                candidate's ``raw_content``.
        """
        if texts is None:
            texts = [c.raw_content for c in candidates]
        if len(texts) != len(candidates):
            raise ValueError("texts and candidates must have the same length")

        pairs = list(zip(candidates, texts))
        workers = min(self.max_workers, len(pairs))
        if workers > 1 and len(pairs) >= self.parallel_threshold:
            size = -(-len(pairs) // workers)
            chunks = [pairs[i:i + size] for i in range(0, len(pairs), size)]
            with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
                outcomes = list(
                    pool.map(lambda chunk: self._score_chunk(input_text, chunk, deadline), chunks)
                )
        else:
            outcomes = [self._score_chunk(input_text, pairs, deadline)]

        scored = [item for outcome in outcomes for item in outcome.scored]
        ranking = Ranking(
            results=self._select(scored),
            partial=any(outcome.stopped for outcome in outcomes),
            scanned=sum(outcome.scanned for outcome in outcomes),
            pruned=sum(outcome.pruned for outcome in outcomes),
        )

        if ranking.partial:
            log_warning(
                "Ranking stopped by deadline",
                scanned=ranking.scanned,
                total=len(pairs),
            )
        log_debug(
            "Ranking complete",
            candidates=len(pairs),
            pruned=ranking.pruned,
            returned=len(ranking.results),
        )
        return ranking

    def _score_chunk(
        self,
        input_text: str,
        pairs: Sequence[Tuple[Candidate, str]],
        deadline: Optional[Deadline],
    ) -> _ChunkOutcome:
        outcome = _ChunkOutcome(scored=[], scanned=0, pruned=0, stopped=False)
        for candidate, text in pairs:
            if deadline is not None and deadline.expired():
                outcome.stopped = True
                break
            outcome.scanned += 1
            if length_ratio(input_text, text) < self.length_ratio_floor:
                outcome.pruned += 1
                continue
            outcome.scored.append((candidate, similarity_percent(input_text, text)))
        return outcome

    def _select(self, scored: List[Tuple[Candidate, int]]) -> List[SimilarityResult]:
        kept = [
            SimilarityResult(candidate=c, similarity=s)
            for c, s in scored
            if s >= self.min_similarity and s > 0
        ]
        kept.sort(key=lambda r: (-r.similarity, r.candidate.id))
        return kept[:self.top_k]
