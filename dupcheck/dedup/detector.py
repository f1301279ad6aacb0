"""Orchestrator for duplicate detection.

The ``DuplicateDetector`` is the only entry point callers use. For each
check it normalizes the input, looks for an exact fingerprint match among
the project's candidates, falls back to similarity ranking when there is
none, classifies the outcome and writes exactly one audit record::

    input -> normalize -> fingerprint (tier 1) -> rank (tier 2) -> classify -> audit

A check cut short by its deadline returns a best-effort result flagged
``partial`` and writes no audit record. A session without a project has no
corpus to compare against and writes no record either.
"""

from __future__ import annotations

import asyncio
import functools
import time
from datetime import datetime, timezone
from typing import Awaitable, List, Optional, Sequence, Tuple, Union

from dupcheck import metrics
from dupcheck.audit.base import AuditStore
from dupcheck.config import DedupConfig
from dupcheck.dedup.classifier import classify
from dupcheck.dedup.fingerprint import fingerprint
from dupcheck.dedup.normalize import (
    join_test_case_fields,
    normalize_script,
    normalize_test_case,
    normalize_test_case_content,
    normalize_text,
)
from dupcheck.dedup.ranker import SimilarityRanker
from dupcheck.errors import InvalidInputError, NotFoundError
from dupcheck.models import (
    Candidate,
    DuplicateCheck,
    DuplicateResult,
    MatchType,
    NormalizedContent,
    SimilarityResult,
    SourceType,
    TestCaseContent,
)
from dupcheck.sources.base import CandidateSource, ScriptRecord, TestCaseRecord
from dupcheck.utils.deadline import Deadline
from dupcheck.utils.logger import (
    log_debug,
    log_duplicate_detection,
    log_error,
    log_info,
    log_warning,
)

RECOMMEND_NO_PROJECT = "No project associated with session; there is no corpus to compare against."
RECOMMEND_NO_TEST_FILES = "Session has no generated test files to check."

# (candidate, canonical text) pairs for one project corpus
Corpus = List[Tuple[Candidate, str]]


def _test_case_corpus(records: Sequence[TestCaseRecord]) -> Corpus:
    corpus = []
    for r in records:
        candidate = Candidate(
            id=r.id,
            display_name=r.title,
            raw_content=join_test_case_fields(r.title, r.description, r.steps, r.expected_result),
        )
        normalized = normalize_test_case(r.title, r.description, r.steps, r.expected_result)
        corpus.append((candidate, normalized.canonical_text))
    return corpus


def _script_corpus(records: Sequence[ScriptRecord]) -> Corpus:
    return [
        (
            Candidate(id=r.id, display_name=r.name, raw_content=r.code, path=r.path),
            normalize_script(r.code, r.path or r.name).canonical_text,
        )
        for r in records
    ]


def _require(value: Optional[str], field_name: str) -> None:
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{field_name} is required")


def _require_content(normalized: NormalizedContent, field_name: str) -> None:
    if not normalized.canonical_text:
        raise InvalidInputError(f"{field_name} has no content after normalization")


class DuplicateDetector:
    """Check test cases, scripts and generation sessions for duplicates.

    Args:
        source: Read access to the project corpus.
        audit_store: Where every check is recorded.
        config: Thresholds and limits. Defaults to ``DedupConfig()``.
        ranker: Similarity ranker. Built from ``config`` if *None*.

    Usage::

        detector = DuplicateDetector(source, MemoryAuditStore())
        result = await detector.check_script(code, project_id)
        if result.confidence >= 60:
            # surface result.to_dict() as a duplicate warning
            ...
    """

    def __init__(
        self,
        source: CandidateSource,
        audit_store: AuditStore,
        config: Optional[DedupConfig] = None,
        ranker: Optional[SimilarityRanker] = None,
    ):
        self.source = source
        self.audit_store = audit_store
        self.config = config or DedupConfig()
        self.ranker = ranker or SimilarityRanker(
            top_k=self.config.top_k,
            min_similarity=self.config.min_similarity,
            length_ratio_floor=self.config.length_ratio_floor,
            max_workers=self.config.max_workers,
            parallel_threshold=self.config.parallel_threshold,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def check_test_case(
        self,
        content: Union[str, TestCaseContent],
        project_id: str,
        exclude_id: Optional[str] = None,
        deadline: Optional[Deadline] = None,
    ) -> DuplicateResult:
        """Check test-case content against the project's test cases.

        Args:
            content: Either the serialized canonical form (title, description,
                steps JSON, expected result joined by spaces) or the
                structured ``TestCaseContent``.
            project_id: Project whose test cases form the corpus.
            exclude_id: Id of the test case being edited, never matched.
            deadline: Optional deadline for candidate scanning.
        """
        if isinstance(content, TestCaseContent):
            _require(content.title, "title")
            normalized = normalize_test_case_content(content)
        else:
            _require(content, "content")
            normalized = normalize_text(content)
            _require_content(normalized, "content")
        _require(project_id, "project_id")

        started = time.perf_counter()
        records = await self.source.list_test_cases(project_id, exclude_id)
        result = await self._evaluate(normalized, _test_case_corpus(records), deadline)
        return await self._finish(
            result,
            project_id=project_id,
            source_type=SourceType.TEST_CASE,
            source_id=exclude_id,
            content_hash=normalized.content_hash,
            started=started,
        )

    async def check_script(
        self,
        code: str,
        project_id: str,
        exclude_id: Optional[str] = None,
        deadline: Optional[Deadline] = None,
        path: Optional[str] = None,
    ) -> DuplicateResult:
        """Check automation code against the project's scripts.

        ``path`` is the file name of the code, used to pick its comment
        syntax; C-style comments are assumed without it.
        """
        _require(code, "code")
        _require(project_id, "project_id")
        normalized = normalize_script(code, path)
        _require_content(normalized, "code")

        started = time.perf_counter()
        records = await self.source.list_scripts(project_id, exclude_id)
        result = await self._evaluate(normalized, _script_corpus(records), deadline)
        return await self._finish(
            result,
            project_id=project_id,
            source_type=SourceType.SCRIPT,
            source_id=exclude_id,
            content_hash=normalized.content_hash,
            started=started,
        )

    async def check_session(
        self, session_id: str, deadline: Optional[Deadline] = None
    ) -> DuplicateResult:
        """Check every generated test file of a session against project scripts.

        Files are compared individually and aggregated: the session is a
        duplicate if any file is, confidence and match type come from the
        strongest file, similar items are merged by id. One audit record is
        written for the whole session.
        """
        _require(session_id, "session_id")

        session = await self.source.get_session(session_id)
        if session is None:
            raise NotFoundError("GenerationSession", session_id)

        if not session.project_id:
            log_info("Session has no project, skipping duplicate check", session_id=session_id)
            return DuplicateResult(
                is_duplicate=False,
                confidence=0,
                match_type=MatchType.NONE,
                recommendation=RECOMMEND_NO_PROJECT,
            )

        started = time.perf_counter()
        test_files = session.test_files()
        normalized_files = [normalize_script(f.content, f.path) for f in test_files]
        session_hash = fingerprint("\n".join(n.canonical_text for n in normalized_files))

        if not test_files:
            result = DuplicateResult(
                is_duplicate=False,
                confidence=0,
                match_type=MatchType.NONE,
                recommendation=RECOMMEND_NO_TEST_FILES,
            )
        else:
            records = await self.source.list_scripts(session.project_id)
            corpus = _script_corpus(records)
            per_file = []
            for normalized in normalized_files:
                per_file.append(await self._evaluate(normalized, corpus, deadline))
            result = self._aggregate(per_file)

        return await self._finish(
            result,
            project_id=session.project_id,
            source_type=SourceType.SESSION,
            source_id=session_id,
            session_id=session_id,
            content_hash=session_hash,
            started=started,
        )

    async def get_check(self, check_id: str) -> DuplicateCheck:
        """Return a recorded check, raising ``NotFoundError`` when absent."""
        _require(check_id, "check_id")
        return await self.audit_store.get_by_id(check_id)

    async def list_project_checks(self, project_id: str, limit: int = 50) -> List[DuplicateCheck]:
        """Return the project's most recent checks."""
        _require(project_id, "project_id")
        return await self.audit_store.list_by_project(project_id, limit)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _evaluate(
        self,
        normalized: NormalizedContent,
        corpus: Corpus,
        deadline: Optional[Deadline],
    ) -> DuplicateResult:
        """Run both tiers and classify; nothing is recorded here."""
        metrics.gauge("corpus.size", len(corpus))
        if not corpus or not normalized.canonical_text:
            verdict = classify(None, [], self.config.near_threshold, self.config.review_threshold)
            return DuplicateResult(
                is_duplicate=verdict.is_duplicate,
                confidence=verdict.confidence,
                match_type=verdict.match_type,
                recommendation=verdict.recommendation,
            )

        # Tier 1: exact fingerprint match
        for candidate, text in corpus:
            if fingerprint(text) == normalized.content_hash:
                log_debug("Exact fingerprint match", candidate_id=candidate.id)
                verdict = classify(candidate, [], self.config.near_threshold, self.config.review_threshold)
                return DuplicateResult(
                    is_duplicate=verdict.is_duplicate,
                    confidence=verdict.confidence,
                    match_type=verdict.match_type,
                    similar_items=[SimilarityResult(candidate=candidate, similarity=100)],
                    recommendation=verdict.recommendation,
                )

        # Tier 2: similarity ranking, off the event loop
        loop = asyncio.get_running_loop()
        ranking = await loop.run_in_executor(
            None,
            functools.partial(
                self.ranker.run,
                normalized.canonical_text,
                [c for c, _ in corpus],
                deadline=deadline,
                texts=[t for _, t in corpus],
            ),
        )
        if ranking.pruned:
            metrics.incr("candidates.pruned", value=ranking.pruned)

        verdict = classify(
            None, ranking.results, self.config.near_threshold, self.config.review_threshold
        )
        return DuplicateResult(
            is_duplicate=verdict.is_duplicate,
            confidence=verdict.confidence,
            match_type=verdict.match_type,
            similar_items=ranking.results,
            recommendation=verdict.recommendation,
            partial=ranking.partial,
        )

    def _aggregate(self, per_file: Sequence[DuplicateResult]) -> DuplicateResult:
        strongest = max(per_file, key=lambda r: (r.is_duplicate, r.confidence))

        merged = {}
        for result in per_file:
            for item in result.similar_items:
                existing = merged.get(item.candidate.id)
                if existing is None or item.similarity > existing.similarity:
                    merged[item.candidate.id] = item
        items = sorted(merged.values(), key=lambda r: (-r.similarity, r.candidate.id))

        return DuplicateResult(
            is_duplicate=any(r.is_duplicate for r in per_file),
            confidence=strongest.confidence,
            match_type=strongest.match_type,
            similar_items=items[:self.config.top_k],
            recommendation=strongest.recommendation,
            partial=any(r.partial for r in per_file),
        )

    async def _finish(
        self,
        result: DuplicateResult,
        project_id: str,
        source_type: SourceType,
        content_hash: str,
        started: float,
        source_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> DuplicateResult:
        """Record the check (unless partial) and emit logs and metrics."""
        elapsed_ms = (time.perf_counter() - started) * 1000
        metrics.incr("checks.total", source_type=source_type.value)
        metrics.timing("check.duration", elapsed_ms, source_type=source_type.value)

        if result.partial:
            metrics.incr("checks.partial", source_type=source_type.value)
            log_warning(
                "Duplicate check hit its deadline, not recorded",
                project_id=project_id,
                source_type=source_type.value,
                confidence=result.confidence,
            )
            return result

        check = DuplicateCheck(
            project_id=project_id,
            source_type=source_type,
            source_id=source_id,
            session_id=session_id,
            content_hash=content_hash,
            is_duplicate=result.is_duplicate,
            confidence=result.confidence,
            match_type=result.match_type,
            similar_items=tuple(item.to_dict() for item in result.similar_items),
            reason=result.recommendation,
            checked_at=datetime.now(timezone.utc),
        )
        try:
            result.check_id = await self.audit_store.record(check)
        except Exception as e:
            log_error(
                "Failed to record duplicate check",
                project_id=project_id,
                source_type=source_type.value,
                error=str(e),
            )
            raise

        if result.is_duplicate:
            metrics.incr(
                "duplicates.found",
                source_type=source_type.value,
                match_type=result.match_type.value,
            )
            log_duplicate_detection(
                result.confidence,
                result.match_type.value,
                project_id=project_id,
                source_type=source_type.value,
                check_id=result.check_id,
            )
        else:
            log_info(
                "Duplicate check complete",
                project_id=project_id,
                source_type=source_type.value,
                confidence=result.confidence,
                match_type=result.match_type.value,
                check_id=result.check_id,
                duration_ms=round(elapsed_ms, 1),
            )
        return result


async def safe_check(check: Awaitable[DuplicateResult]) -> Optional[DuplicateResult]:
    """Await a check for a caller that treats detection as advisory.

    Any failure is logged and turned into ``None`` so the save or generate
    operation the check accompanies can proceed without a warning.
    """
    try:
        return await check
    except Exception as e:
        log_warning(
            "Duplicate check failed, continuing without duplicate warning",
            error=str(e),
            error_type=type(e).__name__,
        )
        return None
