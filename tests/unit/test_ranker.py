"""Unit tests for similarity ranking."""

import pytest

from dupcheck.dedup.ranker import (
    Ranking,
    SimilarityRanker,
    length_ratio,
    similarity_percent,
)
from dupcheck.models import Candidate
from dupcheck.utils.deadline import Deadline


def _candidate(cid: str, text: str) -> Candidate:
    return Candidate(id=cid, display_name=cid, raw_content=text)


def _mutate_tail(text: str, count: int) -> str:
    """Replace the last ``count`` chars with a char absent from ``text``."""
    assert "~" not in text
    return text[:-count] + "~" * count


BASE = "await page.fill(#username, testuser); await page.fill(#password, password123); await page.click(submit);"


class TestSimilarityPercent:
    def test_self_identity(self):
        assert similarity_percent(BASE, BASE) == 100

    def test_empty_side_scores_zero(self):
        assert similarity_percent("", "abc") == 0
        assert similarity_percent("abc", "") == 0

    def test_both_empty_identical(self):
        assert similarity_percent("", "") == 100

    def test_formula(self):
        # 4 substitutions over 10 chars
        assert similarity_percent("abcdefghij", "abcdef~~~~") == 60

    def test_symmetric(self):
        other = "await page.fill(#email, guest); await page.click(pay);"
        assert similarity_percent(BASE, other) == similarity_percent(other, BASE)

    def test_completely_different_same_length(self):
        assert similarity_percent("aaaa", "bbbb") == 0


class TestLengthRatio:
    def test_ratio(self):
        assert length_ratio("ab", "abcd") == 0.5
        assert length_ratio("abcd", "ab") == 0.5

    def test_empty(self):
        assert length_ratio("", "") == 1.0
        assert length_ratio("", "a") == 0.0


class TestSimilarityRanker:
    def test_sorted_descending_and_capped(self):
        ranker = SimilarityRanker(top_k=2, min_similarity=0)
        candidates = [
            _candidate("c1", _mutate_tail(BASE, 30)),
            _candidate("c2", _mutate_tail(BASE, 5)),
            _candidate("c3", _mutate_tail(BASE, 15)),
        ]

        results = ranker.rank(BASE, candidates)

        assert [r.candidate.id for r in results] == ["c2", "c3"]
        assert results[0].similarity > results[1].similarity

    def test_ties_broken_by_candidate_id(self):
        ranker = SimilarityRanker(min_similarity=0)
        text = _mutate_tail(BASE, 10)
        candidates = [_candidate("b", text), _candidate("a", text), _candidate("c", text)]

        results = ranker.rank(BASE, candidates)

        assert [r.candidate.id for r in results] == ["a", "b", "c"]

    def test_minimum_similarity_floor(self):
        ranker = SimilarityRanker(min_similarity=30, length_ratio_floor=0.0)

        results = ranker.rank("abcdefghij", [_candidate("low", "abc~~~~~~~")])

        # 7 substitutions over 10 chars -> 30, exactly at the floor
        assert [r.similarity for r in results] == [30]

        results = ranker.rank("abcdefghij", [_candidate("lower", "ab~~~~~~~~")])
        assert results == []

    def test_length_prune_skips_candidate(self):
        """A pruned candidate never appears, even if it would score above the floor."""
        input_text = "abcd"
        candidate = _candidate("long", "abcdabcdab")

        unpruned = SimilarityRanker(min_similarity=30, length_ratio_floor=0.0).rank(input_text, [candidate])
        assert unpruned and unpruned[0].similarity == 40

        ranking = SimilarityRanker(min_similarity=30, length_ratio_floor=0.5).run(input_text, [candidate])
        assert ranking.results == []
        assert ranking.pruned == 1

    def test_length_ratio_at_floor_is_compared(self):
        ranker = SimilarityRanker(min_similarity=0, length_ratio_floor=0.5)

        ranking = ranker.run("ab", [_candidate("c", "abcd")])

        assert ranking.pruned == 0
        assert ranking.results[0].similarity == 50

    def test_texts_override_raw_content(self):
        ranker = SimilarityRanker(min_similarity=0)
        candidate = _candidate("c", "something else entirely")

        results = ranker.rank(BASE, [candidate], texts=[BASE])

        assert results[0].similarity == 100

    def test_texts_length_mismatch(self):
        with pytest.raises(ValueError):
            SimilarityRanker().rank(BASE, [_candidate("c", BASE)], texts=[])

    def test_empty_corpus(self):
        ranking = SimilarityRanker().run(BASE, [])

        assert ranking == Ranking()

    def test_invalid_top_k(self):
        with pytest.raises(ValueError):
            SimilarityRanker(top_k=0)

    def test_parallel_matches_sequential(self):
        candidates = [_candidate(f"c{i:02d}", _mutate_tail(BASE, i + 1)) for i in range(20)]

        sequential = SimilarityRanker(top_k=10, max_workers=1).rank(BASE, candidates)
        parallel = SimilarityRanker(top_k=10, max_workers=4, parallel_threshold=2).rank(BASE, candidates)

        assert parallel == sequential
        assert [r.candidate.id for r in parallel] == [f"c{i:02d}" for i in range(10)]


class TestDeadline:
    def test_cancelled_deadline_returns_partial(self):
        deadline = Deadline.never()
        deadline.cancel()
        candidates = [_candidate("c1", BASE)]

        ranking = SimilarityRanker().run(BASE, candidates, deadline=deadline)

        assert ranking.partial is True
        assert ranking.scanned == 0
        assert ranking.results == []

    def test_open_deadline_completes(self):
        ranking = SimilarityRanker().run(BASE, [_candidate("c1", BASE)], deadline=Deadline.after(60))

        assert ranking.partial is False
        assert ranking.scanned == 1

    def test_expired_deadline(self):
        deadline = Deadline.after(0)

        assert deadline.expired()
        assert deadline.remaining() == 0.0

    def test_unbounded_deadline(self):
        deadline = Deadline.never()

        assert not deadline.expired()
        assert deadline.remaining() is None
