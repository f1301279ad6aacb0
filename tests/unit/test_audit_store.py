"""Unit tests for audit stores."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from dupcheck.audit import JsonlAuditStore, MemoryAuditStore, build_audit_store
from dupcheck.config import Config
from dupcheck.errors import InvalidInputError, NotFoundError
from dupcheck.models import DuplicateCheck, MatchType, SourceType

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_check(project_id="project-123", minutes=0, **overrides) -> DuplicateCheck:
    fields = dict(
        project_id=project_id,
        source_type=SourceType.SCRIPT,
        is_duplicate=True,
        confidence=92,
        match_type=MatchType.NEAR,
        checked_at=BASE_TIME + timedelta(minutes=minutes),
        source_id="script-123",
        content_hash="ab" * 32,
        similar_items=({"id": "script-456", "name": "checkout.spec.ts", "similarity": 92},),
        reason="Near duplicate found.",
    )
    fields.update(overrides)
    return DuplicateCheck(**fields)


@pytest_asyncio.fixture(params=["memory", "file"])
async def store(request, tmp_path):
    """Each test runs once per backend."""
    if request.param == "memory":
        backend = MemoryAuditStore(name="test_memory")
    else:
        backend = JsonlAuditStore(tmp_path / "audit" / "checks.jsonl", name="test_file")
    yield backend
    await backend.close()


class TestAuditStoreContract:
    """Behaviour shared by every backend."""

    @pytest.mark.asyncio
    async def test_record_assigns_id(self, store):
        check_id = await store.record(make_check())

        assert check_id.startswith("DC-")
        assert len(check_id) == 15
        assert store.writes == 1

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        original = make_check()
        check_id = await store.record(original)

        loaded = await store.get_by_id(check_id)

        assert loaded.id == check_id
        assert loaded.project_id == original.project_id
        assert loaded.source_type == SourceType.SCRIPT
        assert loaded.match_type == MatchType.NEAR
        assert loaded.confidence == 92
        assert loaded.checked_at == original.checked_at
        assert list(loaded.similar_items) == list(original.similar_items)

    @pytest.mark.asyncio
    async def test_reads_are_idempotent(self, store):
        check_id = await store.record(make_check())

        first = await store.get_by_id(check_id)
        second = await store.get_by_id(check_id)

        assert first == second

    @pytest.mark.asyncio
    async def test_none_match_type(self, store):
        check_id = await store.record(
            make_check(is_duplicate=False, confidence=0, match_type=MatchType.NONE, similar_items=())
        )

        loaded = await store.get_by_id(check_id)

        assert loaded.match_type == MatchType.NONE
        assert loaded.to_dict()["matchType"] is None

    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            await store.get_by_id("DC-000000000000")

        assert exc_info.value.resource == "DuplicateCheck"
        assert exc_info.value.identifier == "DC-000000000000"

    @pytest.mark.asyncio
    async def test_list_most_recent_first(self, store):
        ids = [await store.record(make_check(minutes=i)) for i in range(3)]

        checks = await store.list_by_project("project-123")

        assert [c.id for c in checks] == list(reversed(ids))

    @pytest.mark.asyncio
    async def test_list_scoped_to_project(self, store):
        await store.record(make_check(project_id="other"))
        mine = await store.record(make_check())

        checks = await store.list_by_project("project-123")

        assert [c.id for c in checks] == [mine]
        assert await store.list_by_project("missing") == []

    @pytest.mark.asyncio
    async def test_list_limit(self, store):
        for i in range(5):
            await store.record(make_check(minutes=i))

        checks = await store.list_by_project("project-123", limit=2)

        assert len(checks) == 2
        assert checks[0].checked_at > checks[1].checked_at

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 201, -1])
    async def test_limit_out_of_range(self, store, limit):
        with pytest.raises(InvalidInputError):
            await store.list_by_project("project-123", limit=limit)

    @pytest.mark.asyncio
    async def test_limit_bounds_accepted(self, store):
        await store.record(make_check())

        assert len(await store.list_by_project("project-123", limit=1)) == 1
        assert len(await store.list_by_project("project-123", limit=200)) == 1


class TestMemoryAuditStore:
    @pytest.mark.asyncio
    async def test_rejects_reused_id(self):
        store = MemoryAuditStore()
        check_id = await store.record(make_check())

        with pytest.raises(ValueError):
            await store.record(make_check(id=check_id))

        assert len(store) == 1


class TestJsonlAuditStore:
    @pytest.mark.asyncio
    async def test_records_survive_new_instance(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        check_id = await JsonlAuditStore(path).record(make_check())

        reopened = JsonlAuditStore(path)

        assert (await reopened.get_by_id(check_id)).id == check_id

    @pytest.mark.asyncio
    async def test_one_line_per_record(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        store = JsonlAuditStore(path)
        await store.record(make_check())
        await store.record(make_check(minutes=1))

        assert len(path.read_text(encoding="utf-8").splitlines()) == 2

    @pytest.mark.asyncio
    async def test_skips_corrupt_lines(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        store = JsonlAuditStore(path)
        first = await store.record(make_check())
        with path.open("a", encoding="utf-8") as f:
            f.write("{not json\n")
            f.write('{"id": "DC-BROKEN"}\n')
            f.write("[]\n")
            f.write("42\n")
        second = await store.record(make_check(minutes=1))

        checks = await store.list_by_project("project-123")

        assert [c.id for c in checks] == [second, first]

    @pytest.mark.asyncio
    async def test_missing_file_lists_nothing(self, tmp_path):
        store = JsonlAuditStore(tmp_path / "nested" / "audit.jsonl")

        assert await store.list_by_project("project-123") == []


class TestBuildAuditStore:
    def test_memory_backend(self):
        assert isinstance(build_audit_store(Config(audit_backend="memory")), MemoryAuditStore)

    def test_file_backend(self, tmp_path):
        config = Config(audit_backend="file", audit_file_path=str(tmp_path / "audit.jsonl"))

        store = build_audit_store(config)

        assert isinstance(store, JsonlAuditStore)
        assert store.path == tmp_path / "audit.jsonl"
