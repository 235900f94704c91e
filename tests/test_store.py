import asyncio
import gc
import logging

import pytest

from offworklock.domain.exceptions import StorageError
from offworklock.domain.points import MAX_POINTS
from offworklock.storage import (
    FlatFileRecordBackend,
    InMemoryRecordBackend,
    PlayerRecord,
    PlayerStateStore,
    sanitize_context,
)
from offworklock.storage.flatfile import format_records, parse_line


class FlakyBackend(InMemoryRecordBackend):
    def __init__(self) -> None:
        super().__init__()
        self.fail_load = False
        self.fail_save = False

    async def load(self, context):
        if self.fail_load:
            raise StorageError("load failed", context=context)
        return await super().load(context)

    async def save(self, context, records):
        if self.fail_save:
            raise StorageError("save failed", context=context)
        await super().save(context, records)


def test_player_record_clamps_values():
    record = PlayerRecord("p", points=-5, forced_exit_count=-1)
    assert record.points == 0
    assert record.forced_exit_count == 0
    assert PlayerRecord("p", points=2**40).points == MAX_POINTS


def test_sanitize_context():
    assert sanitize_context("") == "default"
    assert sanitize_context(None) == "default"
    assert sanitize_context("my world!") == "my_world_"
    assert sanitize_context("survival-1_a") == "survival-1_a"


@pytest.mark.asyncio()
async def test_get_or_create_returns_default_without_flushing():
    backend = InMemoryRecordBackend()
    store = PlayerStateStore(backend)
    record = await store.get_or_create("world", "alice")
    assert record == PlayerRecord("alice")
    assert backend.saves == 0
    assert await store.find("world", "bob") is None


@pytest.mark.asyncio()
async def test_update_flushes_whole_context():
    backend = InMemoryRecordBackend()
    store = PlayerStateStore(backend)
    await store.update("world", "alice", PlayerRecord("alice", points=10))
    await store.update("world", "bob", PlayerRecord("bob", points=20))
    assert backend.saves == 2
    assert set(backend.dump()["world"]) == {"alice", "bob"}

    reopened = PlayerStateStore(backend)
    assert (await reopened.find("world", "bob")).points == 20


@pytest.mark.asyncio()
async def test_contexts_are_isolated_and_sanitised():
    backend = InMemoryRecordBackend()
    store = PlayerStateStore(backend)
    await store.update("my world!", "alice", PlayerRecord("alice", points=5))
    assert "my_world_" in backend.dump()
    assert await store.find("other", "alice") is None
    assert (await store.find("my_world_", "alice")).points == 5


@pytest.mark.asyncio()
async def test_update_rejects_mismatched_record():
    store = PlayerStateStore(InMemoryRecordBackend())
    with pytest.raises(ValueError):
        await store.update("world", "alice", PlayerRecord("bob"))


@pytest.mark.asyncio()
async def test_snapshot_is_read_only_copy():
    store = PlayerStateStore(InMemoryRecordBackend())
    await store.update("world", "alice", PlayerRecord("alice", points=1))
    snapshot = await store.snapshot("world")
    with pytest.raises(TypeError):
        snapshot["bob"] = PlayerRecord("bob")  # type: ignore[index]
    await store.update("world", "bob", PlayerRecord("bob"))
    assert list(snapshot) == ["alice"]


@pytest.mark.asyncio()
async def test_failed_load_leaves_no_cache():
    backend = FlakyBackend()
    await backend.save("world", {"alice": PlayerRecord("alice", points=7)})
    store = PlayerStateStore(backend)

    backend.fail_load = True
    with pytest.raises(StorageError):
        await store.get_or_create("world", "alice")

    backend.fail_load = False
    assert (await store.get_or_create("world", "alice")).points == 7


@pytest.mark.asyncio()
async def test_failed_save_leaves_cache_unchanged():
    backend = FlakyBackend()
    store = PlayerStateStore(backend)
    await store.update("world", "alice", PlayerRecord("alice", points=10))

    backend.fail_save = True
    with pytest.raises(StorageError):
        await store.update("world", "alice", PlayerRecord("alice", points=99))

    assert (await store.find("world", "alice")).points == 10
    assert backend.dump()["world"]["alice"].points == 10


@pytest.mark.asyncio()
async def test_invalidate_forces_reload():
    backend = InMemoryRecordBackend()
    store = PlayerStateStore(backend)
    await store.update("world", "alice", PlayerRecord("alice", points=1))
    await backend.save("world", {"alice": PlayerRecord("alice", points=42)})

    assert (await store.find("world", "alice")).points == 1
    store.invalidate("world")
    assert (await store.find("world", "alice")).points == 42


@pytest.mark.asyncio()
async def test_transaction_serialises_read_modify_write():
    store = PlayerStateStore(InMemoryRecordBackend())

    async def increment() -> None:
        async with store.transaction("world") as tx:
            record = await tx.get_or_create("alice")
            await asyncio.sleep(0)
            await tx.update("alice", record.with_points(record.points + 1))

    await asyncio.gather(*(increment() for _ in range(25)))
    assert (await store.find("world", "alice")).points == 25


@pytest.mark.asyncio()
async def test_flat_file_round_trip(tmp_path):
    backend = FlatFileRecordBackend(tmp_path)
    store = PlayerStateStore(backend)
    await store.update(
        "survival",
        "alice",
        PlayerRecord("alice", points=120, unlocked=True, session_open=False, forced_exit_count=2),
    )

    text = (tmp_path / "survival.dat").read_text(encoding="utf-8")
    assert text.splitlines() == [
        "# Player state for context survival",
        "alice,120,true,false,2",
    ]

    reopened = PlayerStateStore(FlatFileRecordBackend(tmp_path))
    assert await reopened.find("survival", "alice") == PlayerRecord(
        "alice", points=120, unlocked=True, forced_exit_count=2
    )


@pytest.mark.asyncio()
async def test_flat_file_reads_legacy_three_field_lines(tmp_path):
    (tmp_path / "legacy.dat").write_text("alice,120,true\n", encoding="utf-8")
    store = PlayerStateStore(FlatFileRecordBackend(tmp_path))
    record = await store.find("legacy", "alice")
    assert record == PlayerRecord("alice", points=120, unlocked=True)


@pytest.mark.asyncio()
async def test_flat_file_skips_malformed_lines(tmp_path, caplog):
    (tmp_path / "mixed.dat").write_text(
        "\n".join(
            [
                "# header",
                "",
                "bob,not-a-number,true",
                ",5,true",
                "carol,5",
                "dave,7,TRUE,yes,abc",
                "erin,3,false,true,4",
            ]
        ),
        encoding="utf-8",
    )
    store = PlayerStateStore(FlatFileRecordBackend(tmp_path))
    with caplog.at_level(logging.WARNING, logger="offworklock.storage.flatfile"):
        records = await store.snapshot("mixed")

    assert list(records) == ["dave", "erin"]
    assert records["dave"] == PlayerRecord("dave", points=7, unlocked=True)
    assert records["erin"] == PlayerRecord("erin", points=3, session_open=True, forced_exit_count=4)
    assert len([r for r in caplog.records if "malformed" in r.getMessage()]) == 3


@pytest.mark.asyncio()
async def test_flat_file_rejects_unstorable_player_id(tmp_path):
    store = PlayerStateStore(FlatFileRecordBackend(tmp_path))
    with pytest.raises(StorageError):
        await store.update("world", "a,b", PlayerRecord("a,b"))
    assert not (tmp_path / "world.dat").exists()


def test_parse_line_clamps_stored_values():
    record = parse_line(f"alice,{2**40},false,false,-3")
    assert record.points == MAX_POINTS
    assert record.forced_exit_count == 0


def test_format_records_writes_header_for_empty_context():
    assert format_records("empty", []) == "# Player state for context empty\n"


@pytest.mark.asyncio()
async def test_flat_file_skips_undecodable_line(tmp_path, caplog):
    (tmp_path / "world.dat").write_bytes(
        b"alice,10,true,false,0\nbob\xff,5,false,false,0\ncarol,3,false,false,1\n"
    )
    store = PlayerStateStore(FlatFileRecordBackend(tmp_path))
    with caplog.at_level(logging.WARNING, logger="offworklock.storage.flatfile"):
        records = await store.snapshot("world")

    assert list(records) == ["alice", "carol"]
    assert records["alice"] == PlayerRecord("alice", points=10, unlocked=True)
    assert any("undecodable" in r.getMessage() and ":2" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio()
async def test_default_records_are_not_cached_until_updated():
    backend = InMemoryRecordBackend()
    store = PlayerStateStore(backend)
    await store.get_or_create("world", "ghost")
    assert dict(await store.snapshot("world")) == {}
    assert await store.find("world", "ghost") is None

    await store.update("world", "ghost", PlayerRecord("ghost", points=1))
    assert list(await store.snapshot("world")) == ["ghost"]


@pytest.mark.asyncio()
async def test_failed_roll_does_not_register_player():
    from offworklock.testing import app_fixture

    app = app_fixture()
    outcome = await app.roll_engine.roll("world", "alice")
    assert not outcome.success
    assert dict(await app.store.snapshot("world")) == {}


@pytest.mark.asyncio()
async def test_context_locks_are_released_when_idle():
    store = PlayerStateStore(InMemoryRecordBackend())
    for idx in range(50):
        await store.update(f"ctx{idx}", "alice", PlayerRecord("alice", points=idx))
    gc.collect()
    assert len(store._locks) == 0
    assert (await store.find("ctx49", "alice")).points == 49
