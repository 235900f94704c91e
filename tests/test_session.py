import pytest

from offworklock.config import ForcedExitConfig, SessionResetMode
from offworklock.domain.abuse import (
    DEFAULT_WARNING_TEMPLATE,
    AbuseTracker,
    format_warning,
    threshold_reached,
)
from offworklock.domain.points import MAX_POINTS
from offworklock.storage import PlayerRecord
from offworklock.testing import app_fixture


@pytest.mark.asyncio()
async def test_first_session_is_not_a_forced_exit():
    app = app_fixture()
    result = await app.sessions.handle_session_start("world", "alice")
    assert not result.forced_exit_detected
    assert result.record.session_open
    assert result.record.forced_exit_count == 0
    assert (await app.store.find("world", "alice")).session_open


@pytest.mark.asyncio()
async def test_ungraceful_restarts_increment_counter():
    app = app_fixture()
    await app.sessions.handle_session_start("world", "alice")

    second = await app.sessions.handle_session_start("world", "alice")
    assert second.forced_exit_detected
    assert second.record.forced_exit_count == 1

    third = await app.sessions.handle_session_start("world", "alice")
    assert third.forced_exit_detected
    assert third.record.forced_exit_count == 2
    assert (await app.store.find("world", "alice")).forced_exit_count == 2


@pytest.mark.asyncio()
async def test_graceful_exit_closes_session():
    app = app_fixture()
    await app.sessions.handle_session_start("world", "alice")
    await app.sessions.handle_graceful_exit("world", "alice")
    assert not (await app.store.find("world", "alice")).session_open

    result = await app.sessions.handle_session_start("world", "alice")
    assert not result.forced_exit_detected
    assert result.record.forced_exit_count == 0


@pytest.mark.asyncio()
async def test_one_time_unlock_is_consumed_on_graceful_exit():
    app = app_fixture(session_reset_mode=SessionResetMode.ONE_TIME)
    await app.sessions.handle_session_start("world", "alice")
    record = await app.store.find("world", "alice")
    await app.store.update("world", "alice", record.with_unlocked(True))

    await app.sessions.handle_graceful_exit("world", "alice")
    result = await app.sessions.handle_session_start("world", "alice")
    assert not result.record.unlocked


@pytest.mark.asyncio()
async def test_permanent_unlock_survives_graceful_exit():
    app = app_fixture(session_reset_mode=SessionResetMode.PERMANENT)
    await app.sessions.handle_session_start("world", "alice")
    record = await app.store.find("world", "alice")
    await app.store.update("world", "alice", record.with_unlocked(True))

    await app.sessions.handle_graceful_exit("world", "alice")
    result = await app.sessions.handle_session_start("world", "alice")
    assert result.record.unlocked


@pytest.mark.asyncio()
async def test_disabled_tracking_resets_counter():
    app = app_fixture(forced_exit=ForcedExitConfig(tracking_enabled=False))
    await app.store.update(
        "world", "alice", PlayerRecord("alice", session_open=True, forced_exit_count=4)
    )
    result = await app.sessions.handle_session_start("world", "alice")
    assert result.forced_exit_detected
    assert result.record.forced_exit_count == 0
    assert not result.abuse_report.threshold_reached


@pytest.mark.asyncio()
async def test_disabled_tracking_resets_counter_on_graceful_exit():
    app = app_fixture(forced_exit=ForcedExitConfig(tracking_enabled=False))
    await app.store.update("world", "alice", PlayerRecord("alice", forced_exit_count=4))
    await app.sessions.handle_graceful_exit("world", "alice")
    assert (await app.store.find("world", "alice")).forced_exit_count == 0


@pytest.mark.asyncio()
async def test_counter_saturates():
    app = app_fixture()
    await app.store.update(
        "world", "alice", PlayerRecord("alice", session_open=True, forced_exit_count=MAX_POINTS)
    )
    result = await app.sessions.handle_session_start("world", "alice")
    assert result.record.forced_exit_count == MAX_POINTS


@pytest.mark.asyncio()
async def test_threshold_produces_warning():
    app = app_fixture(
        forced_exit=ForcedExitConfig(warning_threshold=2, warning_message="Caught {count} times")
    )
    await app.sessions.handle_session_start("world", "alice")
    first = await app.sessions.handle_session_start("world", "alice")
    assert not first.abuse_report.threshold_reached
    assert first.abuse_report.warning_message is None

    second = await app.sessions.handle_session_start("world", "alice")
    assert second.abuse_report.threshold_reached
    assert second.abuse_report.warning_message == "Caught 2 times"


@pytest.mark.asyncio()
async def test_hooks_run_once_per_detection_and_errors_are_swallowed():
    events = []

    async def record_event(event):
        events.append(event)

    async def broken_hook(event):
        raise RuntimeError("boom")

    app = app_fixture(forced_exit=ForcedExitConfig(warning_threshold=5))
    app.abuse_tracker.add_hook(broken_hook)
    app.abuse_tracker.add_hook(record_event)

    await app.sessions.handle_session_start("world", "alice")
    assert events == []

    result = await app.sessions.handle_session_start("world", "alice")
    assert result.forced_exit_detected
    assert len(events) == 1
    assert events[0].player_id == "alice"
    assert events[0].record.forced_exit_count == 1
    assert not events[0].threshold_reached
    assert (await app.store.find("world", "alice")).forced_exit_count == 1

    app.abuse_tracker.remove_hook(record_event)
    await app.sessions.handle_session_start("world", "alice")
    assert len(events) == 1


def test_threshold_rules():
    assert threshold_reached(tracking_enabled=True, threshold=3, count=3)
    assert not threshold_reached(tracking_enabled=True, threshold=3, count=2)
    assert not threshold_reached(tracking_enabled=True, threshold=0, count=10)
    assert not threshold_reached(tracking_enabled=True, threshold=-1, count=10)
    assert not threshold_reached(tracking_enabled=False, threshold=1, count=10)


def test_format_warning_falls_back_to_default_template():
    assert format_warning("", 4) == DEFAULT_WARNING_TEMPLATE.replace("{count}", "4")
    assert format_warning("{count} / {count}", 2) == "2 / 2"


def test_negative_threshold_is_floored():
    assert ForcedExitConfig(warning_threshold=-4).warning_threshold == 0


def test_tracker_ignores_missing_hooks():
    tracker = AbuseTracker()
    tracker.add_hook(None)
    tracker.remove_hook(None)
    assert tuple(tracker.hooks()) == ()
