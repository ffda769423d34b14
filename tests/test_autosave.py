import asyncio

from cipher_cli.autosave import IDLE, PENDING, AutosaveScheduler
from cipher_cli.files import APP_JS
from cipher_cli.session import StudioSession


def make_scheduler(timer, saves, **kwargs):
    return AutosaveScheduler(
        lambda: saves.append(timer.now),
        delay=1.0,
        call_later=timer.call_later,
        clock=timer.clock,
        **kwargs,
    )


def test_touch_arms_pending_save(timer):
    saves = []
    scheduler = make_scheduler(timer, saves)

    scheduler.touch()

    assert scheduler.state == PENDING
    assert scheduler.deadline == 1.0


def test_burst_of_touches_collapses_into_one_save(timer):
    saves = []
    scheduler = make_scheduler(timer, saves)

    for _ in range(5):
        scheduler.touch()
        timer.advance(0.5)
    timer.advance(1.0)

    assert saves == [3.5]
    assert scheduler.state == IDLE
    assert scheduler.deadline is None


def test_disabled_scheduler_ignores_touches(timer):
    saves = []
    scheduler = make_scheduler(timer, saves, enabled=False)

    scheduler.touch()
    timer.advance(5)

    assert saves == []
    assert scheduler.state == IDLE


def test_disabling_cancels_pending_save(timer):
    saves = []
    scheduler = make_scheduler(timer, saves)

    scheduler.touch()
    scheduler.set_enabled(False)
    timer.advance(5)

    assert saves == []
    assert scheduler.state == IDLE


def test_failing_save_returns_to_idle(timer):
    def explode():
        raise RuntimeError("disk full")

    scheduler = AutosaveScheduler(explode, 1.0, call_later=timer.call_later)
    scheduler.touch()
    timer.advance(1)

    assert scheduler.state == IDLE


def test_session_debounce_saves_last_mutation(timer, local):
    session = StudioSession(local, call_later=timer.call_later)

    for index in range(4):
        session.store.write(APP_JS, f"version {index}")
        timer.advance(0.2)
    assert local.list() == []

    timer.advance(1.0)

    [summary] = local.list()
    assert local.load(summary.id).files[APP_JS] == "version 3"


def test_session_load_cancels_pending_autosave(timer, local):
    session = StudioSession(local, call_later=timer.call_later)
    session.store.write(APP_JS, "unsaved")

    session.new_project("Other")
    timer.advance(5)

    assert local.list() == []


def test_scheduler_runs_on_asyncio_loop():
    saves = []

    async def scenario():
        scheduler = AutosaveScheduler(lambda: saves.append("saved"), delay=0.01)
        scheduler.touch()
        scheduler.touch()
        await asyncio.sleep(0.1)
        return scheduler.state

    assert asyncio.run(scenario()) == IDLE
    assert saves == ["saved"]


def test_touch_without_running_loop_stays_idle():
    saves = []
    scheduler = AutosaveScheduler(lambda: saves.append("saved"), delay=0.01)

    scheduler.touch()

    assert scheduler.state == IDLE
    assert scheduler.deadline is None
    assert saves == []


def test_default_session_edits_outside_event_loop(local):
    session = StudioSession(local)

    session.store.write(APP_JS, "typed")

    assert session.store.get(APP_JS) == "typed"
    assert session.autosave.state == IDLE
