from __future__ import annotations

from _fakes import T0, FakeClock, FakeLoop, FakeRenderer, full_context, icon_key

import stoptiles.marker.tile as tile_module
from stoptiles.marker.composer import MarkerComposer
from stoptiles.marker.tile import StopMarker
from stoptiles.models import Permissions, Stop, StopDisplaySettings, StopFilters, ViewContext
from stoptiles.state.scheduler import SchedulerState
from stoptiles.state.store import ContextStore


def _marker(
    stop: Stop,
    loop: FakeLoop,
    clock: FakeClock,
    renderer: FakeRenderer,
    context: ViewContext | None = None,
    force: bool = False,
) -> tuple[StopMarker, ContextStore]:
    store = ContextStore(context or full_context())
    marker = StopMarker(
        stop,
        store=store,
        renderer=renderer,
        composer=MarkerComposer(icon_key),
        loop=loop,  # type: ignore[arg-type]
        clock=clock,
        force=force,
    )
    marker.mount()
    return marker, store


def test_lure_expires_and_marker_re_renders_without_it(
    loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer
) -> None:
    stop = Stop(id="s1", lat=1.0, lon=2.0, lure_id=501, lure_expire_timestamp=T0 + 100, ar_scan_eligible=True)
    marker, _store = _marker(stop, loop, clock, renderer)

    assert marker.flags.has_lure is True
    assert marker.timers == {T0 + 100}
    assert loop.delays == [100]
    drawn = renderer.drawn["s1"]
    assert drawn.icon == "pokestop_lure501"
    assert drawn.timer is not None and drawn.timer.expiries == (T0 + 100,)

    loop.advance(100)

    assert clock.now >= T0 + 100
    assert marker.flags.has_lure is False
    assert marker.timers == frozenset()
    assert marker.scheduler.state is SchedulerState.IDLE
    drawn = renderer.drawn["s1"]
    assert drawn.icon == "pokestop"
    assert drawn.timer is None


def test_expired_lure_only_stop_is_removed(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    stop = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100)
    _marker(stop, loop, clock, renderer)
    assert "s1" in renderer.drawn

    loop.advance(100)

    assert "s1" not in renderer.drawn
    assert renderer.removed == ["s1"]


def test_fire_uses_deadline_when_clock_lags(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    stop = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100, ar_scan_eligible=True)
    marker, _store = _marker(stop, loop, clock, renderer)

    # Wall clock reads slightly before the expiry when the wake-up runs.
    clock.now = T0 + 99.9
    handle = loop.pending[0]
    handle.cancelled = True
    handle.callback(*handle.args)

    assert marker.flags.has_lure is False
    assert loop.pending == []


def test_second_invasion_rearms_for_absolute_instant(
    loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer
) -> None:
    stop = Stop.model_validate(
        {
            "id": "s1",
            "invasions": [
                {"grunt_type": 4, "incident_expire_timestamp": T0 + 50},
                {"grunt_type": 5, "incident_expire_timestamp": T0 + 200},
            ],
        }
    )
    marker, _store = _marker(stop, loop, clock, renderer)

    assert marker.timers == {T0 + 50, T0 + 200}
    assert loop.delays == [50]

    loop.advance(50)

    assert marker.flags.has_invasion is True
    assert marker.timers == {T0 + 200}
    assert marker.scheduler.deadline == T0 + 200
    assert loop.delays[-1] == 150

    loop.advance(150)

    assert marker.flags.has_invasion is False
    assert "s1" not in renderer.drawn


def test_suppressed_when_nothing_active(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    stop = Stop(id="s1", ar_scan_eligible=False)
    context = full_context(filters=StopFilters(all_pokestops=False))

    marker, _store = _marker(stop, loop, clock, renderer, context)

    assert marker.drawn is None
    assert renderer.draw_calls == []
    assert loop.handles == []


def test_destroy_cancels_timer_and_stops_derivation(
    loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer, monkeypatch
) -> None:
    calls: list[float] = []
    original = tile_module.derive_visibility

    def counting(stop, context, now):  # type: ignore[no-untyped-def]
        calls.append(now)
        return original(stop, context, now)

    monkeypatch.setattr(tile_module, "derive_visibility", counting)

    stop = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100)
    marker, store = _marker(stop, loop, clock, renderer)
    marker.destroy()
    calls.clear()

    loop.advance(500)
    store.update(permissions=Permissions())
    marker.refresh()
    assert marker.update(Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 900)) is False

    assert calls == []
    assert loop.pending == []
    assert len(store) == 0
    assert renderer.removed == ["s1"]
    assert marker.scheduler.closed is True


def test_destroy_is_idempotent(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    marker, _store = _marker(Stop(id="s1", ar_scan_eligible=True), loop, clock, renderer)

    marker.destroy()
    marker.destroy()

    assert renderer.removed == ["s1"]


def test_update_goes_through_render_gate(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    stop = Stop(id="s1", name="Fountain", ar_scan_eligible=True, updated=T0 - 10)
    marker, _store = _marker(stop, loop, clock, renderer)
    renders = marker.render_count

    assert marker.update(Stop(id="s1", name="Statue", ar_scan_eligible=True, updated=T0 - 10)) is False
    assert marker.render_count == renders
    assert marker.stop.name == "Fountain"

    newer = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 60, updated=T0)
    assert marker.update(newer) is True
    assert marker.flags.has_lure is True
    assert marker.scheduler.deadline == T0 + 60


def test_context_change_rederives_only_when_relevant(
    loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer
) -> None:
    stop = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100)
    marker, store = _marker(stop, loop, clock, renderer)
    renders = marker.render_count

    store.update(exclude_list=frozenset({"i99"}))
    store.update(zoom=17)
    assert marker.render_count == renders

    store.update(exclude_list=frozenset({"l501"}))
    assert marker.render_count == renders + 1
    assert marker.flags.has_lure is False
    assert "s1" not in renderer.drawn
    assert loop.pending == []


def test_timer_setting_change_rearms(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    stop = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100, ar_scan_eligible=True)
    context = full_context(settings=StopDisplaySettings())
    marker, store = _marker(stop, loop, clock, renderer, context)

    assert marker.timers == frozenset()
    assert loop.handles == []

    store.update(settings=StopDisplaySettings(lure_timers=True))

    assert marker.timers == {T0 + 100}
    assert marker.scheduler.deadline == T0 + 100


def test_auto_open_happens_once(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    stop = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100, ar_scan_eligible=True)
    marker, _store = _marker(stop, loop, clock, renderer, force=True)

    assert renderer.opened == ["s1"]

    marker.refresh()
    marker.set_force(False)
    marker.set_force(True)
    loop.advance(100)

    assert renderer.opened == ["s1"]
    assert marker.auto_opened is True


def test_auto_open_waits_until_drawn(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    stop = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100)
    context = full_context(permissions=Permissions())
    marker, store = _marker(stop, loop, clock, renderer, context, force=True)

    assert renderer.opened == []

    store.set(full_context())

    assert renderer.opened == ["s1"]


def test_exclusion_after_update_hides_new_lure(loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer) -> None:
    marker, store = _marker(Stop(id="s1", ar_scan_eligible=True), loop, clock, renderer)
    assert marker.flags.has_lure is False

    marker.update(Stop(id="s1", ar_scan_eligible=True, lure_id=501, lure_expire_timestamp=T0 + 100))
    assert renderer.drawn["s1"].icon == "pokestop_lure501"

    store.update(exclude_list={"l501"})

    assert marker.flags.has_lure is False
    drawn = renderer.drawn["s1"]
    assert drawn.icon == "pokestop"
    assert drawn.timer is None
    assert loop.pending == []


def test_revoked_permission_after_update_removes_marker(
    loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer
) -> None:
    marker, store = _marker(Stop(id="s1"), loop, clock, renderer)
    assert "s1" not in renderer.drawn

    marker.update(Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100))
    assert "s1" in renderer.drawn

    store.update(permissions=Permissions(pokestops=True))

    assert marker.flags.should_render is False
    assert "s1" not in renderer.drawn
    assert loop.pending == []


def test_context_change_after_expiry_uses_current_state(
    loop: FakeLoop, clock: FakeClock, renderer: FakeRenderer
) -> None:
    stop = Stop(id="s1", lure_id=501, lure_expire_timestamp=T0 + 100, ar_scan_eligible=True)
    marker, store = _marker(stop, loop, clock, renderer, full_context(filters=StopFilters(event_stops=True)))

    loop.advance(100)
    assert renderer.drawn["s1"].icon == "pokestop"
    renders = marker.render_count

    store.update(exclude_list={"l501"})
    assert marker.render_count == renders

    store.update(permissions=Permissions(pokestops=True, lures=True))
    assert marker.render_count == renders
    store.update(permissions=Permissions())
    assert marker.render_count == renders + 1
    assert "s1" not in renderer.drawn
