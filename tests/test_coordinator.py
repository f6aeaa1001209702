import pytest

from circlegraph.animation import ImmediateAnimator, RecordingAnimator
from circlegraph.config import Breakpoint
from circlegraph.consistency import check_consistency
from circlegraph.coordinator import REBUILD, REPOSITION, LayoutCoordinator
from circlegraph.paths import PathState
from circlegraph.responsive import ResponsiveConfigManager
from circlegraph.scheduler import ManualScheduler
from circlegraph.surface import InMemorySurface
from circlegraph.types import MissingCollaborator


def _setup(width=1024, items=8, animator=None, surface=True, tiers=None, **kwargs):
    scheduler = ManualScheduler()
    manager = ResponsiveConfigManager(width, tiers, scheduler=scheduler)
    coordinator = LayoutCoordinator(
        manager,
        items,
        animator=animator if animator is not None else RecordingAnimator(),
        surface=InMemorySurface() if surface else None,
        **kwargs,
    )
    return coordinator, manager, scheduler


def test_initial_load_grows_items_from_center():
    coordinator, _, _ = _setup()
    animator = coordinator.animator
    coordinator.start()

    assert animator.placements[0] == (250.0, 250.0)
    assert animator.scales[0] == 0.0
    assert len(animator.pending) == 8
    assert animator.pending[3].delay == pytest.approx(0.3)
    assert not coordinator.connectors_built
    assert len(coordinator.paths.surface) == 0

    animator.complete_all()
    assert coordinator.is_settled
    assert coordinator.connectors_built
    assert coordinator.paths.connector_count == 28
    assert animator.positions[0] == pytest.approx((500.0, 250.0))


def test_breakpoint_change_rebuilds_and_keeps_states():
    coordinator, manager, scheduler = _setup()
    animator = coordinator.animator
    coordinator.start()
    animator.complete_all()

    coordinator.toggle_connector(1, 3)
    coordinator.toggle_connector(1, 3)
    assert coordinator.paths.state_of(1, 3) is PathState.SECONDARY

    manager.on_resize(600)
    scheduler.advance(300)

    assert coordinator.cycle.kind == REBUILD
    assert coordinator.item_count == 6
    assert len(coordinator.graph.edges()) == 15
    assert coordinator.paths.connector_count == 15
    assert coordinator.paths.state_of(1, 3) is PathState.SECONDARY
    assert coordinator.paths.connector(1, 7) is None
    assert {6, 7} <= animator.hidden

    animator.complete_all()
    assert coordinator.is_settled
    assert check_consistency(coordinator) == []


def test_stale_completions_do_not_settle_new_cycle():
    coordinator, manager, scheduler = _setup()
    animator = coordinator.animator
    first = coordinator.start()
    for _ in range(3):
        animator.complete()

    manager.on_resize(600)
    scheduler.advance(300)
    second = coordinator.cycle
    assert second.token != first.token
    assert len(animator.pending) == 5 + 6

    for _ in range(5):
        animator.complete()
    assert second.completed == 0
    assert not coordinator.is_settled
    assert not first.settled

    animator.complete_all()
    assert second.completed == 6
    assert coordinator.is_settled
    assert coordinator.paths.connector_count == 15


def test_out_of_order_completions_settle_once():
    coordinator, _, _ = _setup(items=4)
    settled = []
    coordinator.on_settled(settled.append)
    coordinator.start()

    coordinator.animator.complete_all(order=[3, 1, 0, 2])
    assert len(settled) == 1
    assert settled[0].completed == 4


def test_same_extent_tiers_reposition():
    tiers = [
        Breakpoint("narrow", 0, 699, container=400, center=200, radius=120, item_size=60, item_count=12),
        Breakpoint("wide", 700, None, container=400, center=200, radius=160, item_size=60, item_count=12),
    ]
    coordinator, manager, scheduler = _setup(width=500, tiers=tiers, animator=ImmediateAnimator())
    coordinator.start()
    coordinator.toggle_connector(0, 4)

    manager.on_resize(900)
    scheduler.advance(300)

    cycle = coordinator.cycle
    assert cycle.kind == REPOSITION
    assert cycle.settled
    assert coordinator.paths.connector_count == 28
    assert coordinator.paths.state_of(0, 4) is PathState.PRIMARY
    path = coordinator.paths.connector(0, 4).path
    assert path.is_straight
    assert path.start == pytest.approx((360.0, 200.0))
    assert coordinator.animator.history[-1].delay == pytest.approx(7 * 0.1 * 0.5)
    assert check_consistency(coordinator) == []


def test_update_available_items_rebuilds_graph():
    coordinator, _, _ = _setup(animator=ImmediateAnimator())
    coordinator.start()

    cycle = coordinator.update_available_items(4)
    assert cycle.kind == REBUILD
    assert coordinator.item_count == 4
    assert coordinator.paths.connector_count == 6
    assert 5 in coordinator.animator.hidden


def test_zero_items_settle_immediately():
    coordinator, _, _ = _setup(items=0)
    cycle = coordinator.start()

    assert cycle.settled
    assert coordinator.graph.edges() == []
    assert coordinator.paths.connector_count == 0


def test_missing_animator_settles_unless_strict():
    scheduler = ManualScheduler()
    manager = ResponsiveConfigManager(1024, scheduler=scheduler)
    coordinator = LayoutCoordinator(manager, 5, surface=InMemorySurface())
    assert coordinator.start().settled
    assert coordinator.paths.connector_count == 10

    strict = LayoutCoordinator(ResponsiveConfigManager(1024), 5, strict=True)
    with pytest.raises(MissingCollaborator):
        strict.start()


def test_missing_surface_disables_connectors_only():
    coordinator, _, _ = _setup(surface=False, animator=ImmediateAnimator())
    coordinator.start()

    assert coordinator.is_settled
    assert coordinator.toggle_connector(0, 1) is None
    assert coordinator.highlight_item(0, True) == []
    assert coordinator.stats()["connectors_enabled"] is False
    assert len(coordinator.graph.edges()) == 28


def test_highlight_and_reset_through_coordinator():
    coordinator, _, _ = _setup(items=5, animator=ImmediateAnimator())
    coordinator.start()
    coordinator.toggle_connector(0, 1)

    assert len(coordinator.highlight_item(2, True)) == 4
    assert coordinator.hover_connector(0, 1, True).width == 8.0
    assert coordinator.reset_connectors() == 10
    assert coordinator.paths.state_of(0, 1) is PathState.DIM


def test_failing_settle_listener_is_contained():
    coordinator, _, _ = _setup(items=3, animator=ImmediateAnimator())

    def boom(cycle):
        raise RuntimeError("listener failure")

    calls = []
    coordinator.on_settled(boom)
    coordinator.on_settled(calls.append)
    coordinator.start()
    assert len(calls) == 1


def test_refresh_repositions_on_unchanged_breakpoint():
    coordinator, _, _ = _setup(animator=ImmediateAnimator())
    coordinator.start()

    cycle = coordinator.refresh()
    assert cycle.kind == REPOSITION
    assert cycle.settled


def test_close_unsubscribes():
    coordinator, manager, scheduler = _setup(animator=ImmediateAnimator())
    coordinator.start()
    coordinator.close()

    assert manager.subscriber_count == 0
    manager.on_resize(320)
    scheduler.advance(300)
    assert coordinator.config.breakpoint == "desktop"


def test_connectors_draw_in_once_on_first_settle():
    coordinator, manager, scheduler = _setup()
    animator = coordinator.animator
    coordinator.start()
    assert animator.draw_ins == []

    animator.complete_all()
    assert len(animator.draw_ins) == 28
    assert animator.draw_ins[0] == ((0, 1), 1.5, 0.0)
    assert animator.draw_ins[1][2] == pytest.approx(0.2)

    manager.on_resize(600)
    scheduler.advance(300)
    animator.complete_all()
    assert coordinator.paths.connector_count == 15
    assert len(animator.draw_ins) == 28
