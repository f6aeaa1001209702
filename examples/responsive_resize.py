"""Example: drag a viewport across breakpoints and watch connectors follow."""

from circlegraph import (
    ImmediateAnimator,
    InMemorySurface,
    LayoutCoordinator,
    ManualScheduler,
    ResponsiveConfigManager,
    check_consistency,
)

WIDTHS = [1200, 900, 700, 650, 500, 400, 800]


def main() -> None:
    scheduler = ManualScheduler()
    manager = ResponsiveConfigManager(1200, scheduler=scheduler)
    coordinator = LayoutCoordinator(
        manager,
        10,
        animator=ImmediateAnimator(),
        surface=InMemorySurface(),
    )
    coordinator.on_settled(
        lambda cycle: print(f"settled {cycle.kind} on {cycle.breakpoint} with {cycle.expected} items")
    )
    coordinator.start()

    coordinator.toggle_connector(0, 1)
    coordinator.toggle_connector(0, 1)
    coordinator.toggle_connector(2, 8)

    # a drag: events every 50ms, only the resting width counts
    for width in WIDTHS:
        manager.on_resize(width)
        scheduler.advance(50)
    scheduler.run_all()

    print(f"Final stats: {coordinator.stats()}")
    print(f"(0,1) state: {coordinator.paths.state_of(0, 1)}")
    print(f"(2,8) state: {coordinator.paths.state_of(2, 8)}")
    print(f"Consistency warnings: {check_consistency(coordinator)}")


if __name__ == "__main__":
    main()
