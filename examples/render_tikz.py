"""Example: settle a ring, highlight one item and print TikZ for it."""

from circlegraph import (
    RecordingAnimator,
    InMemorySurface,
    LayoutCoordinator,
    ManualScheduler,
    ResponsiveConfigManager,
    generate_tikz_document,
)


def main() -> None:
    manager = ResponsiveConfigManager(700, scheduler=ManualScheduler())
    animator = RecordingAnimator()
    coordinator = LayoutCoordinator(manager, 6, animator=animator, surface=InMemorySurface())
    coordinator.start()
    # completions may arrive in any order
    animator.complete_all(order=[5, 0, 3, 1, 4, 2])

    for a, b in [(0, 3), (1, 4), (1, 4)]:
        coordinator.toggle_connector(a, b)
    coordinator.highlight_item(2, True)

    print(generate_tikz_document(coordinator, title="Six items, item 2 highlighted", normalize=True))


if __name__ == "__main__":
    main()
