import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from circlegraph import (
    ImmediateAnimator,
    InMemorySurface,
    LayoutCoordinator,
    ManualScheduler,
    MissingRenderSurface,
    ResponsiveConfigManager,
    check_consistency,
    generate_tikz_document,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_pair(value: str) -> Tuple[int, int]:
    parts = [part.strip() for part in value.split("-") if part.strip()]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected a pair like 1-3, got {value!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"connector indices must be integers: {value!r}") from exc


def _describe(coordinator: LayoutCoordinator) -> List[str]:
    stats = coordinator.stats()
    lines = [
        f"breakpoint: {stats['breakpoint']}",
        f"items: {stats['item_count']} of {stats['available_items']}",
        f"edges: {stats['edge_count']}",
    ]
    for key, state in sorted(coordinator.paths.snapshot_states().items()):
        if state.value != "dim":
            lines.append(f"  {key[0]}-{key[1]}: {state.value}")
    return lines


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Simulate a responsive ring of connected items")
    parser.add_argument(
        "--items",
        type=int,
        default=8,
        help="Number of available items (default: 8)",
    )
    parser.add_argument(
        "--width",
        type=float,
        default=1024,
        help="Initial viewport width in pixels (default: 1024)",
    )
    parser.add_argument(
        "--toggle",
        action="append",
        type=_parse_pair,
        default=[],
        metavar="A-B",
        help="Toggle a connector once after the initial layout; repeatable",
    )
    parser.add_argument(
        "--resize",
        action="append",
        type=float,
        default=[],
        metavar="WIDTH",
        help="Viewport widths to resize to after the toggles; repeatable",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Milliseconds between resize events (default: the debounce window)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--tikz-output-path",
        help="Write a standalone TikZ document of the final layout to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    scheduler = ManualScheduler()
    manager = ResponsiveConfigManager(args.width, scheduler=scheduler, item_count=args.items)
    coordinator = LayoutCoordinator(
        manager,
        args.items,
        animator=ImmediateAnimator(),
        surface=InMemorySurface(),
    )
    coordinator.start()

    for a, b in args.toggle:
        state = coordinator.toggle_connector(a, b)
        if state is None:
            logger.warning("Connector %d-%d does not exist", a, b)

    interval = manager.debounce_ms if args.interval is None else args.interval
    for width in args.resize:
        manager.on_resize(width)
        scheduler.advance(interval)
    scheduler.run_all()

    for line in _describe(coordinator):
        print(line)

    warnings = check_consistency(coordinator)
    if warnings:
        for warning in warnings:
            logger.warning("Consistency warning: %s", warning)
    else:
        logger.info("Layout has no consistency warnings")

    if args.tikz_output_path:
        try:
            document = generate_tikz_document(
                coordinator,
                title=f"{coordinator.item_count} items at {coordinator.config.breakpoint}",
                normalize=True,
            )
        except MissingRenderSurface as exc:
            logger.error("Cannot render TikZ: %s", exc)
            raise SystemExit(1)
        tikz_path = Path(args.tikz_output_path)
        if tikz_path.parent and not tikz_path.parent.exists():
            tikz_path.parent.mkdir(parents=True, exist_ok=True)
        tikz_path.write_text(document, encoding="utf-8")
        logger.info("Wrote TikZ document to %s", tikz_path)

    coordinator.close()
    manager.close()


if __name__ == "__main__":
    main()
