import logging

import pytest

from circlegraph.config import (
    DEFAULT_BREAKPOINTS,
    DESKTOP,
    MOBILE,
    TABLET,
    AnimationSettings,
    Breakpoint,
    PathStyle,
    set_default_animation,
    set_default_style,
)
from circlegraph.responsive import ResponsiveConfigManager, derive_config, detect_breakpoint
from circlegraph.scheduler import ManualScheduler
from circlegraph.types import InvalidConfig


@pytest.mark.parametrize(
    "width, name",
    [
        (0, "mobile"),
        (320, "mobile"),
        (480, "mobile"),
        (480.5, "mobile"),
        (481, "tablet"),
        (768, "tablet"),
        (769, "desktop"),
        (4000, "desktop"),
        (-10, "mobile"),
    ],
)
def test_detect_breakpoint(width, name):
    assert detect_breakpoint(width).name == name


@pytest.mark.parametrize(
    "tier, normal, hover",
    [(MOBILE, 3.0, 5.0), (TABLET, 3.0, 5.0), (DESKTOP, 5.0, 8.0)],
)
def test_stroke_widths_scale_with_container(tier, normal, hover):
    config = derive_config(tier, 8)
    assert config.stroke_width.normal == normal
    assert config.stroke_width.hover == hover


def test_derived_config_carries_tier_metrics_and_shared_style():
    config = derive_config(TABLET, 8)

    assert config.breakpoint == "tablet"
    assert config.center == (200.0, 200.0)
    assert config.radius == 150.0
    assert config.item_size == 80.0
    assert config.container_extent == (400.0, 400.0)
    assert config.max_items == 6
    assert config.effective_item_count(8) == 6
    assert config.effective_item_count(3) == 3
    assert config.arc_height_ratio == 0.3
    assert (config.opacity.normal, config.opacity.light) == (0.8, 0.15)
    assert config.primary_color == "#ff6b6b"
    assert config.secondary_color == "#00ff00"


def test_derive_config_rejects_degenerate_tier():
    broken = Breakpoint("broken", 0, None, 0, 0, 0, 0, 6)
    with pytest.raises(InvalidConfig):
        derive_config(broken, 4)
    with pytest.raises(InvalidConfig):
        derive_config(DESKTOP, -1)


def _manager(width=1024, **kwargs):
    scheduler = ManualScheduler()
    manager = ResponsiveConfigManager(width, scheduler=scheduler, **kwargs)
    seen = []
    manager.subscribe(seen.append)
    return manager, scheduler, seen


def test_resize_notifies_once_after_debounce():
    manager, scheduler, seen = _manager()

    manager.on_resize(600)
    scheduler.advance(299)
    assert seen == []
    assert manager.pending

    scheduler.advance(1)
    assert seen == ["tablet"]
    assert manager.current_breakpoint_name == "tablet"
    assert not manager.pending


def test_burst_returning_to_same_tier_notifies_nothing():
    manager, scheduler, seen = _manager()

    manager.on_resize(600)
    scheduler.advance(100)
    manager.on_resize(400)
    scheduler.advance(100)
    manager.on_resize(1200)
    scheduler.advance(300)

    assert seen == []
    assert manager.viewport_width == 1200
    assert manager.is_breakpoint("desktop")


def test_burst_notifies_final_tier_only():
    manager, scheduler, seen = _manager()

    manager.on_resize(600)
    scheduler.advance(200)
    manager.on_resize(320)
    scheduler.advance(300)

    assert seen == ["mobile"]


def test_same_tier_resize_is_silent():
    manager, scheduler, seen = _manager()
    manager.on_resize(900)
    scheduler.advance(300)
    assert seen == []


def test_subscribe_is_idempotent_and_unsubscribe_reports():
    manager = ResponsiveConfigManager(1024)
    calls = []
    token = manager.subscribe(calls.append)

    assert manager.subscribe(calls.append) == token
    assert manager.subscriber_count == 1
    assert manager.unsubscribe(token) is True
    assert manager.unsubscribe(token) is False


def test_failing_subscriber_does_not_block_others(caplog):
    manager, scheduler, seen = _manager()

    def boom(name):
        raise RuntimeError("subscriber failure")

    manager.subscribe(boom)
    later = []
    manager.subscribe(later.append)

    with caplog.at_level(logging.WARNING, logger="circlegraph.responsive"):
        manager.on_resize(600)
        scheduler.advance(300)

    assert seen == ["tablet"]
    assert later == ["tablet"]
    assert any("failed" in record.getMessage() for record in caplog.records)


def test_config_is_cached_per_tier_and_count():
    manager = ResponsiveConfigManager(1024, item_count=8)

    first = manager.current_config()
    assert manager.current_config() is first
    assert manager.current_config(5) is not first
    assert set(manager.cache_snapshot()) == {("desktop", 8), ("desktop", 5)}

    manager.clear_cache()
    assert manager.current_config() is not first


def test_force_recalculate_bypasses_debounce():
    manager, scheduler, seen = _manager()

    manager.on_resize(600)
    config = manager.force_recalculate()

    assert seen == ["tablet"]
    assert config.breakpoint == "tablet"
    assert not manager.pending
    scheduler.advance(300)
    assert seen == ["tablet"]


def test_fallback_to_nearest_tier_on_invalid_config(caplog):
    tiers = [
        MOBILE,
        Breakpoint("broken", 481, 768, 0, 0, 0, 0, 6),
        DESKTOP,
    ]
    with caplog.at_level(logging.WARNING, logger="circlegraph.responsive"):
        manager = ResponsiveConfigManager(600, tiers)
        config = manager.current_config()

    assert manager.current_breakpoint_name == "broken"
    assert config.breakpoint == "mobile"
    assert any("Falling back" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize(
    "tiers",
    [
        [],
        [Breakpoint("a", 10, None, 100, 50, 40, 10, 4)],
        [Breakpoint("a", 0, 100, 100, 50, 40, 10, 4), Breakpoint("b", 120, None, 100, 50, 40, 10, 4)],
        [Breakpoint("a", 0, 100, 100, 50, 40, 10, 4), Breakpoint("b", 101, 300, 100, 50, 40, 10, 4)],
        [Breakpoint("a", 0, None, 100, 50, 40, 10, 4), Breakpoint("b", 101, None, 100, 50, 40, 10, 4)],
        [Breakpoint("a", 0, 100, 100, 50, 40, 10, 4), Breakpoint("a", 101, None, 100, 50, 40, 10, 4)],
        [Breakpoint("a", 0, None, 100, 50, 40, 10, -1)],
        [Breakpoint("a", 0, None, 0, 0, 0, 0, 4)],
        [Breakpoint("a", 0, 100, 0, 0, 0, 0, 4), Breakpoint("b", 101, None, 100, 50, 0, 10, 4)],
    ],
)
def test_malformed_tier_tables_are_rejected(tiers):
    with pytest.raises(InvalidConfig):
        ResponsiveConfigManager(500, tiers)


def test_default_tiers_are_valid_and_contiguous():
    manager = ResponsiveConfigManager(1024)
    assert manager.breakpoints == DEFAULT_BREAKPOINTS
    assert manager.breakpoint_named("tablet") is TABLET
    with pytest.raises(KeyError):
        manager.breakpoint_named("watch")


def test_negative_item_count_is_rejected():
    manager = ResponsiveConfigManager(1024)
    with pytest.raises(InvalidConfig):
        manager.set_item_count(-2)


def test_validated_table_always_derives_a_config():
    tiers = [
        Breakpoint("flat", 0, 600, 0, 0, 0, 0, 6),
        Breakpoint("wide", 601, None, 500, 250, 200, 80, 8),
    ]
    manager = ResponsiveConfigManager(300, tiers, scheduler=ManualScheduler())
    assert manager.current_config().breakpoint == "wide"


def test_default_style_setter_feeds_derivation():
    try:
        set_default_style(PathStyle(primary_color="#123456", arc_height_ratio=0.5))
        config = derive_config(DESKTOP, 8)
        assert config.primary_color == "#123456"
        assert config.arc_height_ratio == 0.5
        assert ResponsiveConfigManager(1024, scheduler=ManualScheduler()).current_config().primary_color == "#123456"
    finally:
        set_default_style(PathStyle())
    assert derive_config(DESKTOP, 8).primary_color == "#ff6b6b"


def test_default_animation_setter_feeds_derivation():
    try:
        set_default_animation(AnimationSettings(duration=2.0, path_stroke_delay=0.05))
        config = derive_config(TABLET, 4)
        assert config.animation.duration == 2.0
        assert config.animation.path_stroke_delay == 0.05
    finally:
        set_default_animation(AnimationSettings())
    assert derive_config(TABLET, 4).animation.duration == 0.8


def test_missing_scheduler_is_reported(caplog):
    with caplog.at_level(logging.WARNING, logger="circlegraph.responsive"):
        ResponsiveConfigManager(1024, scheduler=ManualScheduler())
    assert not [r for r in caplog.records if "No scheduler supplied" in r.getMessage()]

    with caplog.at_level(logging.WARNING, logger="circlegraph.responsive"):
        manager = ResponsiveConfigManager(1024)
    assert [r for r in caplog.records if "No scheduler supplied" in r.getMessage()]
    assert isinstance(manager.scheduler, ManualScheduler)


def test_resize_storm_keeps_timer_queue_small():
    manager, scheduler, seen = _manager()
    for step in range(1000):
        manager.on_resize(600 + step % 50)

    assert scheduler.pending == 1
    assert scheduler.queued == 1
    scheduler.advance(300)
    assert seen == ["tablet"]
