"""Tests for the entity registry."""

import pytest

from busflow_mcp.tracker.geo import Point, bearing
from busflow_mcp.tracker.interpolation import InterpolationDriver
from busflow_mcp.tracker.registry import EntityRegistry
from busflow_mcp.tracker.validation import ValidatedRecord

GRACE = 20_000
P1 = Point(50.45, -104.61)
P2 = Point(50.46, -104.60)
P3 = Point(50.47, -104.62)


@pytest.fixture
def registry():
    return EntityRegistry(InterpolationDriver(duration_ms=1500))


def test_create_entity(registry):
    """Test that a first fix creates an idle entity at the fix."""
    entity = registry.reconcile("B1", "7", P1, now=1000)

    assert "B1" in registry
    assert len(registry) == 1
    assert entity.current_position == P1
    assert entity.target_position == P1
    assert entity.heading == 0
    assert entity.last_seen_at == 1000
    assert entity.active_animation_handle is None


def test_update_entity(registry):
    """Test that a later fix retargets, reheads, and starts a tween."""
    registry.reconcile("B1", "7", P1, now=1000)
    entity = registry.reconcile("B1", "7X", P2, now=1005)

    assert entity.target_position == P2
    assert entity.current_position == P1
    assert entity.heading == pytest.approx(bearing(P1, P2))
    assert entity.route_id == "7X"
    assert entity.last_seen_at == 1005
    assert entity.active_animation_handle is not None


def test_heading_uses_last_confirmed_position(registry):
    """Test that heading is measured from the previous target, not the tweened position."""
    registry.reconcile("B1", "7", P1, now=0)
    registry.reconcile("B1", "7", P2, now=1000)
    registry.driver.tick(1750)

    entity = registry.reconcile("B1", "7", P3, now=2000)
    assert entity.heading == pytest.approx(bearing(P2, P3))


def test_unchanged_position_keeps_heading(registry):
    """Test that a repeated fix keeps the prior heading and starts no new tween."""
    registry.reconcile("B1", "7", P1, now=0)
    registry.reconcile("B1", "7", P2, now=1000)
    registry.driver.tick(5000)
    heading = registry.get("B1").heading

    entity = registry.reconcile("B1", "7", P2, now=2000)
    assert entity.heading == heading
    assert entity.active_animation_handle is None


def test_last_seen_never_moves_backwards(registry):
    """Test last-seen monotonicity."""
    registry.reconcile("B1", "7", P1, now=5000)
    entity = registry.reconcile("B1", "7", P2, now=4000)
    assert entity.last_seen_at == 5000


def test_apply_validated_record(registry):
    """Test reconciling a validated record."""
    record = ValidatedRecord(vehicle_id="B1", route_id="7", latitude=50.45, longitude=-104.61, label="7 Whitmore Park")
    entity = registry.apply(record, now=1000)

    assert entity.current_position == P1
    assert entity.label == "7 Whitmore Park"


def test_non_finite_position_is_ignored(registry):
    """Test that a non-finite fix never reaches the registry."""
    assert registry.reconcile("B1", "7", Point(float("nan"), -104.61), now=0) is None
    assert len(registry) == 0


def test_sweep_grace_boundaries(registry):
    """Test eviction just inside and just outside the grace period."""
    registry.reconcile("B1", "7", P1, now=1000)

    assert registry.sweep(1000 + GRACE - 1, GRACE) == set()
    assert registry.sweep(1000 + GRACE, GRACE) == set()
    assert "B1" in registry

    assert registry.sweep(1000 + GRACE + 1, GRACE) == {"B1"}
    assert "B1" not in registry


def test_sweep_cancels_running_tween(registry):
    """Test that eviction stops the entity's tween."""
    registry.reconcile("B1", "7", P1, now=0)
    entity = registry.reconcile("B1", "7", P2, now=100)
    assert len(registry.driver) == 1

    registry.sweep(100 + GRACE + 1, GRACE)

    assert len(registry.driver) == 0
    assert entity.active_animation_handle is None


def test_sweep_evicts_entity_without_timestamp(registry):
    """Test defensive eviction of an entity in an inconsistent state."""
    registry.reconcile("B1", "7", P1, now=1000)
    registry.reconcile("B2", "9", P2, now=1000)
    registry.get("B1").last_seen_at = None

    assert registry.sweep(1001, GRACE) == {"B1"}
    assert registry.ids() == ["B2"]


def test_evict_unknown_vehicle(registry):
    """Test evicting an id that is not tracked."""
    assert registry.evict("nope") is False
