"""Connection registry unit tests."""

from app.services.connection_registry import ConnectionRegistry
from tests.conftest import FakeConnection


def test_register_and_unregister() -> None:
    """The snapshot should track exactly the identities still registered."""
    registry = ConnectionRegistry()
    registry.register("u1", FakeConnection("a"))
    registry.register("u2", FakeConnection("b"))
    registry.register("u3", FakeConnection("c"))
    registry.unregister("u2")
    assert registry.snapshot_ids() == {"u1", "u3"}
    assert len(registry) == 2
    assert "u2" not in registry


def test_second_registration_replaces_handle() -> None:
    """Registering the same user twice keeps one entry with the newest handle."""
    registry = ConnectionRegistry()
    first = FakeConnection("first")
    second = FakeConnection("second")
    registry.register("u1", first)
    registry.register("u1", second)
    assert registry.snapshot_ids() == {"u1"}
    assert registry.lookup("u1") is second


def test_unregister_absent_user_is_noop() -> None:
    registry = ConnectionRegistry()
    assert registry.unregister("ghost") is False
    registry.register("u1", FakeConnection())
    assert registry.unregister("u1") is True
    assert registry.unregister("u1") is False
    assert registry.snapshot_ids() == set()


def test_lookup_missing_user_returns_none() -> None:
    assert ConnectionRegistry().lookup("u1") is None


def test_unregister_with_stale_handle_keeps_replacement() -> None:
    """A superseded handle must not evict the connection that replaced it."""
    registry = ConnectionRegistry()
    stale = FakeConnection("stale")
    fresh = FakeConnection("fresh")
    registry.register("u1", stale)
    registry.register("u1", fresh)

    assert registry.unregister("u1", stale) is False
    assert registry.lookup("u1") is fresh
    assert registry.is_current("u1", fresh)
    assert not registry.is_current("u1", stale)

    assert registry.unregister("u1", fresh) is True
    assert registry.lookup("u1") is None


def test_snapshot_is_a_copy() -> None:
    """Mutating a snapshot should not affect the registry."""
    registry = ConnectionRegistry()
    registry.register("u1", FakeConnection())
    snapshot = registry.snapshot_ids()
    snapshot.add("intruder")
    assert registry.snapshot_ids() == {"u1"}
