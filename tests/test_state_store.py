"""Tests for the key-value state store."""

from state_store import StateStore


def test_option_round_trip_and_delete(store: StateStore) -> None:
    assert store.get_option("registration_status") is None
    assert store.get_option("registration_status", "unset") == "unset"

    store.update_option("registration_status", "pending")
    store.update_option("registration_status", "activated")
    assert store.get_option("registration_status") == "activated"

    store.delete_option("registration_status")
    assert store.get_option("registration_status") is None


def test_delete_missing_option_is_noop(store: StateStore) -> None:
    store.delete_option("activation_key")
    assert store.get_option("activation_key") is None


def test_options_hold_json_values(store: StateStore) -> None:
    store.update_option("registration_time", 1_700_000_000)
    assert store.get_option("registration_time") == 1_700_000_000


def test_transient_expires_after_ttl(store: StateStore, clock) -> None:
    store.set_transient("last_registration_attempt", store.now(), 12 * 3600)

    clock.advance(hours=11, seconds=3599)
    assert store.get_transient("last_registration_attempt") is not None

    clock.advance(seconds=1)
    assert store.get_transient("last_registration_attempt") is None


def test_set_transient_refreshes_expiry(store: StateStore, clock) -> None:
    store.set_transient("cached_latest_release", {"tag_name": "v1.0.0"}, 3600)
    clock.advance(seconds=3600)
    assert store.get_transient("cached_latest_release") is None

    store.set_transient("cached_latest_release", {"tag_name": "v1.1.0"}, 3600)
    assert store.get_transient("cached_latest_release") == {"tag_name": "v1.1.0"}


def test_now_is_integer_seconds(store: StateStore, clock) -> None:
    clock.now = 1_700_000_000.75
    assert store.now() == 1_700_000_000
