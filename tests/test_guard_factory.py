"""Unit tests for building guards from settings."""

import pytest

from rateguard.adapters.storage.in_memory import InMemoryKeyValueStore
from rateguard.core.config import GuardSettings
from rateguard.core.errors import ConfigurationAppError
from rateguard.guard.factory import create_rate_guard
from rateguard.guard.in_memory import InMemoryRateGuard
from rateguard.guard.models import ThresholdPolicy
from rateguard.guard.persistent import PersistentRateGuard


def test_memory_variant_uses_its_defaults() -> None:
    guard = create_rate_guard(GuardSettings(variant="memory", quota=3, delay_minutes=0.5))

    assert isinstance(guard, InMemoryRateGuard)
    assert guard.config.quota == 3
    assert guard.config.window_minutes is None
    assert guard.config.delay_seconds == 30.0
    assert guard.config.threshold is ThresholdPolicy.REACHED
    assert guard.config.reset_on_delay is True


def test_persistent_variant_uses_its_defaults() -> None:
    store = InMemoryKeyValueStore()
    guard = create_rate_guard(
        GuardSettings(variant="persistent", quota=5, window_minutes=10, delay_minutes=1),
        store=store,
    )

    assert isinstance(guard, PersistentRateGuard)
    assert guard.config.window_minutes == 10
    assert guard.config.threshold is ThresholdPolicy.EXCEEDED
    assert guard.config.reset_on_delay is False


def test_policy_overrides_are_applied() -> None:
    guard = create_rate_guard(
        GuardSettings(
            variant="persistent",
            quota=5,
            window_minutes=10,
            threshold="reached",
            reset_on_delay=True,
        ),
    )

    assert guard.config.threshold is ThresholdPolicy.REACHED
    assert guard.config.reset_on_delay is True


def test_persistent_variant_requires_window() -> None:
    with pytest.raises(ConfigurationAppError) as exc_info:
        create_rate_guard(GuardSettings(variant="persistent", quota=5))

    assert exc_info.value.code == "guard_missing_window"


def test_unknown_variant_is_rejected() -> None:
    cfg = GuardSettings.model_construct(
        variant="redis",
        quota=1,
        window_minutes=None,
        delay_minutes=1.0,
        threshold=None,
        reset_on_delay=None,
    )

    with pytest.raises(ConfigurationAppError) as exc_info:
        create_rate_guard(cfg)

    assert exc_info.value.code == "guard_unknown_variant"


def test_settings_reject_out_of_range_values() -> None:
    with pytest.raises(ValueError):
        GuardSettings(quota=0)

    with pytest.raises(ValueError):
        GuardSettings(window_minutes=0)


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GUARD_VARIANT", "persistent")
    monkeypatch.setenv("GUARD_QUOTA", "7")
    monkeypatch.setenv("GUARD_WINDOW_MINUTES", "2.5")
    monkeypatch.setenv("GUARD_THRESHOLD", "reached")

    guard = create_rate_guard(GuardSettings(), store=InMemoryKeyValueStore())

    assert isinstance(guard, PersistentRateGuard)
    assert guard.config.quota == 7
    assert guard.config.window_minutes == 2.5
    assert guard.config.threshold is ThresholdPolicy.REACHED
