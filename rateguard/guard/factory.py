"""Factory for creating rate guards from configuration."""

from __future__ import annotations

from rateguard.adapters.storage.base import AbstractKeyValueStore
from rateguard.adapters.storage.factory import create_key_value_store
from rateguard.core.config import GuardSettings, settings
from rateguard.core.errors import ConfigurationAppError
from rateguard.guard.base import AbstractRateGuard
from rateguard.guard.in_memory import InMemoryRateGuard
from rateguard.guard.persistent import PersistentRateGuard


def create_rate_guard(
    guard_settings: GuardSettings | None = None,
    *,
    store: AbstractKeyValueStore | None = None,
) -> AbstractRateGuard:
    """Instantiate the guard variant selected by configuration.

    Threshold and reset-on-delay fall back to each variant's own defaults when
    left unset.

    Args:
        guard_settings: Optional settings; defaults to settings.guard.
        store: Store for the persistent variant; defaults to
            create_key_value_store().

    Returns:
        AbstractRateGuard: Configured guard.

    Raises:
        ConfigurationAppError: If the variant is unknown or the persistent
            variant has no window configured.
    """
    cfg = guard_settings or settings.guard
    variant = cfg.variant.lower()

    overrides: dict[str, object] = {}
    if cfg.threshold is not None:
        overrides["threshold"] = cfg.threshold
    if cfg.reset_on_delay is not None:
        overrides["reset_on_delay"] = cfg.reset_on_delay

    if variant == "memory":
        return InMemoryRateGuard(
            total_requests=cfg.quota,
            timeout_minutes=cfg.delay_minutes,
            window_minutes=cfg.window_minutes,
            **overrides,
        )

    if variant == "persistent":
        if cfg.window_minutes is None:
            raise ConfigurationAppError(
                code="guard_missing_window",
                message="The persistent guard requires GUARD_WINDOW_MINUTES",
                details={"field": "window_minutes"},
            )
        return PersistentRateGuard(
            total_allowed_requests=cfg.quota,
            total_requests_window_mins=cfg.window_minutes,
            timeout_minutes=cfg.delay_minutes,
            store=store or create_key_value_store(),
            **overrides,
        )

    raise ConfigurationAppError(
        code="guard_unknown_variant",
        message=f"Unknown guard variant: '{variant}'. Supported variants: memory, persistent",
        details={"field": "variant", "actual_value": variant},
    )
