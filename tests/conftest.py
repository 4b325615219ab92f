"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins the environment before anything imports rateguard.core.config.
"""

import os

import pytest

# CRITICAL: Set this before any imports that might load settings
os.environ["RATEGUARD_ENV"] = "testing"

# Set default env vars that all tests might need
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("HTTP_TIMEOUT_SECONDS", "5")


class FakeClock:
    """Deterministic clock whose sleep() advances time instead of waiting."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
