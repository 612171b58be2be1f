"""Tests for configuration objects."""

import math
import threading

import pytest

from controlplane.config import StoreConfig


def test_store_config_defaults() -> None:
    """Test the store fails fast on contention by default."""
    assert StoreConfig().lock_timeout == 0.0


def test_store_config_negative_timeout() -> None:
    """Test a negative lock timeout is rejected."""
    with pytest.raises(ValueError, match=r"lock_timeout must not be negative"):
        StoreConfig(lock_timeout=-1)


@pytest.mark.parametrize(
    "lock_timeout",
    [math.inf, math.nan, threading.TIMEOUT_MAX * 2],
)
def test_store_config_unbounded_timeout(lock_timeout: float) -> None:
    """Test a lock timeout the store can't wait for is rejected."""
    with pytest.raises(ValueError, match=r"lock_timeout must be a finite number"):
        StoreConfig(lock_timeout=lock_timeout)


def test_store_config_max_timeout() -> None:
    """Test the largest supported lock timeout is accepted."""
    assert StoreConfig(lock_timeout=threading.TIMEOUT_MAX).lock_timeout > 0
