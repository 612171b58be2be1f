"""Configuration objects for the resource registry."""

from dataclasses import dataclass
import math
import threading


@dataclass
class StoreConfig:
    """Configuration for an InMemoryStore."""

    lock_timeout: float = 0.0
    """Seconds to wait for the store lock, or 0 for a single non-blocking attempt."""

    def __post_init__(self) -> None:
        if self.lock_timeout < 0:
            raise ValueError(
                f"lock_timeout must not be negative (was {self.lock_timeout})"
            )
        if not math.isfinite(self.lock_timeout) or (
            self.lock_timeout > threading.TIMEOUT_MAX
        ):
            raise ValueError(
                f"lock_timeout must be a finite number of seconds no greater "
                f"than {threading.TIMEOUT_MAX} (was {self.lock_timeout})"
            )
