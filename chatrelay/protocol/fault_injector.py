from __future__ import annotations

import random

from chatrelay.logging_config import logger


class FaultInjector:
    """Drops submissions with a fixed probability to emulate a lossy channel."""

    def __init__(
        self,
        drop_probability: float = 0.1,
        *,
        enabled: bool = True,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= drop_probability <= 1.0:
            raise ValueError(f"drop_probability must be within [0, 1], got {drop_probability}")
        self.drop_probability = drop_probability
        self.enabled = enabled
        self._rng = rng or random.Random()

    def should_drop(self, *, recipient: str, seq: int) -> bool:
        if not self.enabled or self.drop_probability <= 0:
            return False
        if self._rng.random() < self.drop_probability:
            logger.info("Simulating packet loss for seq=%d to %s", seq, recipient)
            return True
        return False

    @classmethod
    def disabled(cls) -> "FaultInjector":
        return cls(0.0, enabled=False)


__all__ = ["FaultInjector"]
