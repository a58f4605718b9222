# ============================================================================
# POLL POLICY MODEL
# ============================================================================
# STATUS: Core model - Monitor cadence and attempt budget
# PURPOSE: Fixed-interval polling with an optional exponential drop-in
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: PollPolicy
# DEPENDENCIES: pydantic
# ============================================================================
"""
Poll Policy

Governs how often the monitor re-reads job status and how many reads it
may perform. This is a polling cadence, not error-driven backoff: the
delay depends only on the attempt index.
"""

import math

from pydantic import BaseModel, Field


class PollPolicy(BaseModel):
    """Polling cadence for the job monitor."""
    max_attempts: int = Field(default=20, ge=1, le=1000)
    backoff: str = Field(default="fixed", pattern="^(fixed|exponential)$")
    interval_seconds: float = Field(default=5.0, ge=0)
    multiplier: float = Field(default=2.0, ge=1.0)
    max_delay_seconds: float = Field(default=60.0, ge=0)

    model_config = {"frozen": True}

    def delay_after(self, attempt: int) -> float:
        """
        Seconds to wait after the given 1-based attempt.

        Fixed: always interval_seconds.
        Exponential: interval * multiplier^(attempt-1), capped at max_delay_seconds.
        """
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        if self.backoff == "fixed":
            return self.interval_seconds
        cap = self.max_delay_seconds
        if self.interval_seconds == 0 or self.interval_seconds >= cap:
            return min(self.interval_seconds, cap)
        steps = attempt - 1
        # Beyond this many steps the product only exceeds the cap (and can overflow)
        if self.multiplier > 1.0 and steps >= math.log(cap / self.interval_seconds, self.multiplier):
            return cap
        return min(self.interval_seconds * (self.multiplier ** steps), cap)

    @property
    def budget_seconds(self) -> float:
        """Upper bound of time spent waiting across a full run."""
        return sum(self.delay_after(i) for i in range(1, self.max_attempts))


__all__ = ["PollPolicy"]
