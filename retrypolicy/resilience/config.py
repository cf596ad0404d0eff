from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RetryPolicyConfig(BaseModel):
    """Immutable retry policy: attempt budget plus exponential backoff with jitter.

    Durations are in seconds. Created once (typically with the client that
    embeds it) and shared by reference across concurrent operations.

    Delay before retrying after attempt ``n``::

        delay = min(max_delay, base_delay * backoff_multiplier ** (n - 1))
        final = delay * (1 - jitter_factor + uniform(0, 2 * jitter_factor))

    clamped to ``[0, max_delay]``. Throttling failures scale ``base_delay`` by
    ``throttling_multiplier`` before the exponent is applied.
    See: https://aws.amazon.com/blogs/architecture/exponential-backoff-and-jitter/
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    max_attempts: int = Field(
        default=3, ge=1, description="Total attempts, including the first try"
    )
    base_delay: float = Field(
        default=0.1, gt=0, description="Delay before the first retry (seconds)"
    )
    max_delay: float = Field(
        default=20.0, gt=0, description="Ceiling for any single delay (seconds)"
    )
    jitter_factor: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Fraction of the computed delay that is randomized",
    )
    backoff_multiplier: float = Field(
        default=2.0, gt=1.0, description="Growth rate per attempt"
    )
    throttling_multiplier: float = Field(
        default=2.0,
        ge=1.0,
        description="Extra base delay factor applied to throttling failures only",
    )

    reraise: bool = Field(
        default=True,
        description="Reraise the original exception on a terminal decision",
    )

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> Self:
        if self.max_delay < self.base_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= "
                f"base_delay ({self.base_delay})"
            )
        return self
