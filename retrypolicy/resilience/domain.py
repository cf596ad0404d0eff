from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.enums import FailureKind, TerminalReason


class FailureReport(BaseModel):
    """One failed attempt of a logical operation, as seen by the policy engine.

    Created fresh per failed attempt and discarded once a decision is made.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: FailureKind = Field(
        description="Failure category driving the retry decision"
    )
    attempt_number: int = Field(
        default=1, description="1-based ordinal of the attempt that failed"
    )
    message: str = Field(
        default="", description="Diagnostic text, never inspected for control flow"
    )
    retryable: bool = Field(description="Whether this failure may be retried")
    category: str = Field(
        default="", description="Raw category tag the report was classified from"
    )

    @field_validator("attempt_number")
    @classmethod
    def _coerce_attempt_number(cls, value: int) -> int:
        # Non-positive attempts count as the first attempt rather than being rejected.
        return max(value, 1)


class RetryDecision(BaseModel):
    """Outcome of evaluating a failure.

    Either retry after ``delay`` seconds or stop for ``terminal_reason``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    should_retry: bool
    delay: float = Field(
        default=0.0, ge=0.0, description="Seconds to wait before the next attempt"
    )
    terminal_reason: TerminalReason | None = Field(
        default=None,
        description="Why retrying stopped; set only when should_retry is False",
    )
    attempt_number: int = Field(
        default=0, ge=0, description="Attempt the decision was made for"
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> Self:
        if self.should_retry and self.terminal_reason is not None:
            raise ValueError("a retry decision cannot carry a terminal_reason")
        if not self.should_retry:
            if self.terminal_reason is None:
                raise ValueError("a terminal decision requires a terminal_reason")
            if self.delay != 0.0:
                raise ValueError("a terminal decision must have zero delay")
        return self

    @classmethod
    def retry(cls, delay: float, attempt_number: int = 0) -> RetryDecision:
        return cls(should_retry=True, delay=delay, attempt_number=attempt_number)

    @classmethod
    def stop(cls, reason: TerminalReason, attempt_number: int = 0) -> RetryDecision:
        return cls(
            should_retry=False, terminal_reason=reason, attempt_number=attempt_number
        )

    @property
    def is_terminal(self) -> bool:
        return not self.should_retry
