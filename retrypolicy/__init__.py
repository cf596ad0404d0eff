from __future__ import annotations

from .core.enums import FailureKind, TerminalReason
from .resilience import (
    ErrorClassifier,
    FailureReport,
    Retry,
    RetryDecision,
    RetryPolicyConfig,
    RetryPolicyEngine,
    RetryTerminatedError,
    retry,
)

__all__ = [
    "ErrorClassifier",
    "FailureKind",
    "FailureReport",
    "Retry",
    "RetryDecision",
    "RetryPolicyConfig",
    "RetryPolicyEngine",
    "RetryTerminatedError",
    "TerminalReason",
    "retry",
]
