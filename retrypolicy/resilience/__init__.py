from __future__ import annotations

from .classifier import (
    DEFAULT_CATEGORIES,
    DEFAULT_RETRYABLE_KINDS,
    ErrorClassifier,
    category_of,
)
from .config import RetryPolicyConfig
from .domain import FailureReport, RetryDecision
from .engine import RetryPolicyEngine
from .retry import Retry, RetryLogicError, RetryTerminatedError, retry

__all__ = [
    "DEFAULT_CATEGORIES",
    "DEFAULT_RETRYABLE_KINDS",
    "ErrorClassifier",
    "FailureReport",
    "Retry",
    "RetryDecision",
    "RetryLogicError",
    "RetryPolicyConfig",
    "RetryPolicyEngine",
    "RetryTerminatedError",
    "category_of",
    "retry",
]
