from __future__ import annotations

import random
from collections.abc import Callable

from ..core.enums import FailureKind, TerminalReason
from .classifier import ErrorClassifier
from .config import RetryPolicyConfig
from .domain import FailureReport, RetryDecision


class RetryPolicyEngine:
    """Decides, after each failed attempt, whether to retry and how long to wait.

    The engine is stateless: every call depends only on its arguments, so one
    instance (and one :class:`RetryPolicyConfig`) can serve any number of
    concurrent operations. It never sleeps, logs or raises; applying the delay
    and surfacing terminal failures belong to the caller's retry loop.

    Usage Pattern
    -------------
    ```python
    engine = RetryPolicyEngine()
    config = RetryPolicyConfig(max_attempts=5, base_delay=0.2, jitter_factor=0.1)

    attempt = 1
    while True:
        try:
            return call_service()
        except ServiceError as exc:
            report = engine.classify(exc.code, attempt, message=str(exc))
            if cancelled():
                decision = engine.abort()
            else:
                decision = engine.evaluate(report, config)
            if not decision.should_retry:
                raise
            time.sleep(decision.delay)
            attempt += 1
    ```
    """

    __slots__ = ("_classifier", "_uniform")

    def __init__(
        self,
        classifier: ErrorClassifier | None = None,
        uniform: Callable[[], float] | None = None,
    ) -> None:
        self._classifier = classifier or ErrorClassifier.default()
        # Source of uniform samples in [0, 1) used for jitter.
        self._uniform = uniform or random.random

    @property
    def classifier(self) -> ErrorClassifier:
        return self._classifier

    def classify(
        self,
        raw_category: object,
        attempt_number: int,
        *,
        message: str = "",
        retryable: bool | None = None,
    ) -> FailureReport:
        """Build a :class:`FailureReport` from a caller's category tag.

        Parameters
        ----------
        raw_category
            Tag from the caller's error taxonomy (string or :class:`FailureKind`).
            Unrecognized tags classify as ``UNKNOWN`` and are not retryable.
        attempt_number
            1-based attempt that failed. Non-positive values count as attempt 1.
        message
            Diagnostic text carried on the report.
        retryable
            Overrides the retryability derived from the kind.
        """
        kind = self._classifier.kind_for(raw_category)
        if retryable is None:
            retryable = self._classifier.is_retryable(kind)

        return FailureReport(
            kind=kind,
            attempt_number=max(attempt_number, 1),
            message=message,
            retryable=retryable,
            category="" if raw_category is None else str(raw_category),
        )

    def evaluate(
        self, report: FailureReport, config: RetryPolicyConfig
    ) -> RetryDecision:
        attempt = report.attempt_number

        if attempt >= config.max_attempts:
            return RetryDecision.stop(TerminalReason.MAX_ATTEMPTS_EXCEEDED, attempt)

        if not report.retryable:
            return RetryDecision.stop(TerminalReason.NON_RETRYABLE_KIND, attempt)

        delay = self.compute_delay(report.kind, attempt, config)
        return RetryDecision.retry(self._apply_jitter(delay, config), attempt)

    def abort(self, reason: str = "", *, attempt_number: int = 0) -> RetryDecision:
        """Terminal decision for a caller-side cancellation.

        ``reason`` is accepted for the caller's own diagnostics; it does not
        influence the decision.
        """
        return RetryDecision.stop(
            TerminalReason.CALLER_ABORTED, max(attempt_number, 0)
        )

    def compute_delay(
        self, kind: FailureKind, attempt_number: int, config: RetryPolicyConfig
    ) -> float:
        """Backoff step for ``attempt_number`` before jitter.

        Capped at ``max_delay``.
        """
        base = config.base_delay
        if kind is FailureKind.THROTTLING:
            base *= config.throttling_multiplier

        exponent = max(attempt_number, 1) - 1
        try:
            delay = base * config.backoff_multiplier**exponent
        except OverflowError:
            return config.max_delay
        return min(config.max_delay, delay)

    def _apply_jitter(self, delay: float, config: RetryPolicyConfig) -> float:
        jitter = config.jitter_factor
        if jitter:
            delay *= 1.0 - jitter + self._uniform() * 2.0 * jitter
        return min(max(delay, 0.0), config.max_delay)
