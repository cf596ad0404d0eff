from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Coroutine
from functools import wraps
from typing import TYPE_CHECKING, Any, cast

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    after_nothing,
    before_nothing,
    stop_never,
)
from tenacity.retry import retry_base
from tenacity.wait import wait_base

from ..core.types import P, R
from ..logger import get_logger
from .classifier import category_of
from .config import RetryPolicyConfig
from .domain import FailureReport, RetryDecision
from .engine import RetryPolicyEngine
from .types import AbortSignal, BeforeSleepCallback, Categorizer, RetryCallback

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

logger: BoundLogger = get_logger(__name__)


class RetryLogicError(RuntimeError): ...


class RetryTerminatedError(RuntimeError):
    """Raised when retrying stops and the policy is configured not to reraise.

    Carries the terminal :class:`RetryDecision` and the :class:`FailureReport`
    it was made for; the original exception is chained as ``__cause__``.
    """

    def __init__(
        self, decision: RetryDecision, report: FailureReport | None = None
    ) -> None:
        self.decision = decision
        self.report = report
        reason = (
            decision.terminal_reason.value if decision.terminal_reason else "unknown"
        )
        super().__init__(
            f"Retrying stopped after attempt {decision.attempt_number}: {reason}"
        )


class _EngineRetryCondition(retry_base):
    """Tenacity retry predicate that delegates the decision to the policy engine.

    One instance per wrapped call: it remembers the latest report and decision
    so the paired wait strategy and the wrapper can read them back.
    """

    def __init__(
        self,
        engine: RetryPolicyEngine,
        config: RetryPolicyConfig,
        categorize: Categorizer,
        should_abort: AbortSignal | None,
    ) -> None:
        self._engine = engine
        self._config = config
        self._categorize = categorize
        self._should_abort = should_abort
        self.report: FailureReport | None = None
        self.decision: RetryDecision | None = None

    def __call__(self, retry_state: RetryCallState) -> bool:
        outcome = retry_state.outcome
        if outcome is None or not outcome.failed:
            return False

        exc = outcome.exception()
        # CancelledError, KeyboardInterrupt and friends are never retried.
        if not isinstance(exc, Exception):
            return False

        attempt = retry_state.attempt_number
        self.report = self._engine.classify(
            self._categorize(exc), attempt, message=str(exc)
        )

        if self._should_abort is not None and self._should_abort():
            self.decision = self._engine.abort(
                "abort signal set", attempt_number=attempt
            )
        else:
            self.decision = self._engine.evaluate(self.report, self._config)

        self._log_decision(self.report, self.decision, retry_state)
        return self.decision.should_retry

    def _log_decision(
        self,
        report: FailureReport,
        decision: RetryDecision,
        retry_state: RetryCallState,
    ) -> None:
        fn_name = getattr(retry_state.fn, "__qualname__", repr(retry_state.fn))
        reason = decision.terminal_reason.value if decision.terminal_reason else None
        if decision.should_retry:
            logger.warning(
                "Retrying after failure",
                function=fn_name,
                kind=report.kind.value,
                category=report.category,
                attempt=report.attempt_number,
                max_attempts=self._config.max_attempts,
                delay=round(decision.delay, 3),
            )
        else:
            logger.error(
                "Retry terminated",
                function=fn_name,
                kind=report.kind.value,
                category=report.category,
                attempt=report.attempt_number,
                reason=reason,
                error=report.message,
            )


class _EngineWait(wait_base):
    def __init__(self, condition: _EngineRetryCondition) -> None:
        self._condition = condition

    def __call__(self, retry_state: RetryCallState) -> float:
        decision = self._condition.decision
        return decision.delay if decision is not None else 0.0


class Retry:
    """Retry decorator driven by :class:`RetryPolicyEngine`.

    Wraps sync and ``async def`` callables alike. After each failure the
    exception is categorized, classified and evaluated; the engine's decision
    decides whether tenacity retries and how long it waits. Coroutines wait
    with ``asyncio.sleep`` so a pending retry never blocks the event loop.

    Usage Pattern
    -------------
    ```python
    stop = asyncio.Event()

    @retry(
        RetryPolicyConfig(max_attempts=5, jitter_factor=0.2),
        should_abort=stop.is_set,
    )
    async def fetch_object(key: str) -> bytes:
        return await client.get_object(key)
    ```
    """

    def __init__(
        self,
        config: RetryPolicyConfig,
        engine: RetryPolicyEngine | None = None,
        categorize: Categorizer = category_of,
        should_abort: AbortSignal | None = None,
        before: RetryCallback | None = None,
        after: RetryCallback | None = None,
        before_sleep: BeforeSleepCallback | None = None,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._engine = engine or RetryPolicyEngine()
        self._categorize = categorize
        self._should_abort = should_abort
        self._before = before
        self._after = after
        self._before_sleep = before_sleep
        self._sleep = sleep
        self._async_sleep = async_sleep

    @property
    def config(self) -> RetryPolicyConfig:
        return self._config

    @property
    def engine(self) -> RetryPolicyEngine:
        return self._engine

    def __call__(self, func: Callable[P, R]) -> Callable[P, R]:
        if inspect.iscoroutinefunction(func):
            return cast(Callable[P, R], self._wrap_async(func))
        return self._wrap_sync(func)

    def _new_condition(self) -> _EngineRetryCondition:
        return _EngineRetryCondition(
            self._engine, self._config, self._categorize, self._should_abort
        )

    def _terminal_error(
        self, condition: _EngineRetryCondition
    ) -> RetryTerminatedError | None:
        decision = condition.decision
        if self._config.reraise or decision is None or decision.should_retry:
            return None
        return RetryTerminatedError(decision, condition.report)

    def _wrap_async(
        self, func: Callable[P, Coroutine[object, object, R]]
    ) -> Callable[P, Coroutine[object, object, R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            condition = self._new_condition()
            try:
                async for attempt in AsyncRetrying(
                    stop=stop_never,
                    wait=_EngineWait(condition),
                    retry=condition,
                    before=cast(
                        Callable[[RetryCallState], Awaitable[None] | None],
                        self._before or before_nothing,
                    ),
                    after=cast(
                        Callable[[RetryCallState], Awaitable[None] | None],
                        self._after or after_nothing,
                    ),
                    before_sleep=self._before_sleep,
                    sleep=self._async_sleep,
                    reraise=True,
                ):
                    with attempt:
                        return await func(*args, **kwargs)
            except Exception as exc:
                terminal = self._terminal_error(condition)
                if terminal is None:
                    raise
                raise terminal from exc

            raise RetryLogicError(
                "Async retry loop completed without success or failure"
            )

        return wrapper

    def _wrap_sync(self, func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            condition = self._new_condition()
            try:
                for attempt in Retrying(
                    stop=stop_never,
                    wait=_EngineWait(condition),
                    retry=condition,
                    before=cast(
                        Callable[[RetryCallState], None],
                        self._before or before_nothing,
                    ),
                    after=cast(
                        Callable[[RetryCallState], None],
                        self._after or after_nothing,
                    ),
                    before_sleep=cast(
                        Callable[[RetryCallState], None] | None,
                        self._before_sleep,
                    ),
                    sleep=self._sleep,
                    reraise=True,
                ):
                    with attempt:
                        return func(*args, **kwargs)
            except Exception as exc:
                terminal = self._terminal_error(condition)
                if terminal is None:
                    raise
                raise terminal from exc

            raise RetryLogicError(
                "Sync retry loop completed without success or failure"
            )

        return wrapper


def retry(
    config: RetryPolicyConfig | None = None,
    engine: RetryPolicyEngine | None = None,
    categorize: Categorizer = category_of,
    should_abort: AbortSignal | None = None,
    before: RetryCallback | None = None,
    after: RetryCallback | None = None,
    before_sleep: BeforeSleepCallback | None = None,
    sleep: Callable[[float], None] = time.sleep,
    async_sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Retry:
    retry_config = config or RetryPolicyConfig()
    return Retry(
        retry_config,
        engine=engine,
        categorize=categorize,
        should_abort=should_abort,
        before=before,
        after=after,
        before_sleep=before_sleep,
        sleep=sleep,
        async_sleep=async_sleep,
    )
