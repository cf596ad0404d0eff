"""
Retry Policy Walkthrough
========================

This example demonstrates the retry policy engine end to end:
1. Previewing a backoff schedule
2. Classifying failures from a client's error taxonomy
3. Driving a hand-written retry loop with explicit decisions
4. Using the decorator against a flaky async client
5. Cooperative cancellation

No external services are required; the "cloud client" below is simulated.

Running This Example
--------------------
    pip install -e ".[playground]"
    python playground/retry_demo.py
"""

from __future__ import annotations

import asyncio
import random

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from retrypolicy import (
    FailureKind,
    RetryPolicyConfig,
    RetryPolicyEngine,
    RetryTerminatedError,
    retry,
)
from retrypolicy.logger import LoggingConfig, configure_logging

console = Console()


class CloudError(Exception):
    """Error raised by the simulated SDK, carrying the service's error code."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class FlakyObjectStore:
    """Fails with the scripted error codes, then succeeds."""

    def __init__(self, script: list[str]) -> None:
        self._script = list(script)
        self.calls = 0

    async def get_object(self, key: str) -> bytes:
        self.calls += 1
        await asyncio.sleep(0)
        if self._script:
            code = self._script.pop(0)
            raise CloudError(f"{code} while reading {key}", code=code)
        return f"contents of {key}".encode()


# =============================================================================
# 1. BACKOFF SCHEDULE
# =============================================================================


def show_schedule(engine: RetryPolicyEngine, config: RetryPolicyConfig) -> None:
    table = Table(title="Backoff schedule (before jitter)")
    table.add_column("attempt", justify="right")
    table.add_column("transient (s)", justify="right")
    table.add_column("throttling (s)", justify="right")

    for attempt in range(1, config.max_attempts):
        table.add_row(
            str(attempt),
            f"{engine.compute_delay(FailureKind.TRANSIENT, attempt, config):.3f}",
            f"{engine.compute_delay(FailureKind.THROTTLING, attempt, config):.3f}",
        )
    console.print(table)


# =============================================================================
# 2. CLASSIFICATION
# =============================================================================


def show_classification(engine: RetryPolicyEngine) -> None:
    table = Table(title="Classification")
    table.add_column("category")
    table.add_column("kind")
    table.add_column("retryable")

    categories = (
        "Throttling",
        "ServiceUnavailable",
        "InternalError",
        "AccessDenied",
        "NotFound",
        "Gremlins",
    )
    for category in categories:
        report = engine.classify(category, 1)
        retryable = "yes" if report.retryable else "no"
        table.add_row(category, report.kind.value, retryable)
    console.print(table)


# =============================================================================
# 3. EXPLICIT LOOP
# =============================================================================


async def explicit_loop(engine: RetryPolicyEngine, config: RetryPolicyConfig) -> None:
    store = FlakyObjectStore(["ServiceUnavailable", "Throttling"])
    attempt = 1
    while True:
        try:
            data = await store.get_object("reports/2024.csv")
        except CloudError as exc:
            report = engine.classify(exc.code, attempt, message=str(exc))
            decision = engine.evaluate(report, config)
            if not decision.should_retry:
                console.print(f"  [red]✗[/red] gave up: {decision.terminal_reason}")
                return
            console.print(
                f"  [yellow]→[/yellow] attempt {attempt} failed ({exc.code}), "
                f"waiting {decision.delay:.3f}s"
            )
            await asyncio.sleep(decision.delay)
            attempt += 1
        else:
            console.print(f"  [green]✓[/green] {data!r} after {store.calls} calls")
            return


# =============================================================================
# 4. DECORATOR
# =============================================================================


async def decorated_client(config: RetryPolicyConfig) -> None:
    store = FlakyObjectStore(["RequestTimeout", "InternalError"])

    @retry(config)
    async def fetch(key: str) -> bytes:
        return await store.get_object(key)

    data = await fetch("images/logo.png")
    console.print(f"  [green]✓[/green] {data!r} after {store.calls} calls")

    forbidden = FlakyObjectStore(["AccessDenied"])

    @retry(config.model_copy(update={"reraise": False}))
    async def fetch_private(key: str) -> bytes:
        return await forbidden.get_object(key)

    try:
        await fetch_private("secrets/key.pem")
    except RetryTerminatedError as exc:
        kind = exc.report.kind if exc.report else "n/a"
        console.print(f"  [red]✗[/red] {exc} (kind: {kind})")


# =============================================================================
# 5. CANCELLATION
# =============================================================================


async def cancellation(config: RetryPolicyConfig) -> None:
    shutdown = asyncio.Event()
    store = FlakyObjectStore(["ServiceUnavailable"] * 10)

    @retry(
        config.model_copy(update={"max_attempts": 10, "reraise": False}),
        should_abort=shutdown.is_set,
    )
    async def fetch(key: str) -> bytes:
        if store.calls == 2:
            shutdown.set()
        return await store.get_object(key)

    try:
        await fetch("logs/today.txt")
    except RetryTerminatedError as exc:
        reason = exc.decision.terminal_reason
        console.print(f"  [red]✗[/red] {reason} after {store.calls} calls")


async def main() -> None:
    configure_logging(LoggingConfig(level="WARNING"))

    engine = RetryPolicyEngine(uniform=random.Random(7).random)
    config = RetryPolicyConfig(
        max_attempts=5, base_delay=0.05, max_delay=1.0, jitter_factor=0.2
    )

    console.print(Panel("[bold]Retry Policy Walkthrough[/bold]", expand=False))

    console.print("\n[bold]1. Backoff schedule[/bold]")
    show_schedule(engine, config)

    console.print("\n[bold]2. Classifying failures[/bold]")
    show_classification(engine)

    console.print("\n[bold]3. Explicit retry loop[/bold]")
    await explicit_loop(engine, config)

    console.print("\n[bold]4. Decorated client[/bold]")
    await decorated_client(config)

    console.print("\n[bold]5. Cooperative cancellation[/bold]")
    await cancellation(config)

    console.print(Panel("[bold green]Retry Demo Complete[/bold green]", expand=False))


if __name__ == "__main__":
    asyncio.run(main())
