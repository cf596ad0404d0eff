from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeAlias

from tenacity import RetryCallState

RetryCallback: TypeAlias = Callable[[RetryCallState], Awaitable[None] | None]
BeforeSleepCallback: TypeAlias = Callable[[RetryCallState], Awaitable[None] | None]

# Maps a raised exception onto a category tag understood by the classifier.
Categorizer: TypeAlias = Callable[[BaseException], object]
# Cooperative cancellation: returns True once the caller wants retrying to stop.
AbortSignal: TypeAlias = Callable[[], bool]
