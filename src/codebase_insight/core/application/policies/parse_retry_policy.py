from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_none,
)

from codebase_insight.core.application.exceptions import CodebaseAnalysisError

logger = structlog.get_logger()

_T = TypeVar("_T")


def _retryable(exc: BaseException) -> bool:
    return isinstance(exc, CodebaseAnalysisError) and exc.retryable


@dataclass(frozen=True, slots=True)
class ParseRetryPolicy:
    """Re-run an analysis with identical inputs when its output was unparseable.

    Only errors flagged ``retryable`` (``ParseError``) are retried; the
    default of two attempts means exactly one retry.
    """

    max_attempts: int = 2

    async def run(
        self,
        fn: Callable[[], Awaitable[_T]],
        on_retry: Callable[[BaseException], None] | None = None,
    ) -> _T:
        return await self._retrying(on_retry)(fn)

    def _retrying(self, on_retry: Callable[[BaseException], None] | None) -> AsyncRetrying:
        def _before_retry(state: RetryCallState) -> None:
            exc = state.outcome.exception() if state.outcome else None
            logger.warning(
                "Retrying analysis after retryable failure",
                attempt=state.attempt_number,
                error_type=type(exc).__name__,
                error_details=str(exc),
                processing_retries=state.attempt_number,
            )
            if on_retry is not None and exc is not None:
                on_retry(exc)

        return AsyncRetrying(
            retry=retry_if_exception(_retryable),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_none(),
            before_sleep=_before_retry,
            reraise=True,
        )
