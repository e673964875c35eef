from unittest.mock import AsyncMock, MagicMock

import pytest

from codebase_insight.core.application.exceptions import (
    AnalysisTimeoutError,
    CloneError,
    ExitCodeError,
    ParseError,
    SetupError,
    TurnBudgetExhaustedError,
)
from codebase_insight.core.application.policies import ParseRetryPolicy


@pytest.mark.asyncio
async def test_parse_error_is_retried_once_then_succeeds():
    fn = AsyncMock(side_effect=[ParseError("bad json"), "ok"])
    on_retry = MagicMock()

    result = await ParseRetryPolicy().run(fn, on_retry=on_retry)

    assert result == "ok"
    assert fn.await_count == 2
    on_retry.assert_called_once()
    assert isinstance(on_retry.call_args.args[0], ParseError)


@pytest.mark.asyncio
async def test_second_parse_error_is_reraised():
    fn = AsyncMock(side_effect=[ParseError("first"), ParseError("second")])

    with pytest.raises(ParseError, match="second"):
        await ParseRetryPolicy().run(fn)

    assert fn.await_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        AnalysisTimeoutError(20),
        ExitCodeError("boom", exit_code=2),
        TurnBudgetExhaustedError("used all 30 turns"),
        CloneError("git clone failed: repository not found"),
        SetupError("claude is missing", missing=["cli"]),
        RuntimeError("unexpected"),
    ],
)
async def test_other_failures_are_not_retried(error):
    fn = AsyncMock(side_effect=error)

    with pytest.raises(type(error)):
        await ParseRetryPolicy().run(fn)

    assert fn.await_count == 1
