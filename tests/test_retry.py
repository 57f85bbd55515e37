# tests for retry.py
# backoff schedule and the retryable flag stopping the loop

from unittest.mock import AsyncMock

import pytest

from mood_journal.config import RetryConfig
from mood_journal.errors import AnalysisError, AnalysisErrorKind
from mood_journal.retry import backoff_delay, with_retry


def flaky(*outcomes):
    """async callable that raises/returns the given outcomes in order"""
    return AsyncMock(side_effect=list(outcomes))


class TestBackoff:

    def test_exponential_delays(self):
        cfg = RetryConfig(max_attempts=4, delay_seconds=1.0, backoff_multiplier=2.0)
        assert [backoff_delay(cfg, n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]


class TestWithRetry:

    async def test_returns_first_success(self):
        fn = flaky("ok")
        sleep = AsyncMock()
        assert await with_retry(fn, RetryConfig(max_attempts=3), sleep=sleep) == "ok"
        sleep.assert_not_awaited()

    async def test_retries_retryable_errors(self):
        fn = flaky(AnalysisError(AnalysisErrorKind.TIMEOUT, "slow"), "ok")
        sleep = AsyncMock()
        result = await with_retry(fn, RetryConfig(max_attempts=3, delay_seconds=0.5), sleep=sleep)
        assert result == "ok"
        assert fn.await_count == 2
        sleep.assert_awaited_once_with(0.5)

    async def test_non_retryable_stops_immediately(self):
        fn = flaky(AnalysisError(AnalysisErrorKind.AUTHORIZATION, "revoked"), "never")
        sleep = AsyncMock()
        with pytest.raises(AnalysisError) as exc_info:
            await with_retry(fn, RetryConfig(max_attempts=5), sleep=sleep)
        assert exc_info.value.kind == AnalysisErrorKind.AUTHORIZATION
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    async def test_reraises_last_error_when_exhausted(self):
        first = AnalysisError(AnalysisErrorKind.CONNECTIVITY, "offline")
        last = AnalysisError(AnalysisErrorKind.MALFORMED, "garbage")
        fn = flaky(first, last)
        with pytest.raises(AnalysisError) as exc_info:
            await with_retry(fn, RetryConfig(max_attempts=2), sleep=AsyncMock())
        assert exc_info.value is last

    async def test_other_exceptions_propagate(self):
        fn = flaky(KeyError("bug"))
        with pytest.raises(KeyError):
            await with_retry(fn, RetryConfig(max_attempts=3), sleep=AsyncMock())
        assert fn.await_count == 1

    @pytest.mark.parametrize("max_attempts", [0, 1])
    async def test_single_attempt_limit(self, max_attempts):
        fn = flaky(AnalysisError(AnalysisErrorKind.TIMEOUT, "slow"), "ok")
        sleep = AsyncMock()
        with pytest.raises(AnalysisError):
            await with_retry(fn, RetryConfig(max_attempts=max_attempts), sleep=sleep)
        assert fn.await_count == 1
        sleep.assert_not_awaited()
