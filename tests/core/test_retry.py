"""
Test suite for the bounded retry executor.

Covers attempt counting, linear backoff delays and error propagation.

System role: Verification of shared retry policy
"""

from unittest.mock import AsyncMock, call

import pytest

from linkmeld.core.retry import with_retry


class FlakyOperation:
    """Fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, error_type: type[Exception] = ConnectionError) -> None:
        self.failures = failures
        self.error_type = error_type
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_type(f"attempt {self.calls}")
        return "ok"


class TestWithRetry:
    """Test suite for with_retry."""

    @pytest.mark.asyncio
    async def test_success_first_call_should_not_sleep(self) -> None:
        """Test a successful first call returns without retrying."""
        operation = FlakyOperation(failures=0)
        sleep = AsyncMock()

        result = await with_retry(operation, max_retries=3, initial_delay=1.0, sleep=sleep)

        assert result == "ok"
        assert operation.calls == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delays_should_grow_linearly(self) -> None:
        """Test the n-th retry waits initial_delay * n."""
        operation = FlakyOperation(failures=2)
        sleep = AsyncMock()

        result = await with_retry(operation, max_retries=3, initial_delay=1.0, sleep=sleep)

        assert result == "ok"
        assert operation.calls == 3
        assert sleep.await_args_list == [call(1.0), call(2.0)]

    @pytest.mark.asyncio
    async def test_exhausted_retries_should_raise_last_error(self) -> None:
        """Test total calls are max_retries + 1 and the last error propagates."""
        operation = FlakyOperation(failures=10)
        sleep = AsyncMock()

        with pytest.raises(ConnectionError, match="attempt 3"):
            await with_retry(operation, max_retries=2, initial_delay=0.5, sleep=sleep)

        assert operation.calls == 3
        assert sleep.await_args_list == [call(0.5), call(1.0)]

    @pytest.mark.asyncio
    async def test_zero_retries_should_call_once(self) -> None:
        """Test max_retries=0 means a single attempt."""
        operation = FlakyOperation(failures=1)

        with pytest.raises(ConnectionError):
            await with_retry(operation, max_retries=0, sleep=AsyncMock())

        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_unlisted_error_should_not_be_retried(self) -> None:
        """Test errors outside retry_on propagate immediately."""
        operation = FlakyOperation(failures=1, error_type=KeyError)
        sleep = AsyncMock()

        with pytest.raises(KeyError):
            await with_retry(operation, max_retries=3, retry_on=(ConnectionError,), sleep=sleep)

        assert operation.calls == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_negative_max_retries_should_raise_value_error(self) -> None:
        """Test negative retry budgets are rejected."""
        with pytest.raises(ValueError):
            await with_retry(FlakyOperation(failures=0), max_retries=-1)

    @pytest.mark.asyncio
    async def test_lambda_returning_coroutine_should_be_awaited(self) -> None:
        """Test a plain lambda wrapping a coroutine is awaited and retried."""
        operation = FlakyOperation(failures=1)
        sleep = AsyncMock()

        result = await with_retry(
            lambda: operation(),
            max_retries=2,
            initial_delay=1.0,
            sleep=sleep,
        )

        assert result == "ok"
        assert operation.calls == 2
        assert sleep.await_args_list == [call(1.0)]
