"""Tests for error classification and retry logic."""

import pytest

from budgetly.api.errors import (
    ClientFaultError,
    ForbiddenError,
    NotFoundError,
    NotInitializedError,
    RateLimitedError,
    ResponseFormatError,
    ServerError,
    UnauthorizedError,
    UnknownStatusError,
    UnreachableError,
    ValidationFailedError,
)
from budgetly.api.resilience import (
    ErrorCategory,
    classify_error,
    get_user_message,
    is_offline_error,
    retry_on_transient,
    with_retry,
)


class TestClassifyError:
    """Test error classification for retry decisions."""

    def test_unreachable_is_transient(self):
        assert classify_error(UnreachableError("offline")) == ErrorCategory.TRANSIENT

    def test_rate_limited_is_transient(self):
        assert classify_error(RateLimitedError("slow down", 429)) == ErrorCategory.TRANSIENT

    def test_server_error_is_transient(self):
        assert classify_error(ServerError("oops", 500)) == ErrorCategory.TRANSIENT

    def test_unknown_5xx_is_transient(self):
        assert classify_error(UnknownStatusError("bad gateway", 502)) == ErrorCategory.TRANSIENT

    def test_unknown_4xx_is_permanent(self):
        assert classify_error(UnknownStatusError("teapot", 418)) == ErrorCategory.PERMANENT

    def test_validation_is_validation(self):
        err = ValidationFailedError("invalid", {"errors": {}})
        assert classify_error(err) == ErrorCategory.VALIDATION

    @pytest.mark.parametrize("err", [
        UnauthorizedError("no", 401),
        ForbiddenError("no", 403),
        NotFoundError("gone", 404),
        NotInitializedError(),
        ClientFaultError("bad body"),
        ResponseFormatError("bad shape"),
        RuntimeError("bug"),
    ])
    def test_permanent(self, err):
        assert classify_error(err) == ErrorCategory.PERMANENT

    def test_only_unreachable_is_offline(self):
        assert is_offline_error(UnreachableError("offline"))
        assert not is_offline_error(ServerError("oops", 500))


class TestGetUserMessage:
    """Test user-friendly error messages."""

    def test_unreachable_message(self):
        msg = get_user_message(UnreachableError("offline"))
        assert "connect" in msg.lower()

    def test_auth_message(self):
        msg = get_user_message(UnauthorizedError("Invalid credentials.", 401))
        assert "Personal Access Token" in msg

    def test_validation_uses_server_message(self):
        err = ValidationFailedError("The name field is required.", {})
        assert get_user_message(err) == "The name field is required."

    def test_not_initialized_message(self):
        assert "connect" in get_user_message(NotInitializedError()).lower()

    def test_other_exception(self):
        assert "try again" in get_user_message(RuntimeError("x")).lower()


class TestWithRetry:
    """Test retry logic with exponential backoff."""

    @pytest.mark.asyncio
    async def test_success_on_first_try(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            return "ok"

        result = await with_retry(operation, max_retries=3, initial_delay=0.01)
        assert result == "ok"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_success_after_transient_failure(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise UnreachableError("timeout")
            return "ok"

        result = await with_retry(operation, max_retries=3, initial_delay=0.01)
        assert result == "ok"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_permanent_error_not_retried(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            raise UnauthorizedError("bad token", 401)

        with pytest.raises(UnauthorizedError):
            await with_retry(operation, max_retries=3, initial_delay=0.01)

        assert call_count == 1

    @pytest.mark.asyncio
    async def test_validation_error_not_retried(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            raise ValidationFailedError("invalid", {})

        with pytest.raises(ValidationFailedError):
            await with_retry(operation, max_retries=3, initial_delay=0.01)

        assert call_count == 1

    @pytest.mark.asyncio
    async def test_max_retries_exceeded(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            raise ServerError("always fails", 500)

        with pytest.raises(ServerError):
            await with_retry(operation, max_retries=2, initial_delay=0.01)

        assert call_count == 3  # 1 initial + 2 retries

    @pytest.mark.asyncio
    async def test_on_retry_callback(self):
        retries = []

        async def operation():
            raise UnreachableError("fail")

        def on_retry(attempt, delay, error):
            retries.append((attempt, delay))

        with pytest.raises(UnreachableError):
            await with_retry(
                operation, max_retries=2, initial_delay=0.01, on_retry=on_retry,
            )

        assert retries == [(1, 0.01), (2, 0.02)]

    @pytest.mark.asyncio
    async def test_decorator(self):
        attempts = []

        @retry_on_transient(max_retries=1, initial_delay=0.01)
        async def fetch(value):
            attempts.append(value)
            if len(attempts) == 1:
                raise RateLimitedError("slow down", 429)
            return value * 2

        assert await fetch(21) == 42
        assert attempts == [21, 21]
