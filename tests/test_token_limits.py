"""Tests for token validation and request throttling."""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from contactcmd_ai.errors import MessageTooLongError
from contactcmd_ai.utils.rate_limit import RequestRateLimiter
from contactcmd_ai.utils.tokens import TokenCounter


class TestTokenValidation:
    """Tests for message token validation."""

    @pytest.fixture
    def token_counter(self):
        """Create TokenCounter with a mocked tokenizer."""
        with patch("contactcmd_ai.utils.tokens.tiktoken.encoding_for_model") as encoding_for_model:
            encoding_for_model.return_value = Mock()
            return TokenCounter(max_tokens=1000)

    def test_validate_within_limit(self, token_counter):
        """Test that messages within token limit pass validation."""
        token_counter.tokenizer.encode.return_value = ["token"] * 500

        assert token_counter.validate("Short message") == 500

    def test_validate_at_limit(self, token_counter):
        token_counter.tokenizer.encode.return_value = ["token"] * 1000
        assert token_counter.validate("Exactly enough") == 1000

    def test_validate_exceeds_limit(self, token_counter):
        """Test that messages exceeding token limit raise MessageTooLongError."""
        token_counter.tokenizer.encode.return_value = ["token"] * 1500

        with pytest.raises(MessageTooLongError, match="Message exceeds token limit") as exc_info:
            token_counter.validate("Very long message")

        assert exc_info.value.token_count == 1500
        assert exc_info.value.limit == 1000

    def test_fallback_without_tokenizer(self, token_counter):
        """Test token validation fallback when tokenizer is unavailable."""
        token_counter.tokenizer = None

        # Under 4000 chars is roughly under 1000 tokens
        token_counter.validate("a" * 3000)

        with pytest.raises(MessageTooLongError):
            token_counter.validate("a" * 5000)

    def test_fallback_when_encode_fails(self, token_counter):
        token_counter.tokenizer.encode.side_effect = RuntimeError("bad input")
        assert token_counter.count("a" * 400) == 100

    def test_tokenizer_load_failure(self):
        """Test that a missing encoding degrades to the character estimate."""
        with patch(
            "contactcmd_ai.utils.tokens.tiktoken.encoding_for_model", side_effect=KeyError("unknown model")
        ):
            counter = TokenCounter(max_tokens=10)

        assert counter.tokenizer is None
        assert counter.count("a" * 40) == 10


class TestRequestRateLimiter:
    """Tests for the moving-window request limiter."""

    @pytest.mark.asyncio
    async def test_under_limit_does_not_wait(self):
        """Test that requests inside the window go straight through."""
        limiter = RequestRateLimiter(requests_per_minute=2)

        assert await limiter.acquire() == 0.0
        assert await limiter.acquire() == 0.0

    @pytest.mark.asyncio
    async def test_waits_until_window_frees(self):
        """Test that a full window sleeps until reset and then proceeds."""
        limiter = RequestRateLimiter(requests_per_minute=1)
        limiter.limiter = Mock()
        limiter.limiter.hit.side_effect = [False, False, True]
        limiter.limiter.get_window_stats.return_value = Mock(reset_time=102.5)

        with (
            patch("contactcmd_ai.utils.rate_limit.time") as mock_time,
            patch("contactcmd_ai.utils.rate_limit.asyncio") as mock_asyncio,
        ):
            mock_time.time.return_value = 100.0
            mock_asyncio.sleep = AsyncMock()

            waited = await limiter.acquire()

        assert waited == pytest.approx(5.0)
        assert mock_asyncio.sleep.await_count == 2
        mock_asyncio.sleep.assert_awaited_with(2.5)
        assert limiter.limiter.hit.call_count == 3

    @pytest.mark.asyncio
    async def test_minimum_wait(self):
        """Test that a reset time in the past still yields a short pause."""
        limiter = RequestRateLimiter(requests_per_minute=1)
        limiter.limiter = Mock()
        limiter.limiter.hit.side_effect = [False, True]
        limiter.limiter.get_window_stats.return_value = Mock(reset_time=99.0)

        with (
            patch("contactcmd_ai.utils.rate_limit.time") as mock_time,
            patch("contactcmd_ai.utils.rate_limit.asyncio") as mock_asyncio,
        ):
            mock_time.time.return_value = 100.0
            mock_asyncio.sleep = AsyncMock()

            waited = await limiter.acquire()

        mock_asyncio.sleep.assert_awaited_once_with(0.05)
        assert waited == pytest.approx(0.05)

    def test_limit_parsed_from_rate(self):
        limiter = RequestRateLimiter(requests_per_minute=30)
        assert limiter.request_limit.amount == 30
