"""
Unit tests for CorrectionService.
"""
import pytest
from unittest.mock import AsyncMock

from proofline.services.correction_provider import CorrectionProviderError
from proofline.services.correction_provider_noop import MockCorrectionProvider, NoOpCorrectionProvider
from proofline.services.correction_service import CorrectionService, make_session_id
from proofline.services.query_guard import RecentQueryCache, SlidingWindowRateLimiter


def _service(provider, clock, max_requests=30, max_text_length=5000):
    return CorrectionService(
        provider,
        rate_limiter=SlidingWindowRateLimiter(max_requests=max_requests, window_seconds=60, clock=clock),
        recent_queries=RecentQueryCache(ttl_seconds=600, max_entries=100, clock=clock),
        max_text_length=max_text_length
    )


class TestCorrectionServiceCheck:
    """Tests for the guarded check pipeline."""

    @pytest.mark.asyncio
    async def test_returns_provider_issues(self, clock):
        """Test issues from the provider are normalized and returned."""
        service = _service(MockCorrectionProvider(), clock)
        issues = await service.check("The cat sat on teh mat today")

        assert len(issues) == 1
        assert issues[0].token == "teh"
        assert issues[0].offset == 15

    @pytest.mark.asyncio
    async def test_recent_query_hit_skips_provider(self, clock):
        """Test an equivalent recent text is answered from the cache."""
        provider = MockCorrectionProvider()
        service = _service(provider, clock)

        first = await service.check("The cat sat on teh mat today")
        second = await service.check("The cat sat on teh mat today")

        assert provider.calls == 1
        assert first == second

    @pytest.mark.asyncio
    async def test_recent_query_expires(self, clock):
        """Test the provider is called again after the TTL."""
        provider = NoOpCorrectionProvider()
        service = _service(provider, clock)

        await service.check("some text long enough to check")
        clock.advance(601)
        await service.check("some text long enough to check")

        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_truncates_long_text(self, clock):
        """Test texts above the maximum length are cut before the provider call."""
        provider = NoOpCorrectionProvider()
        provider.check = AsyncMock(return_value={"edits": []})
        service = _service(provider, clock, max_text_length=50)

        await service.check("word " * 100)

        sent_text = provider.check.call_args.args[0]
        assert len(sent_text) == 50

    @pytest.mark.asyncio
    async def test_provider_error_returns_empty(self, clock):
        """Test upstream failures degrade to an empty result."""
        provider = NoOpCorrectionProvider()
        provider.check = AsyncMock(side_effect=CorrectionProviderError("HTTP error: 500", status_code=500))
        service = _service(provider, clock)

        assert await service.check("some text long enough to check") == []
        # Failures are not cached
        assert len(service.recent_queries) == 0

    @pytest.mark.asyncio
    async def test_malformed_payload_returns_empty(self, clock):
        """Test a response of unknown shape degrades to an empty result."""
        provider = NoOpCorrectionProvider()
        provider.check = AsyncMock(return_value={"unexpected": True})
        service = _service(provider, clock)

        assert await service.check("some text long enough to check") == []

    @pytest.mark.asyncio
    async def test_rate_limited_returns_empty_without_provider_call(self, clock):
        """Test limited requests never reach the provider."""
        provider = NoOpCorrectionProvider()
        service = _service(provider, clock, max_requests=1)

        await service.check("first text long enough to check")
        assert await service.check("second text long enough to check") == []
        assert provider.calls == 1


class TestCorrectionServiceFeedback:
    """Tests for accept/reject feedback."""

    @pytest.mark.asyncio
    async def test_accept_success(self, clock):
        """Test acknowledged feedback returns True."""
        provider = NoOpCorrectionProvider()
        provider.accept_edit = AsyncMock(return_value=None)
        service = _service(provider, clock)

        assert await service.accept_edit("e-1", "user-1") is True
        provider.accept_edit.assert_awaited_once_with("e-1", "user-1")

    @pytest.mark.asyncio
    async def test_reject_failure(self, clock):
        """Test provider failures return False."""
        provider = NoOpCorrectionProvider()
        provider.reject_edit = AsyncMock(side_effect=CorrectionProviderError("HTTP error: 404", status_code=404))
        service = _service(provider, clock)

        assert await service.reject_edit("e-1", "user-1") is False

    @pytest.mark.asyncio
    async def test_feedback_is_rate_limited(self, clock):
        """Test feedback shares the check budget."""
        provider = NoOpCorrectionProvider()
        provider.accept_edit = AsyncMock(return_value=None)
        service = _service(provider, clock, max_requests=1)

        await service.check("text long enough to check")
        assert await service.accept_edit("e-1", "user-1") is False
        provider.accept_edit.assert_not_awaited()


def test_make_session_id():
    """Test stable and per-request session ids."""
    assert make_session_id("abc") == "user-abc"
    assert make_session_id("abc", per_request=True).startswith("user-abc-")
