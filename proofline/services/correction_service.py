"""
Server-side correction service.

Owns the cost guards and the provider, and applies them in a fixed order for
every check request:

1. rate limit (limited -> empty result, never an error)
2. recent-query cache
3. upstream provider call
4. store the response in the recent-query cache
"""
import time
from typing import List, Optional

from proofline.config import settings
from proofline.schemas.correction import Issue
from proofline.services.correction_provider import CorrectionProvider, CorrectionProviderError
from proofline.services.issue_adapter import parse_payload
from proofline.services.query_guard import RecentQueryCache, SlidingWindowRateLimiter
from proofline.utils.logger import get_logger

logger = get_logger("services.correction_service")


class CorrectionService:
    """Guards the paid provider behind a rate limiter and a recent-query cache."""

    def __init__(
        self,
        provider: CorrectionProvider,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        recent_queries: Optional[RecentQueryCache] = None,
        max_text_length: Optional[int] = None
    ):
        """
        Initialize the correction service.

        Args:
            provider: Upstream correction provider
            rate_limiter: Limiter instance (a fresh one per service by default)
            recent_queries: Recent-query cache (a fresh one per service by default)
            max_text_length: Texts longer than this are truncated before the upstream call
        """
        self.provider = provider
        self.rate_limiter = rate_limiter or SlidingWindowRateLimiter()
        self.recent_queries = recent_queries or RecentQueryCache()
        self.max_text_length = max_text_length or settings.CORRECTION_MAX_TEXT_LENGTH

    async def check(self, text: str, session_id: str = "default-session") -> List[Issue]:
        """
        Check plain text for issues.

        Never raises for provider trouble: rate limiting, upstream errors and
        malformed responses all degrade to an empty list.

        Args:
            text: Plain text (markup already stripped)
            session_id: Provider session identifier

        Returns:
            Issues found in text
        """
        if self.rate_limiter.is_rate_limited():
            logger.warning("Correction request was rate limited")
            return []
        self.rate_limiter.record()

        if len(text) > self.max_text_length:
            logger.info(
                "Truncating text for correction provider to save costs",
                original_length=len(text),
                truncated_length=self.max_text_length
            )
            text = text[:self.max_text_length]

        payload = self.recent_queries.get(text)
        if payload is None:
            try:
                payload = await self.provider.check(text, session_id)
            except CorrectionProviderError as e:
                logger.error(
                    "Correction provider call failed",
                    provider=self.provider.get_provider_name(),
                    error=e.message,
                    status_code=e.status_code
                )
                return []
            self.recent_queries.put(text, payload)

        try:
            issues = parse_payload(payload, text)
        except ValueError as e:
            logger.error("Malformed correction provider response", error=str(e))
            return []

        logger.info(
            "Correction check complete",
            issue_count=len(issues),
            first_tokens=", ".join(issue.token for issue in issues[:3])
        )
        return issues

    async def accept_edit(self, edit_id: str, session_id: str) -> bool:
        """
        Forward accept feedback to the provider.

        Returns:
            True if the provider acknowledged the feedback
        """
        return await self._send_feedback(edit_id, session_id, accept=True)

    async def reject_edit(self, edit_id: str, session_id: str) -> bool:
        """
        Forward reject feedback to the provider.

        Returns:
            True if the provider acknowledged the feedback
        """
        return await self._send_feedback(edit_id, session_id, accept=False)

    async def _send_feedback(self, edit_id: str, session_id: str, accept: bool) -> bool:
        action = "accept" if accept else "reject"

        # Feedback shares the upstream budget with checks
        if self.rate_limiter.is_rate_limited():
            logger.warning(f"Correction {action} feedback was rate limited", edit_id=edit_id)
            return False
        self.rate_limiter.record()

        try:
            if accept:
                await self.provider.accept_edit(edit_id, session_id)
            else:
                await self.provider.reject_edit(edit_id, session_id)
        except CorrectionProviderError as e:
            logger.error(f"Error sending {action} feedback", edit_id=edit_id, error=e.message)
            return False

        return True


def make_session_id(user_id: object, per_request: bool = False) -> str:
    """
    Provider session id for a caller.

    Checks get a per-request id; feedback uses the stable per-user id.
    """
    if per_request:
        return f"user-{user_id}-{int(time.time() * 1000)}"
    return f"user-{user_id}"
