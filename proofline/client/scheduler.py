"""
Debounced scheduling of checks on content changes.
"""
import asyncio
from typing import Optional, Set

from proofline.config import settings
from proofline.services.fingerprint import fingerprint, strip_markup
from proofline.utils.logger import get_logger

logger = get_logger("client.scheduler")


class CheckScheduler:
    """
    Coalesces rapid content changes into a single check.

    Every schedule() call cancels the pending timer, so only the last
    content of a burst is checked once the delay elapses. Checks already
    in flight are never cancelled; the session decides whether their
    results still apply.

    Args:
        session: CorrectionSession whose run_check is invoked
        delay: Quiet period in seconds before a check starts
        min_length: Plain-text length below which no check is made
    """

    def __init__(self, session, delay: Optional[float] = None, min_length: Optional[int] = None):
        self.session = session
        self.delay = delay if delay is not None else settings.CLIENT_DEBOUNCE_SECONDS
        self.min_length = min_length if min_length is not None else settings.CORRECTION_MIN_CONTENT_LENGTH
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self, content: str, force: bool = False) -> Optional[asyncio.Task]:
        """
        Register a content change.

        Args:
            content: Current editor content (markup allowed)
            force: Check immediately and bypass the client cache

        Returns:
            The started task when a check begins right away, else None
        """
        self.cancel()

        plain_text = strip_markup(content)
        if len(plain_text) < self.min_length:
            self.session.clear_errors()
            # Restoring the previous text must trigger a fresh check
            self.session.last_checked_fingerprint = None
            return None

        if force:
            self.session.last_checked_fingerprint = None
            return self._start(content, use_cache=False)

        if (
            fingerprint(plain_text) == self.session.last_checked_fingerprint
            and self.session.ignore_registry.fingerprint == self.session.last_checked_ignore_fingerprint
        ):
            logger.debug("Content unchanged since last check, skipping")
            return None

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire, content)
        return None

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, content: str) -> None:
        self._timer = None
        self._start(content, use_cache=True)

    def _start(self, content: str, use_cache: bool) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(
            self.session.run_check(content, use_cache=use_cache)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every check that already started."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
