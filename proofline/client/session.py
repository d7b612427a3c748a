"""
Editor-side correction session.

Ties together the remote API, the result cache, the ignore registry, the
debounced scheduler and the document. All state lives on one event loop;
no locking is needed, but a check response can arrive after the user
already acted on the issues it replaces. Every local mutation (accept,
reject, ignore-rule change) bumps a counter, and a response that started
before the latest mutation is dropped without touching the cache or the
displayed issues.
"""
from typing import List, Optional

from proofline.client.api import RemoteCorrectionClient
from proofline.client.cache import ClientResultCache, filter_ignored
from proofline.client.document import Document
from proofline.client.errors import CorrectionClientError
from proofline.client.ignore_registry import IgnoreRegistry
from proofline.client.resolver import Resolution, apply_correction, decorate_issues
from proofline.client.scheduler import CheckScheduler
from proofline.config import settings
from proofline.schemas.correction import Issue
from proofline.schemas.ignore_rule import IgnoreRuleResponse
from proofline.services.fingerprint import fingerprint, strip_markup
from proofline.utils.logger import get_logger

logger = get_logger("client.session")


class CorrectionSession:
    """
    Correction state for one open document.

    Args:
        api: Remote API client
        document: Live document; its changes schedule checks automatically
        cache: Result cache (defaults to the on-disk cache)
        ignore_registry: Ignore rule mirror (defaults to one backed by api)
        debounce_seconds: Quiet period before a scheduled check runs
        min_length: Minimum plain-text length worth checking
    """

    def __init__(
        self,
        api: RemoteCorrectionClient,
        document: Optional[Document] = None,
        cache: Optional[ClientResultCache] = None,
        ignore_registry: Optional[IgnoreRegistry] = None,
        debounce_seconds: Optional[float] = None,
        min_length: Optional[int] = None
    ):
        self.api = api
        self.document = document if document is not None else Document()
        self.cache = cache if cache is not None else ClientResultCache()
        self.ignore_registry = ignore_registry if ignore_registry is not None else IgnoreRegistry(api)
        self.min_length = min_length if min_length is not None else settings.CORRECTION_MIN_CONTENT_LENGTH
        self.scheduler = CheckScheduler(self, delay=debounce_seconds, min_length=self.min_length)

        self.active_issues: List[Issue] = []
        self.last_checked_fingerprint: Optional[str] = None
        self.last_checked_ignore_fingerprint: Optional[str] = None

        self._displayed_fingerprint: Optional[str] = None
        self._mutations = 0
        self._check_seq = 0
        self._in_flight = 0

        self.ignore_registry.add_listener(self._on_ignore_rules_changed)
        self.document.add_listener(self._on_document_changed)

    @property
    def is_checking(self) -> bool:
        return self._in_flight > 0

    async def start(self) -> None:
        """Load ignore rules and drop stale cache entries."""
        self.cache.evict()
        await self.ignore_registry.load()

    def check_spelling(self, content: Optional[str] = None, force: bool = False):
        """Schedule a check of content (defaults to the document's content)."""
        if content is None:
            content = self.document.to_html()
        return self.scheduler.schedule(content, force=force)

    def _on_document_changed(self, document: Document) -> None:
        self.scheduler.schedule(document.to_html())

    async def run_check(self, content: str, use_cache: bool = True) -> List[Issue]:
        """
        Check content now and update the displayed issues.

        A failed remote call leaves the displayed issues and the cache
        as they were.

        Returns:
            The issues now displayed
        """
        plain_text = strip_markup(content)
        if len(plain_text) < self.min_length:
            self.clear_errors()
            return []

        content_fingerprint = fingerprint(plain_text)
        self._check_seq += 1
        seq = self._check_seq

        if use_cache:
            entry = self.cache.get(content_fingerprint)
            if entry is not None:
                issues = filter_ignored(entry.issues, self.ignore_registry.keys)
                logger.debug("Cache hit", fingerprint=content_fingerprint, issues=len(issues))
                self._display(issues, content_fingerprint)
                self._mark_checked(content_fingerprint)
                return self.active_issues

        mutations = self._mutations
        self._in_flight += 1
        try:
            issues = await self.api.check(content)
        except CorrectionClientError as e:
            logger.warning(
                "Check failed, keeping previous issues",
                error=e.message,
                status_code=e.status_code
            )
            return self.active_issues
        finally:
            self._in_flight -= 1

        if mutations != self._mutations:
            logger.info("Discarding check result that predates a local change", fingerprint=content_fingerprint)
            return self.active_issues

        issues = filter_ignored(issues, self.ignore_registry.keys)
        self.cache.put(content_fingerprint, issues)

        if seq != self._check_seq:
            logger.debug("Newer check started, result cached only", fingerprint=content_fingerprint)
            return self.active_issues

        self._display(issues, content_fingerprint)
        self._mark_checked(content_fingerprint)
        logger.info("Check completed", fingerprint=content_fingerprint, issues=len(issues))
        return self.active_issues

    def _display(self, issues: List[Issue], content_fingerprint: Optional[str]) -> None:
        self.active_issues = list(issues)
        self._displayed_fingerprint = content_fingerprint
        decorate_issues(self.document, self.active_issues)

    def _mark_checked(self, content_fingerprint: str) -> None:
        self.last_checked_fingerprint = content_fingerprint
        self.last_checked_ignore_fingerprint = self.ignore_registry.fingerprint

    async def apply_suggestion(self, issue: Issue, suggestion: str) -> Resolution:
        """
        Replace the issue in the document with suggestion.

        The document edit and local state update happen before any network
        call; accept feedback is sent afterwards and its failure is only
        logged.

        Raises:
            PositionNotFoundError: If the issue cannot be located; nothing
                is changed
        """
        resolution = apply_correction(self.document, issue, suggestion)
        self._mutations += 1

        self.active_issues = [i for i in self.active_issues if not i.same_instance(issue)]
        if self._displayed_fingerprint:
            self.cache.remove_issue(self._displayed_fingerprint, issue)

        if issue.edit_id:
            accepted = await self.api.accept(issue.edit_id)
            if not accepted:
                logger.warning("Accept feedback not delivered", edit_id=issue.edit_id)
        return resolution

    async def reject_suggestion(self, issue: Issue) -> IgnoreRuleResponse:
        """
        Reject an issue and ignore its (token, type) from now on.

        Reject feedback is best-effort. The ignore rule is not: if the
        server does not store it, CorrectionClientError propagates and
        local state is unchanged.
        """
        self._mutations += 1
        if issue.edit_id:
            rejected = await self.api.reject(issue.edit_id)
            if not rejected:
                logger.warning("Reject feedback not delivered", edit_id=issue.edit_id)
        return await self.ignore_registry.add(issue)

    async def ignore(self, issue: Issue) -> IgnoreRuleResponse:
        """Ignore (token, type) without sending provider feedback."""
        self._mutations += 1
        return await self.ignore_registry.add(issue)

    def _on_ignore_rules_changed(self, rules: List[IgnoreRuleResponse]) -> None:
        keys = {rule.key for rule in rules}
        self._mutations += 1
        self.cache.reconcile_ignored(keys)
        visible = filter_ignored(self.active_issues, keys)
        if len(visible) != len(self.active_issues):
            self._display(visible, self._displayed_fingerprint)
        self.last_checked_fingerprint = None

    def clear_errors(self) -> None:
        self.active_issues = []
        self._displayed_fingerprint = None
        self.document.clear_markers()

    def clear_cache(self) -> int:
        self.last_checked_fingerprint = None
        return self.cache.clear()

    async def close(self) -> None:
        """Stop scheduling and wait for checks already in flight."""
        self.document.remove_listener(self._on_document_changed)
        self.scheduler.cancel()
        await self.scheduler.drain()
