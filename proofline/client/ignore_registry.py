"""
Local mirror of the user's ignore rules.

The server is the source of truth. Local state changes only after the
server accepted the change, and every change is reported synchronously
to listeners so caches and displayed issues are reconciled before the
mutating call returns.
"""
from typing import Callable, List
from uuid import UUID

from proofline.client.api import RemoteCorrectionClient
from proofline.schemas.correction import Issue
from proofline.schemas.ignore_rule import IgnoreRuleResponse
from proofline.services.fingerprint import ignore_fingerprint
from proofline.utils.logger import get_logger

logger = get_logger("client.ignore_registry")

ChangeListener = Callable[[List[IgnoreRuleResponse]], None]


class IgnoreRegistry:
    """Ignore rules of one user, kept in sync with the server."""

    def __init__(self, api: RemoteCorrectionClient):
        self.api = api
        self._rules: List[IgnoreRuleResponse] = []
        self._listeners: List[ChangeListener] = []

    @property
    def rules(self) -> List[IgnoreRuleResponse]:
        return list(self._rules)

    @property
    def keys(self) -> set:
        return {rule.key for rule in self._rules}

    @property
    def fingerprint(self) -> str:
        return ignore_fingerprint(self.keys)

    def is_ignored(self, issue: Issue) -> bool:
        return issue.key in self.keys

    def add_listener(self, callback: ChangeListener) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        rules = self.rules
        for callback in list(self._listeners):
            callback(rules)

    async def load(self) -> List[IgnoreRuleResponse]:
        """Replace local rules with the server's list."""
        self._rules = await self.api.list_ignore_rules()
        logger.info("Ignore rules loaded", count=len(self._rules))
        self._notify()
        return self.rules

    async def add(self, issue: Issue) -> IgnoreRuleResponse:
        """
        Ignore every future issue with the same (token, type).

        Raises:
            CorrectionClientError: If the server did not store the rule;
                local state is unchanged in that case
        """
        rule = await self.api.add_ignore_rule(issue.token, issue.type)
        existing = next((r for r in self._rules if r.key == rule.key), None)
        if existing is None:
            self._rules.append(rule)
        else:
            rule = existing
        logger.info("Ignore rule added", token=issue.token, type=issue.type)
        self._notify()
        return rule

    async def remove(self, rule_id: UUID) -> None:
        await self.api.remove_ignore_rule(rule_id)
        self._rules = [rule for rule in self._rules if rule.id != rule_id]
        logger.info("Ignore rule removed", rule_id=str(rule_id))
        self._notify()

    async def clear_all(self) -> int:
        deleted = await self.api.clear_ignore_rules()
        self._rules = []
        logger.info("Ignore rules cleared", deleted=deleted)
        self._notify()
        return deleted
