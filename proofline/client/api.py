"""
HTTP client for the proofline correction API.
"""
from typing import Any, List, Optional

import httpx

from proofline.client.errors import CorrectionClientError
from proofline.config import settings
from proofline.schemas.correction import Issue
from proofline.schemas.ignore_rule import IgnoreRuleResponse
from proofline.services.fingerprint import strip_markup
from proofline.services.issue_adapter import parse_payload
from proofline.utils.logger import get_logger

logger = get_logger("client.api")

API_PREFIX = "/api/v1/spellcheck"


class RemoteCorrectionClient:
    """
    Thin async wrapper around the spellcheck endpoints.

    Check and ignore-rule calls raise CorrectionClientError on any
    non-success outcome. Accept/reject feedback is best-effort and only
    reports success as a bool.
    """

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.token = token
        self.base_url = (base_url or settings.CLIENT_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.CLIENT_REQUEST_TIMEOUT

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{API_PREFIX}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, json=json, headers=self.headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Correction API returned an error",
                method=method,
                path=path,
                status_code=e.response.status_code
            )
            raise CorrectionClientError(
                f"{method} {path} failed: {e.response.status_code}",
                status_code=e.response.status_code
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Correction API request failed", method=method, path=path, error=str(e))
            raise CorrectionClientError(f"{method} {path} failed: {str(e)}") from e

    async def check(self, content: str) -> List[Issue]:
        """
        Check editor content and return the validated issues.

        Raises:
            CorrectionClientError: On transport failure, non-2xx status or
                an unrecognized response body
        """
        data = await self._request("POST", "", json={"text": content})
        try:
            return parse_payload(data, text=strip_markup(content))
        except ValueError as e:
            raise CorrectionClientError(str(e)) from e

    async def _feedback(self, edit_id: str, action: str) -> bool:
        try:
            data = await self._request("POST", f"/{action}/{edit_id}")
        except CorrectionClientError:
            return False
        return bool(isinstance(data, dict) and data.get("success"))

    async def accept(self, edit_id: str) -> bool:
        return await self._feedback(edit_id, "accept")

    async def reject(self, edit_id: str) -> bool:
        return await self._feedback(edit_id, "reject")

    async def list_ignore_rules(self) -> List[IgnoreRuleResponse]:
        data = await self._request("GET", "/ignored")
        return [IgnoreRuleResponse.model_validate(item) for item in data.get("ignore_rules", [])]

    async def add_ignore_rule(self, token: str, issue_type: str) -> IgnoreRuleResponse:
        data = await self._request("POST", "/ignored", json={"token": token, "type": issue_type})
        if not data.get("success"):
            raise CorrectionClientError(f"Ignore rule for {token!r} was not stored")
        return IgnoreRuleResponse.model_validate(data["ignore_rule"])

    async def remove_ignore_rule(self, rule_id) -> None:
        data = await self._request("DELETE", f"/ignored/{rule_id}")
        if not data.get("success"):
            raise CorrectionClientError(f"Ignore rule {rule_id} was not removed")

    async def clear_ignore_rules(self) -> int:
        data = await self._request("DELETE", "/ignored")
        if not data.get("success"):
            raise CorrectionClientError("Ignore rules were not cleared")
        return data.get("deleted", 0)
