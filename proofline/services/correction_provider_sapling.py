"""
Sapling API correction provider implementation.
"""
from typing import Any, Dict, Optional

import httpx

from proofline.services.correction_provider import CorrectionProvider, CorrectionProviderError
from proofline.utils.logger import get_logger

logger = get_logger("services.correction_provider_sapling")


class SaplingCorrectionProvider(CorrectionProvider):
    """
    Sapling ``/edits`` API implementation.

    A missing API key is not fatal: checks return no edits and feedback
    calls are skipped, so the editor keeps working without corrections.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = "https://api.sapling.ai/api/v1/edits",
        lang: str = "en",
        timeout: float = 30.0
    ):
        """
        Initialize Sapling provider.

        Args:
            api_key: Sapling API key (None disables upstream calls)
            api_url: Base URL of the edits endpoint
            lang: Language code sent with every check
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.lang = lang
        self.timeout = timeout

        logger.info(
            "SaplingCorrectionProvider initialized",
            api_key_configured=bool(api_key),
            lang=lang
        )

    async def check(self, text: str, session_id: str) -> Dict[str, Any]:
        """
        Send text to Sapling and return the raw ``{"edits": [...]}`` body.

        Raises:
            CorrectionProviderError: On HTTP error, timeout or malformed JSON
        """
        if not self.api_key:
            logger.warning("Sapling API key is missing, returning no edits")
            return {"edits": []}

        payload = {
            "key": self.api_key,
            "text": text,
            "session_id": session_id,
            "lang": self.lang,
            "auto_apply": False,
            "neural_spellcheck": True,
        }

        logger.info(
            "Making Sapling spellcheck request",
            text_length=len(text),
            text_sample=text[:50] + ("..." if len(text) > 50 else "")
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Sapling request timed out after {self.timeout}s")
            raise CorrectionProviderError(f"Request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "Sapling HTTP error",
                status_code=e.response.status_code,
                body=e.response.text[:200]
            )
            raise CorrectionProviderError(
                f"HTTP error: {e.response.status_code}",
                status_code=e.response.status_code
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Sapling request failed: {str(e)}")
            raise CorrectionProviderError(f"Sapling request failed: {str(e)}") from e

        logger.info(
            "Sapling response received",
            edit_count=len(data.get("edits") or []) if isinstance(data, dict) else 0
        )
        return data

    async def _send_feedback(self, edit_id: str, session_id: str, action: str) -> None:
        """POST accept/reject feedback for a single edit."""
        if not self.api_key:
            logger.warning(f"Sapling API key is missing, skipping {action} feedback")
            raise CorrectionProviderError("Sapling API key is not configured")

        url = f"{self.api_url}/{edit_id}/{action}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    json={"key": self.api_key, "session_id": session_id}
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CorrectionProviderError(
                f"Sapling {action} failed: {e.response.status_code}",
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise CorrectionProviderError(f"Sapling {action} failed: {str(e)}") from e

        logger.debug(f"Sapling {action} feedback sent", edit_id=edit_id)

    async def accept_edit(self, edit_id: str, session_id: str) -> None:
        await self._send_feedback(edit_id, session_id, "accept")

    async def reject_edit(self, edit_id: str, session_id: str) -> None:
        await self._send_feedback(edit_id, session_id, "reject")

    def get_provider_name(self) -> str:
        return "sapling"
