"""
NoOp and mock correction providers for testing and local development.
Return canned data without calling any remote service.
"""
from typing import Any, Dict

from proofline.services.correction_provider import CorrectionProvider
from proofline.utils.logger import get_logger

logger = get_logger("services.correction_provider_noop")

# Misspellings the mock provider always reports
MOCK_MISSPELLINGS = {
    "teh": ["the", "tech", "ten"],
    "recieve": ["receive", "received", "receiver"],
    "thier": ["their", "there", "they're"],
}


class NoOpCorrectionProvider(CorrectionProvider):
    """No-operation provider: never reports an issue."""

    def __init__(self):
        self.calls = 0
        logger.info("NoOpCorrectionProvider initialized")

    async def check(self, text: str, session_id: str) -> Dict[str, Any]:
        self.calls += 1
        logger.info(f"NoOp check called, text_length={len(text)}")
        return {"edits": []}

    async def accept_edit(self, edit_id: str, session_id: str) -> None:
        logger.debug(f"NoOp accept called for edit_id={edit_id}")

    async def reject_edit(self, edit_id: str, session_id: str) -> None:
        logger.debug(f"NoOp reject called for edit_id={edit_id}")

    def get_provider_name(self) -> str:
        return "noop"


class MockCorrectionProvider(NoOpCorrectionProvider):
    """Development provider reporting a fixed set of common misspellings."""

    async def check(self, text: str, session_id: str) -> Dict[str, Any]:
        self.calls += 1
        errors = []
        for token, suggestions in MOCK_MISSPELLINGS.items():
            offset = text.find(token)
            if offset >= 0:
                errors.append({
                    "offset": offset,
                    "token": token,
                    "type": "spelling",
                    "suggestions": list(suggestions),
                })

        logger.info(f"Mock check returning {len(errors)} issues")
        return {"errors": errors}

    def get_provider_name(self) -> str:
        return "mock"
