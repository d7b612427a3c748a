"""
Correction provider abstraction.
Provides abstract base class and factory function.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from proofline.config import settings
from proofline.utils.logger import get_logger

logger = get_logger("services.correction_provider")


class CorrectionProviderError(Exception):
    """
    Raised when the upstream provider call fails.

    Attributes:
        message: Error message
        status_code: HTTP status returned by the provider (if any)
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CorrectionProvider(ABC):
    """
    Abstract base class for remote correction providers.
    Allows swapping the paid provider for test or development doubles.
    """

    @abstractmethod
    async def check(self, text: str, session_id: str) -> Dict[str, Any]:
        """
        Check text and return the provider's raw response body.

        Args:
            text: Plain text to check
            session_id: Provider session identifier

        Returns:
            Decoded response body, either ``{"edits": [...]}`` or ``{"errors": [...]}``

        Raises:
            CorrectionProviderError: If the call fails
        """
        pass

    @abstractmethod
    async def accept_edit(self, edit_id: str, session_id: str) -> None:
        """
        Tell the provider a suggested edit was applied.

        Raises:
            CorrectionProviderError: If the call fails
        """
        pass

    @abstractmethod
    async def reject_edit(self, edit_id: str, session_id: str) -> None:
        """
        Tell the provider a suggested edit was dismissed.

        Raises:
            CorrectionProviderError: If the call fails
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the provider name (e.g., 'sapling')."""
        pass


def create_correction_provider(provider: Optional[str] = None) -> CorrectionProvider:
    """
    Factory function to create the configured correction provider.

    Args:
        provider: Provider name ("sapling", "mock", "noop"). If None, uses settings.CORRECTION_PROVIDER

    Returns:
        CorrectionProvider instance

    Raises:
        ValueError: If provider is not supported
    """
    if provider is None:
        provider = settings.CORRECTION_PROVIDER

    provider = provider.lower()

    if provider == "sapling":
        from proofline.services.correction_provider_sapling import SaplingCorrectionProvider
        logger.info(f"Creating Sapling correction provider: url={settings.SAPLING_API_URL}")
        return SaplingCorrectionProvider(
            api_key=settings.SAPLING_API_KEY,
            api_url=settings.SAPLING_API_URL,
            lang=settings.SAPLING_LANG,
            timeout=settings.SAPLING_TIMEOUT,
        )
    elif provider == "mock":
        from proofline.services.correction_provider_noop import MockCorrectionProvider
        logger.info("Creating mock correction provider (development only)")
        return MockCorrectionProvider()
    elif provider == "noop":
        from proofline.services.correction_provider_noop import NoOpCorrectionProvider
        logger.info("Creating NoOp correction provider")
        return NoOpCorrectionProvider()
    else:
        raise ValueError(
            f"Unsupported correction provider: {provider}. "
            "Supported providers: sapling, mock, noop"
        )
