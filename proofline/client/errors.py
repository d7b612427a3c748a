"""
Exceptions raised by the client correction pipeline.
"""
from typing import Optional


class CorrectionClientError(Exception):
    """
    A call to the correction service failed or returned a non-success status.

    Attributes:
        message: Error message
        status_code: HTTP status code (None for transport failures)
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PositionNotFoundError(Exception):
    """
    The issue could not be located in the live document; nothing was changed.

    Attributes:
        message: Error message
        token: Token that was searched for
        offset: Stale offset carried by the issue
    """

    def __init__(self, token: str, offset: int):
        message = f"Position not found for {token!r} (offset {offset})"
        super().__init__(message)
        self.message = message
        self.token = token
        self.offset = offset
