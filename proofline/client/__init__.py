from proofline.client.api import RemoteCorrectionClient
from proofline.client.cache import ClientResultCache, JsonFileStore, MemoryStore
from proofline.client.document import Document, Span
from proofline.client.errors import CorrectionClientError, PositionNotFoundError
from proofline.client.ignore_registry import IgnoreRegistry
from proofline.client.scheduler import CheckScheduler
from proofline.client.session import CorrectionSession

__all__ = [
    "RemoteCorrectionClient",
    "ClientResultCache",
    "JsonFileStore",
    "MemoryStore",
    "Document",
    "Span",
    "CorrectionClientError",
    "PositionNotFoundError",
    "IgnoreRegistry",
    "CheckScheduler",
    "CorrectionSession",
]
