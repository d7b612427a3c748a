"""
Client-side result cache keyed by content fingerprint.

Entries expire after a fixed TTL and the cache is capped to a fixed
number of entries (oldest evicted first). The whole cache is written to
its store after every mutation so a crash loses at most the mutation in
progress.
"""
import json
import os
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from proofline.config import settings
from proofline.schemas.correction import Issue
from proofline.utils.logger import get_logger

logger = get_logger("client.cache")

CACHE_KEY = "spellcheck_cache"


def now_ms() -> int:
    return int(time.time() * 1000)


def filter_ignored(issues: Iterable[Issue], ignored_keys: set) -> List[Issue]:
    """Drop issues whose (token, type) is ignored."""
    return [issue for issue in issues if issue.key not in ignored_keys]


class CacheEntry(BaseModel):
    """Cached check result for one content fingerprint."""

    fingerprint: str
    issues: List[Issue] = Field(default_factory=list)
    timestamp: int = Field(description="Last write time, epoch milliseconds")


class MemoryStore:
    """Store that keeps the serialized cache in memory only."""

    def __init__(self):
        self.data: Dict[str, dict] = {}
        self.writes = 0

    def load(self) -> Dict[str, dict]:
        return dict(self.data)

    def save(self, data: Dict[str, dict]) -> None:
        self.data = dict(data)
        self.writes += 1


class JsonFileStore:
    """
    Store that persists the cache as a single JSON document on disk.

    The document holds one top-level key with the fingerprint -> entry map.
    Writes go to a temporary file first and are moved into place, so a
    crash mid-write leaves the previous version intact.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(os.path.expanduser(path or settings.CLIENT_CACHE_PATH))

    def load(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(
                "Failed to load persisted cache, starting empty",
                path=str(self.path),
                error=str(e)
            )
            return {}
        entries = document.get(CACHE_KEY) if isinstance(document, dict) else None
        return entries if isinstance(entries, dict) else {}

    def save(self, data: Dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({CACHE_KEY: data}, f, ensure_ascii=False)
        os.replace(tmp_path, self.path)


class ClientResultCache:
    """
    Fingerprint -> issues cache with TTL expiry and a size bound.

    Args:
        store: Persistence backend (defaults to JsonFileStore)
        ttl_ms: Entry lifetime in milliseconds
        max_items: Maximum number of entries kept
        clock: Callable returning the current time in epoch milliseconds
    """

    def __init__(
        self,
        store=None,
        ttl_ms: Optional[int] = None,
        max_items: Optional[int] = None,
        clock: Callable[[], int] = now_ms
    ):
        self.store = store if store is not None else JsonFileStore()
        self.ttl_ms = ttl_ms if ttl_ms is not None else settings.client_cache_ttl_ms
        self.max_items = max_items if max_items is not None else settings.CLIENT_CACHE_MAX_ITEMS
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = self._load()

    def _load(self) -> Dict[str, CacheEntry]:
        entries = {}
        for key, raw in self.store.load().items():
            try:
                entry = CacheEntry.model_validate(raw)
            except ValidationError:
                logger.warning("Dropping malformed cache entry", fingerprint=key)
                continue
            entries[entry.fingerprint] = entry
        if entries:
            logger.debug("Cache loaded", entries=len(entries))
        return entries

    def _persist(self) -> None:
        data = {fp: entry.model_dump(mode="json", by_alias=True) for fp, entry in self._entries.items()}
        try:
            self.store.save(data)
        except OSError as e:
            logger.warning("Failed to persist cache", error=str(e), entries=len(data))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._entries

    def fingerprints(self) -> List[str]:
        return list(self._entries)

    def is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp >= self.ttl_ms

    def get(self, fingerprint: str) -> Optional[CacheEntry]:
        """Return the entry when present and fresh; expired entries are removed."""
        entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        if self.is_expired(entry):
            del self._entries[fingerprint]
            self._persist()
            logger.debug("Cache entry expired", fingerprint=fingerprint)
            return None
        return entry

    def put(self, fingerprint: str, issues: Iterable[Issue]) -> CacheEntry:
        """Insert or overwrite an entry, then drop expired entries and enforce the size bound."""
        entry = CacheEntry(fingerprint=fingerprint, issues=list(issues), timestamp=self._clock())
        # Insertion order breaks timestamp ties during eviction
        self._entries.pop(fingerprint, None)
        self._entries[fingerprint] = entry
        self._drop_expired()
        self._evict_excess()
        self._persist()
        return entry

    def evict(self) -> int:
        """
        Drop expired entries, then the oldest ones beyond the size bound.

        Returns:
            Number of entries removed
        """
        before = len(self._entries)
        self._drop_expired()
        self._evict_excess()
        removed = before - len(self._entries)
        if removed:
            self._persist()
        return removed

    def _drop_expired(self) -> None:
        for fp in [fp for fp, entry in self._entries.items() if self.is_expired(entry)]:
            del self._entries[fp]

    def _evict_excess(self) -> None:
        excess = len(self._entries) - self.max_items
        if excess <= 0:
            return
        oldest = sorted(self._entries.values(), key=lambda e: e.timestamp)[:excess]
        for entry in oldest:
            del self._entries[entry.fingerprint]
        logger.debug("Evicted oldest cache entries", evicted=len(oldest))

    def remove_issue(self, fingerprint: str, issue: Issue) -> bool:
        """
        Remove one occurrence from a cached entry (after accepting it).

        Returns:
            True if the entry changed
        """
        entry = self._entries.get(fingerprint)
        if entry is None:
            return False
        remaining = [cached for cached in entry.issues if not cached.same_instance(issue)]
        if len(remaining) == len(entry.issues):
            return False
        self._entries[fingerprint] = CacheEntry(
            fingerprint=fingerprint,
            issues=remaining,
            timestamp=self._clock()
        )
        self._persist()
        return True

    def reconcile_ignored(self, ignored_keys: set) -> int:
        """
        Strip ignored issues from every cached entry.

        Only entries that actually lose an issue get a fresh timestamp, so
        running this twice in a row leaves the cache unchanged.

        Args:
            ignored_keys: Set of (token, type) pairs currently ignored

        Returns:
            Number of issues removed across all entries
        """
        removed = 0
        now = self._clock()
        for fp, entry in list(self._entries.items()):
            remaining = filter_ignored(entry.issues, ignored_keys)
            if len(remaining) != len(entry.issues):
                removed += len(entry.issues) - len(remaining)
                self._entries[fp] = CacheEntry(fingerprint=fp, issues=remaining, timestamp=now)
        if removed:
            self._persist()
            logger.info("Cache reconciled with ignore rules", removed_issues=removed)
        return removed

    def clear(self) -> int:
        """Remove everything. Returns the number of entries dropped."""
        count = len(self._entries)
        self._entries = {}
        self._persist()
        return count
