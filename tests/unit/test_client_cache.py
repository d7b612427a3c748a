"""
Unit tests for the client result cache.
"""
import json

from proofline.client.cache import ClientResultCache, JsonFileStore, MemoryStore, filter_ignored
from proofline.schemas.correction import Issue

DAY_MS = 24 * 60 * 60 * 1000


def _issue(token, offset=0, issue_type="spelling"):
    return Issue(offset=offset, token=token, type=issue_type, suggestions=[token.upper()])


class TestClientResultCache:
    """Tests for ClientResultCache."""

    def test_put_and_get(self, memory_cache):
        """Test a stored entry is returned while fresh."""
        memory_cache.put("abc12345", [_issue("teh")])

        entry = memory_cache.get("abc12345")
        assert entry is not None
        assert [i.token for i in entry.issues] == ["teh"]

    def test_entry_expires_after_ttl(self, memory_cache, ms_clock):
        """Test entries older than 24h are misses and get removed."""
        memory_cache.put("abc12345", [_issue("teh")])

        ms_clock.advance(DAY_MS - 1)
        assert memory_cache.get("abc12345") is not None

        ms_clock.advance(1)
        assert memory_cache.get("abc12345") is None
        assert "abc12345" not in memory_cache

    def test_size_bound_evicts_oldest(self, ms_clock):
        """Test the cache never holds more than max_items entries."""
        cache = ClientResultCache(store=MemoryStore(), ttl_ms=DAY_MS, max_items=50, clock=ms_clock)
        for i in range(51):
            cache.put(f"fp{i:06d}", [])
            ms_clock.advance(1000)

        assert len(cache) == 50
        assert "fp000000" not in cache
        assert "fp000050" in cache

    def test_evict_drops_expired_entries(self, memory_cache, ms_clock):
        """Test evict() removes stale entries in one pass."""
        memory_cache.put("old", [])
        memory_cache.put("older", [])
        ms_clock.advance(DAY_MS)

        assert memory_cache.evict() == 2
        assert len(memory_cache) == 0

    def test_put_drops_expired_entries(self, memory_cache, ms_clock):
        """Test no entry at or past the TTL survives a put."""
        memory_cache.put("old", [_issue("teh")])
        ms_clock.advance(DAY_MS + 1)
        memory_cache.put("new", [])

        assert memory_cache.fingerprints() == ["new"]
        assert memory_cache.store.data.keys() == {"new"}
        assert memory_cache.evict() == 0

    def test_reconcile_removes_ignored_issues(self, memory_cache):
        """Test ignored (token, type) pairs disappear from every entry."""
        memory_cache.put("one", [_issue("teh", 0), _issue("cat", 4)])
        memory_cache.put("two", [_issue("teh", 8, "spelling"), _issue("teh", 9, "grammar")])

        removed = memory_cache.reconcile_ignored({("teh", "spelling")})

        assert removed == 2
        assert [i.token for i in memory_cache.get("one").issues] == ["cat"]
        assert [i.type for i in memory_cache.get("two").issues] == ["grammar"]

    def test_reconcile_is_idempotent(self, memory_cache, ms_clock):
        """Test a second reconcile changes nothing, timestamps included."""
        memory_cache.put("one", [_issue("teh"), _issue("cat", 4)])
        memory_cache.reconcile_ignored({("teh", "spelling")})
        snapshot = memory_cache.store.data
        writes = memory_cache.store.writes

        ms_clock.advance(5000)
        assert memory_cache.reconcile_ignored({("teh", "spelling")}) == 0
        assert memory_cache.store.data == snapshot
        assert memory_cache.store.writes == writes

    def test_remove_issue_only_touches_that_occurrence(self, memory_cache):
        """Test accepting one occurrence keeps others with the same token."""
        memory_cache.put("fp", [_issue("teh", 0), _issue("teh", 20)])

        assert memory_cache.remove_issue("fp", _issue("teh", 0)) is True
        assert [i.offset for i in memory_cache.get("fp").issues] == [20]
        assert memory_cache.remove_issue("fp", _issue("teh", 0)) is False

    def test_every_mutation_is_persisted(self, memory_cache):
        """Test put, remove and clear each write the store."""
        memory_cache.put("fp", [_issue("teh")])
        memory_cache.remove_issue("fp", _issue("teh"))
        memory_cache.clear()

        assert memory_cache.store.writes == 3
        assert memory_cache.store.data == {}

    def test_clear_returns_count(self, memory_cache):
        """Test clear() drops everything."""
        memory_cache.put("a", [])
        memory_cache.put("b", [])
        assert memory_cache.clear() == 2
        assert len(memory_cache) == 0


class TestJsonFileStore:
    """Tests for on-disk persistence."""

    def test_survives_restart(self, tmp_path, ms_clock):
        """Test a new cache instance sees entries written by the previous one."""
        path = tmp_path / "cache" / "spellcheck_cache.json"
        cache = ClientResultCache(store=JsonFileStore(str(path)), ttl_ms=DAY_MS, max_items=50, clock=ms_clock)
        cache.put("fp", [Issue(offset=3, token="teh", suggestions=["the"], editId="e-1")])

        reloaded = ClientResultCache(store=JsonFileStore(str(path)), ttl_ms=DAY_MS, max_items=50, clock=ms_clock)
        entry = reloaded.get("fp")
        assert entry.issues[0].edit_id == "e-1"

        on_disk = json.loads(path.read_text(encoding="utf-8"))
        assert on_disk["spellcheck_cache"]["fp"]["issues"][0]["editId"] == "e-1"

    def test_corrupt_file_starts_empty(self, tmp_path, ms_clock):
        """Test unreadable JSON is treated as an empty cache."""
        path = tmp_path / "spellcheck_cache.json"
        path.write_text("{not json", encoding="utf-8")

        cache = ClientResultCache(store=JsonFileStore(str(path)), ttl_ms=DAY_MS, max_items=50, clock=ms_clock)
        assert len(cache) == 0

    def test_malformed_entries_are_dropped(self, tmp_path, ms_clock):
        """Test one bad entry does not discard the others."""
        path = tmp_path / "spellcheck_cache.json"
        path.write_text(json.dumps({"spellcheck_cache": {
            "good": {"fingerprint": "good", "issues": [], "timestamp": ms_clock.now},
            "bad": {"fingerprint": "bad", "issues": "nope"},
        }}), encoding="utf-8")

        cache = ClientResultCache(store=JsonFileStore(str(path)), ttl_ms=DAY_MS, max_items=50, clock=ms_clock)
        assert cache.fingerprints() == ["good"]


def test_filter_ignored():
    """Test filtering keeps issues whose key is not ignored."""
    issues = [_issue("teh"), _issue("teh", issue_type="grammar"), _issue("cat")]
    kept = filter_ignored(issues, {("teh", "spelling")})
    assert [(i.token, i.type) for i in kept] == [("teh", "grammar"), ("cat", "spelling")]
