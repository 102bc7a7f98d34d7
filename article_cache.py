"""
Article Cache: persistent key-value store of built articles across runs.

Stores article lists as JSON keyed by a normalized query/category key, each
entry stamped with the time it was written. Enables:
  - Cache hits: skip a full harvest while an entry is fresh
  - Stale fallback: serve the last good articles when a harvest fails

Storage: output/article_cache.json (path configurable).
"""

import json
import time
from pathlib import Path

from config import CACHE
from models import NewsArticle


def _is_entry(entry):
    if not isinstance(entry, dict):
        return False
    ts = entry.get("timestamp")
    return isinstance(ts, (int, float)) and not isinstance(ts, bool)


class ArticleCache:
    def __init__(self, path=None, ttl_seconds=None, max_keys=None):
        self.path = Path(path) if path else CACHE["path"]
        self.ttl_seconds = CACHE["local_ttl_seconds"] if ttl_seconds is None else ttl_seconds
        self.max_keys = max_keys or CACHE["max_keys"]

    def load(self):
        """Load the whole store. Returns dict with 'entries'.

        Entries that are not a dict with a numeric timestamp are dropped.
        """
        if not self.path.exists():
            return {"entries": {}}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {"entries": {}}
        if not isinstance(data, dict) or not isinstance(data.get("entries"), dict):
            return {"entries": {}}
        data["entries"] = {k: v for k, v in data["entries"].items() if _is_entry(v)}
        return data

    def get(self, key, allow_stale=False):
        """Articles stored under key, or None when missing, expired or unreadable."""
        entry = self.load()["entries"].get(key)
        if not isinstance(entry, dict) or not isinstance(entry.get("articles"), list):
            return None
        age = time.time() - entry.get("timestamp", 0)
        if not allow_stale and age > self.ttl_seconds:
            return None
        try:
            return [NewsArticle.from_dict(a) for a in entry["articles"]]
        except (KeyError, TypeError, ValueError, AttributeError):
            return None

    def set(self, key, articles):
        """Store articles under key, evicting the oldest keys beyond max_keys."""
        store = self.load()
        entries = store["entries"]
        entries[key] = {
            "timestamp": time.time(),
            "articles": [a.to_dict() for a in articles],
        }

        if len(entries) > self.max_keys:
            oldest = sorted(entries, key=lambda k: entries[k].get("timestamp", 0))
            for k in oldest[:len(entries) - self.max_keys]:
                del entries[k]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(store, indent=2, ensure_ascii=False), encoding="utf-8")

    def latest(self):
        """Most recently written article list across all keys (stale allowed)."""
        entries = self.load()["entries"]
        if not entries:
            return None
        newest = max(entries, key=lambda k: entries[k].get("timestamp", 0))
        return self.get(newest, allow_stale=True)
