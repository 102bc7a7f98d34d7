"""Tests for the JSON-file article cache."""

import json

import article_cache
from article_cache import ArticleCache
from pipeline.articles import build_article

NOW_MS = 1700000000000


def make_articles(n, prefix="story"):
    return [build_article({"id": "{}-{}".format(prefix, i), "headline": "{} {}".format(prefix, i)},
                          now_ms=NOW_MS) for i in range(n)]


def test_missing_file_is_empty(tmp_path):
    cache = ArticleCache(path=tmp_path / "cache.json")
    assert cache.get("general") is None
    assert cache.latest() is None


def test_round_trip(tmp_path):
    cache = ArticleCache(path=tmp_path / "cache.json")
    articles = make_articles(3)
    cache.set("general", articles)
    assert cache.get("general") == articles


def test_expired_entries_need_allow_stale(tmp_path, monkeypatch):
    cache = ArticleCache(path=tmp_path / "cache.json", ttl_seconds=60)
    monkeypatch.setattr(article_cache.time, "time", lambda: 1000.0)
    cache.set("general", make_articles(1))

    monkeypatch.setattr(article_cache.time, "time", lambda: 1030.0)
    assert cache.get("general") is not None

    monkeypatch.setattr(article_cache.time, "time", lambda: 2000.0)
    assert cache.get("general") is None
    assert len(cache.get("general", allow_stale=True)) == 1


def test_oldest_keys_are_evicted(tmp_path, monkeypatch):
    cache = ArticleCache(path=tmp_path / "cache.json", max_keys=2)
    for i, key in enumerate(["a", "b", "c"]):
        monkeypatch.setattr(article_cache.time, "time", lambda i=i: 1000.0 + i)
        cache.set(key, make_articles(1, key))
    entries = cache.load()["entries"]
    assert sorted(entries) == ["b", "c"]


def test_latest_returns_newest_entry(tmp_path, monkeypatch):
    cache = ArticleCache(path=tmp_path / "cache.json")
    monkeypatch.setattr(article_cache.time, "time", lambda: 1000.0)
    cache.set("old", make_articles(1, "old"))
    monkeypatch.setattr(article_cache.time, "time", lambda: 5000.0)
    cache.set("new", make_articles(2, "new"))
    monkeypatch.setattr(article_cache.time, "time", lambda: 99999.0)
    assert [a.id for a in cache.latest()] == ["new-0", "new-1"]


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    cache = ArticleCache(path=path)
    assert cache.get("general") is None
    cache.set("general", make_articles(1))
    assert len(cache.get("general")) == 1


def test_malformed_entry_is_a_miss(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"entries": {
        "general": {"timestamp": 9e12, "articles": [{"sources": "nope"}]},
        "other": {"timestamp": 9e12, "articles": "nope"},
    }}), encoding="utf-8")
    cache = ArticleCache(path=path)
    assert cache.get("general") is None
    assert cache.get("other") is None


def test_bad_timestamp_is_a_miss(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"entries": {
        "k": {"timestamp": "yesterday", "articles": []},
        "flag": {"timestamp": True, "articles": []},
    }}), encoding="utf-8")
    cache = ArticleCache(path=path)
    assert cache.get("k") is None
    assert cache.get("k", allow_stale=True) is None
    assert cache.get("flag") is None
    assert cache.latest() is None


def test_non_dict_entries_are_ignored(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"entries": {"k": ["junk"], "n": 3}}), encoding="utf-8")
    cache = ArticleCache(path=path, max_keys=1)
    assert cache.latest() is None

    cache.set("general", make_articles(1))
    assert list(cache.load()["entries"]) == ["general"]
    assert len(cache.latest()) == 1
