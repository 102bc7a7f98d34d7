"""
Step 1: Discovery. Gathers a raw markdown corpus for the synthesis prompt.

Firecrawl web search runs one query per "vector" (headlines, politics,
economy, tech/science, society) in parallel. Without a Firecrawl key, the
curated RSS feeds are read with feedparser instead. Either way the result
is one concatenated corpus, or None when nothing was found.
"""

import re
from concurrent.futures import ThreadPoolExecutor

import feedparser
import requests

import config
from config import API_ENDPOINTS, DEFAULT_CATEGORY, TIMEOUTS, get_rss_feeds
from errors import DiscoveryError
from pipeline.textutil import extract_domain


SNIPPET_CHARS = 1200
RSS_ENTRIES_PER_FEED = 15

SEARCH_VECTORS = [
    # (name, query suffix when searching a query, default query for the category)
    ("HEADLINES", "news facts", "breaking news headlines {context} today"),
    ("POLITICS", "political analysis", "political analysis opinion editorials {context}"),
    ("ECONOMY", "market trends", "financial markets business economy {context}"),
    ("TECH_SCI", "technology science", "technology science innovation {context}"),
    ("SOCIETY", "social issues", "social issues environment culture {context}"),
]


def is_firecrawl_configured():
    return bool(config.FIRECRAWL_API_KEY)


def build_search_vectors(query=None, category=None):
    """Return [(vector_name, search_query)] for a query or a category."""
    context = "in {}".format(category) if category and category != DEFAULT_CATEGORY else "world news"
    vectors = []
    for name, suffix, default in SEARCH_VECTORS:
        if query:
            vectors.append((name, "{} {}".format(query, suffix)))
        else:
            vectors.append((name, default.format(context=context)))
    return vectors


def execute_search(search_query, limit=20):
    """Run one Firecrawl search. Raises DiscoveryError on any failure."""
    if not is_firecrawl_configured():
        raise DiscoveryError("Firecrawl API key not configured")
    try:
        resp = requests.post(
            API_ENDPOINTS["firecrawl_search"],
            headers={"Authorization": "Bearer " + config.FIRECRAWL_API_KEY,
                     "Content-Type": "application/json"},
            json={
                "query": search_query,
                "limit": limit,
                "scrapeOptions": {"formats": ["markdown"], "onlyMainContent": True},
            },
            timeout=TIMEOUTS["firecrawl_seconds"],
        )
        resp.raise_for_status()
        data = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise DiscoveryError("Firecrawl search failed for '{}': {}".format(search_query, e)) from e

    if not data.get("success"):
        raise DiscoveryError(data.get("error") or "Firecrawl error")
    return data.get("data") or []


def _search_vector(vector):
    name, search_query = vector
    try:
        return name, execute_search(search_query)
    except DiscoveryError as e:
        # A failed vector contributes no items
        print("    WARNING: vector {} failed: {}".format(name, str(e)[:100]))
        return name, []


def format_corpus(results):
    """Concatenate [(vector, items)] into the markdown corpus fed to the LLM."""
    sections = []
    for vector, items in results:
        if not items:
            continue
        blocks = []
        for idx, item in enumerate(items):
            url = item.get("url", "")
            markdown = item.get("markdown") or ""
            snippet = re.sub(r"\n+", " ", markdown[:SNIPPET_CHARS]) if markdown else "No content."
            blocks.append("[SOURCE_REF: {}_{}]\nTITLE: {}\nURL: {}\nSOURCE: {}\nCONTENT_SNIPPET:\n{}\n".format(
                vector, idx + 1, item.get("title", ""), url, extract_domain(url), snippet))
        sections.append("### SECTOR {} ###\n{}".format(vector, "\n".join(blocks)))
    return "\n\n".join(sections)


def discover_web(query=None, category=None, report=None):
    """Parallel Firecrawl discovery across all vectors."""
    vectors = build_search_vectors(query, category)
    with ThreadPoolExecutor(max_workers=len(vectors)) as executor:
        results = list(executor.map(_search_vector, vectors))

    total = sum(len(items) for _, items in results)
    if report is not None:
        report.items_in = len(vectors)
        report.items_out = total
    if total == 0:
        print("    No web results")
        return None
    print("    {} web results across {} vectors".format(total, len(vectors)))
    return format_corpus(results)


def fetch_single_feed(name, url, bias):
    """Read one RSS feed into Firecrawl-shaped items. Failures yield []."""
    items = []
    try:
        feed = feedparser.parse(url, request_headers={"User-Agent": "PrismBriefing/1.0"})
    except Exception as e:
        print("    WARNING: feed {} failed: {}".format(name, str(e)[:100]))
        return items
    if feed.bozo and not feed.entries:
        return items
    for entry in feed.entries[:RSS_ENTRIES_PER_FEED]:
        title = (entry.get("title") or "").strip()
        link = (entry.get("link") or "").strip()
        if not title or not link:
            continue
        summary = entry.get("summary", entry.get("description", "")) or ""
        summary = re.sub(r"<[^>]+>", "", summary)
        items.append({
            "title": title,
            "url": link,
            "markdown": "{} ({}, {})".format(summary, name, bias),
        })
    return items


def _matches_query(item, words):
    text = "{} {}".format(item.get("title", ""), item.get("markdown", "")).lower()
    return any(w in text for w in words)


def discover_rss(query=None, feeds=None, report=None):
    """Fallback discovery from curated RSS feeds, filtered by query words."""
    feeds = feeds if feeds is not None else get_rss_feeds()
    with ThreadPoolExecutor(max_workers=max(1, min(20, len(feeds)))) as executor:
        per_feed = list(executor.map(lambda f: fetch_single_feed(*f), feeds))

    # Deduplicate by URL
    seen = set()
    items = []
    for feed_items in per_feed:
        for item in feed_items:
            if item["url"] not in seen:
                seen.add(item["url"])
                items.append(item)

    if query:
        words = [w for w in query.lower().split() if len(w) >= 3]
        if words:
            items = [it for it in items if _matches_query(it, words)]

    if report is not None:
        report.items_in = len(feeds)
        report.items_out = len(items)
    if not items:
        print("    No RSS entries")
        return None
    print("    {} RSS entries from {} feeds".format(len(items), len(feeds)))
    return format_corpus([("RSS", items)])


def discover(query=None, category=None, report=None):
    """Return a markdown corpus for the query/category, or None."""
    print("\n>>> DISCOVERY: query={!r} category={!r}".format(query, category))
    if is_firecrawl_configured():
        return discover_web(query, category, report)
    print("    Firecrawl not configured, reading RSS feeds")
    return discover_rss(query, report=report)
