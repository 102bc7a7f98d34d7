"""
Configuration: API keys, models, cache policy, trust tiers, feeds.
A market pack (JSON) can override which trust keywords and RSS feeds
are active, so the same pipeline can be pointed at another press market.
"""

import json
import os
from pathlib import Path


def _env_flag(name):
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY", "")
FIRECRAWL_API_KEY = os.environ.get("FIRECRAWL_API_KEY", "")
FORCE_MOCK_DATA = _env_flag("FORCE_MOCK_DATA")

ARTICLES = {
    "min_count": 10,  # tiles requested per harvest
    "min_sources_per_article": 5,
}

CACHE = {
    "path": Path(os.environ.get("PRISM_CACHE_PATH", "output/article_cache.json")),
    "local_ttl_seconds": 30 * 60,
    "max_keys": 50,
    "pipeline_version": "g3-image-preview-v1",
}

TIMEOUTS = {
    "gemini_seconds": 180,
    "firecrawl_seconds": 30,
    "rate_limit_cooldown_seconds": 10 * 60,
}

API_ENDPOINTS = {
    "gemini": "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
    "firecrawl_search": "https://api.firecrawl.dev/v1/search",
    "favicon": "https://www.google.com/s2/favicons",
    "web_search": "https://www.google.com/search",
}

# Models in priority order; the caller falls through on failure.
LLM_CONFIGS = {
    "text": [
        "gemini-3-pro-preview",
        "gemini-2.5-pro",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
    ],
    "image": [
        "gemini-3-pro-image-preview",
        "gemini-2.5-flash-image",
    ],
}

# Quality tiers for the reliability score. Matched as substrings of the
# lowercased source name. Market data, not logic: override via a pack.
TRUST_KEYWORDS = {
    "high": [
        "reuters", "afp", "apnews", "bbc", "ft.com", "lemonde",
        "nytimes", "wsj", "nature.com", "science.org",
    ],
    "medium": [
        "cnn", "fox", "liberation", "figaro", "guardian", "politico", "lesechos",
    ],
}

DEFAULT_CATEGORY = "Général"

# Editorial categories and the emoji a tile falls back to
CATEGORIES = {
    "Général": "\U0001f4f0",
    "Politique": "\U0001f3db️",
    "Économie": "\U0001f4b9",
    "International": "\U0001f30d",
    "Tech & Science": "\U0001f52c",
    "Société": "\U0001f465",
    "Environnement": "\U0001f331",
    "Culture": "\U0001f3ad",
}

# (name, feed url, bias) used for discovery when Firecrawl is not configured
RSS_FEEDS = [
    # === LEFT ===
    ("lemonde.fr", "https://www.lemonde.fr/rss/une.xml", "left"),
    ("liberation.fr", "https://www.liberation.fr/arc/outboundfeeds/rss-all/?outputType=xml", "left"),
    ("theguardian.com", "https://www.theguardian.com/world/rss", "left"),
    # === CENTER ===
    ("bbc.com", "http://feeds.bbci.co.uk/news/world/rss.xml", "center"),
    ("francetvinfo.fr", "https://www.francetvinfo.fr/titres.rss", "center"),
    ("politico.eu", "https://www.politico.eu/feed/", "center"),
    ("france24.com", "https://www.france24.com/fr/rss", "center"),
    # === RIGHT ===
    ("lefigaro.fr", "https://www.lefigaro.fr/rss/figaro_actualites.xml", "right"),
    ("lesechos.fr", "https://services.lesechos.fr/rss/les-echos-monde.xml", "right"),
    ("foxnews.com", "https://moxie.foxnews.com/google-publisher/latest.xml", "right"),
]


def load_market_pack(path):
    """Load a JSON market pack that overrides trust keywords and feeds."""
    if not path or not Path(path).exists():
        return None
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def get_trust_keywords(pack=None):
    """Return the trust keyword tiers, optionally replaced by a market pack."""
    if pack and "trust_keywords" in pack:
        tiers = pack["trust_keywords"]
        return {
            "high": list(tiers.get("high", [])),
            "medium": list(tiers.get("medium", [])),
        }
    return TRUST_KEYWORDS


def get_rss_feeds(pack=None):
    """Return RSS feeds, optionally filtered by a market pack."""
    if pack and "feeds" in pack and pack["feeds"] != "all":
        allowed = set(pack["feeds"])
        return [f for f in RSS_FEEDS if f[0] in allowed]
    return RSS_FEEDS
