"""
Text and URL helpers shared by the enrichment steps.
No I/O, no state.
"""

import re
import time
import uuid
from urllib.parse import urlencode, urlparse

from config import API_ENDPOINTS


_CITATION_RE = re.compile(r"\[cite:\s*[^\]]*\]", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(value):
    """Collapse runs of whitespace and trim. Non-strings become ''."""
    if not isinstance(value, str):
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def clean_citations(text):
    """Strip [cite: ...] annotations left by grounded LLM output."""
    if not isinstance(text, str):
        return ""
    return collapse_whitespace(_CITATION_RE.sub("", text))


def normalize_source_name(name):
    return collapse_whitespace(name).lower()


def truncate(text, max_length, suffix="..."):
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)].rstrip() + suffix


def generate_id(prefix="prism"):
    return "{}-{}-{}".format(prefix, int(time.time() * 1000), uuid.uuid4().hex[:8])


def extract_domain(url):
    """Hostname without 'www.'; returns the input unchanged if it is not a URL."""
    host = urlparse(url).netloc if "://" in url else ""
    if not host:
        return url
    host = host.lower().split(":")[0]
    if host.startswith("www."):
        host = host[4:]
    return host


def is_absolute_url(value):
    if not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def create_logo_url(raw_name):
    """Favicon-service URL for a source name or domain."""
    normalized = _WHITESPACE_RE.sub("", raw_name or "").lower()
    if "://" in normalized:
        normalized = extract_domain(normalized)
    if normalized.startswith("www."):
        normalized = normalized[4:]
    if not normalized:
        normalized = "reuters.com"
    domain = normalized if "." in normalized else normalized + ".com"
    return "{}?{}".format(API_ENDPOINTS["favicon"], urlencode({"domain": domain, "sz": 128}))


def create_search_url(headline, source_name):
    """Web-search link used when no direct article URL is known."""
    query = collapse_whitespace("{} {}".format(headline or "", source_name or ""))
    return "{}?{}".format(API_ENDPOINTS["web_search"], urlencode({"q": query}))


def parse_relative_time_to_minutes(published_at):
    """Turn 'Il y a 2h' style labels into minutes; unknown sorts last."""
    if not isinstance(published_at, str) or not published_at.strip():
        return float("inf")
    text = published_at.lower().strip()

    if "direct" in text or "live" in text:
        return 0

    m = re.search(r"(\d+)\s*min", text)
    if m:
        return int(m.group(1))
    m = re.search(r"(\d+)\s*h", text)
    if m:
        return int(m.group(1)) * 60
    m = re.search(r"(\d+)\s*jour", text)
    if m:
        return int(m.group(1)) * 60 * 24

    if "récent" in text or "recent" in text:
        return 30
    return float("inf")
