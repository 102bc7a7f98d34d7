"""
Enrich: Turn the loose source mentions an LLM or a scrape returns into
fully-specified Source records, and guarantee every story a floor of
sources spanning the political spectrum.
No LLM calls, pure data computation. Never raises on malformed input.

Floor-filling samples from the curated pool deterministically: within a
bias group, candidates are scanned starting at an offset derived from the
headline, so two stories get different outlets but the same story always
gets the same ones.
"""

import zlib
from collections.abc import Mapping

from config import ARTICLES
from models import Source, LEFT, CENTER, RIGHT, NEUTRAL, BIASES
from pipeline.source_pool import (
    BIAS_ROTATION_ORDER,
    find_known_source_profile,
    get_sources_by_bias,
    default_position,
)
from pipeline.textutil import (
    collapse_whitespace,
    create_logo_url,
    create_search_url,
    is_absolute_url,
    normalize_source_name,
    truncate,
)


MIN_SOURCES_PER_ARTICLE = ARTICLES["min_sources_per_article"]
UNKNOWN_SOURCE_NAME = "Source non identifiée"

# Diversity groups: neutral counts as center
_GROUP_OF_BIAS = {LEFT: LEFT, RIGHT: RIGHT, CENTER: CENTER, NEUTRAL: CENTER}
_POOLS_FOR_GROUP = {LEFT: (LEFT,), RIGHT: (RIGHT,), CENTER: (CENTER, NEUTRAL)}
_GROUP_ORDER = (LEFT, RIGHT, CENTER)

_SNIPPET_LENGTH = 140


def sanitize_bias(raw):
    """Map loose English/French bias labels onto a canonical bias."""
    if not isinstance(raw, str) or not raw.strip():
        return NEUTRAL
    lower = raw.lower()
    if "left" in lower or "gauche" in lower:
        return LEFT
    if "right" in lower or "droite" in lower:
        return RIGHT
    if "center" in lower or "centre" in lower or "neutral" in lower:
        return CENTER
    return NEUTRAL


def enrich_coverage_summary(summary, source_name, headline, fallback_summary=""):
    """Keep a real coverage summary, or write one from the story itself."""
    cleaned = collapse_whitespace(summary)
    if cleaned:
        return cleaned
    topic = collapse_whitespace(fallback_summary) or collapse_whitespace(headline) or "ce sujet"
    return "Analyse complémentaire proposée par {} sur {}".format(
        source_name, _as_sentence(truncate(topic, _SNIPPET_LENGTH)))


def _as_sentence(text):
    return text if text.endswith((".", "!", "?", "...")) else text + "."


def _read(raw, *keys):
    """Read the first present key from a mapping or attribute from an object."""
    for key in keys:
        if isinstance(raw, Mapping):
            value = raw.get(key)
        else:
            value = getattr(raw, key, None)
        if value is not None:
            return value
    return None


def hydrate_raw_source(raw, headline, summary, is_verified=True):
    """Build a complete Source from a partial, untrusted mention.

    Known outlets get their curated bias and position whatever the raw input
    claims. The logo is always re-derived from the name; a raw logo URL is
    ignored. Without a usable article URL, a web-search link is generated.
    """
    if isinstance(raw, str):
        raw = {"name": raw}
    name = collapse_whitespace(_read(raw, "name")) or UNKNOWN_SOURCE_NAME

    profile = find_known_source_profile(name)
    if profile:
        bias = profile.bias
        position = profile.position
    else:
        raw_bias = _read(raw, "bias")
        # A built Source already carries a canonical bias; keep neutral as neutral
        bias = raw_bias if isinstance(raw, Source) and raw_bias in BIASES else sanitize_bias(raw_bias)
        position = default_position(bias)

    url = _read(raw, "url")
    if not is_absolute_url(url):
        url = create_search_url(headline, name)

    return Source(
        name=name,
        bias=bias,
        position=position,
        coverage_summary=enrich_coverage_summary(
            _read(raw, "coverage_summary", "coverageSummary"), name, headline, summary),
        url=url.strip(),
        logo_url=create_logo_url(name),
        is_verified=is_verified,
    )


def _synthesize_source(profile, headline, summary):
    topic = truncate(collapse_whitespace(summary) or collapse_whitespace(headline) or "ce sujet",
                     _SNIPPET_LENGTH)
    return Source(
        name=profile.name,
        bias=profile.bias,
        position=profile.position,
        coverage_summary=profile.default_summary.replace("{topic}", topic),
        url=create_search_url(headline, profile.name),
        logo_url=create_logo_url(profile.name),
        is_verified=False,
    )


def dedupe_sources(sources):
    """Drop repeated names (case-insensitive). First occurrence wins, order kept."""
    seen = set()
    out = []
    for s in sources:
        key = normalize_source_name(s.name)
        if key in seen:
            continue
        seen.add(key)
        out.append(s)
    return out


def _was_synthesized(raw):
    # Sources from a previous floor-filling pass stay synthetic
    return isinstance(raw, Source) and not raw.is_verified


def _identity_keys(source):
    keys = {normalize_source_name(source.name)}
    profile = find_known_source_profile(source.name)
    if profile:
        keys.add(profile.name.lower())
    return keys


def _pick_candidate(bias, used, offset):
    candidates = get_sources_by_bias(bias)
    if not candidates:
        return None
    start = offset % len(candidates)
    for profile in candidates[start:] + candidates[:start]:
        if profile.name.lower() not in used:
            return profile
    return None


def _pick_for_group(group, used, offset):
    for bias in _POOLS_FOR_GROUP[group]:
        profile = _pick_candidate(bias, used, offset)
        if profile:
            return profile
    return None


def ensure_source_floor(headline, summary, sources):
    """Hydrate, dedupe, back-fill missing bias groups, then pad to the floor.

    Inputs are marked verified; every addition is marked unverified. Running
    this on its own output changes nothing.
    """
    headline = collapse_whitespace(headline)
    summary = collapse_whitespace(summary)
    if not isinstance(sources, (list, tuple)):
        sources = []

    hydrated = [
        hydrate_raw_source(raw, headline, summary, is_verified=not _was_synthesized(raw))
        for raw in sources
        if raw is not None
    ]
    result = dedupe_sources(hydrated)

    used = set()
    for s in result:
        used |= _identity_keys(s)

    offset = zlib.crc32(headline.encode("utf-8"))

    def add(profile):
        result.append(_synthesize_source(profile, headline, summary))
        used.add(profile.name.lower())

    # Back-fill each bias group that is entirely absent
    present = {_GROUP_OF_BIAS.get(s.bias, CENTER) for s in result}
    for group in _GROUP_ORDER:
        if group in present:
            continue
        profile = _pick_for_group(group, used, offset)
        if profile:
            add(profile)

    # Pad to the floor, rotating across biases
    while len(result) < MIN_SOURCES_PER_ARTICLE:
        added = False
        for bias in BIAS_ROTATION_ORDER:
            if len(result) >= MIN_SOURCES_PER_ARTICLE:
                break
            profile = _pick_candidate(bias, used, offset)
            if profile:
                add(profile)
                added = True
        if not added:
            break  # pool exhausted

    return result
