"""
Articles: assemble raw per-story data (usually LLM-authored JSON) into a
complete, scored NewsArticle.

  raw -> clean text -> ensure_source_floor -> reliability + distribution
      -> seed comments -> image prompt

No LLM calls. Every field is defaulted, so partial or empty input still
yields a renderable article.
"""

import dataclasses
import time
import zlib
from collections.abc import Mapping

from config import CATEGORIES, DEFAULT_CATEGORY
from models import BiasAnalysis, NewsArticle, Sentiment, UserComment
from pipeline.enrich import ensure_source_floor
from pipeline.reliability import calculate_reliability, calculate_bias_distribution
from pipeline.textutil import (
    clean_citations,
    collapse_whitespace,
    generate_id,
    parse_relative_time_to_minutes,
)
from prompts import build_image_prompt, extract_image_subject


DEFAULT_HEADLINE = "Article sans titre"
DEFAULT_EMOJI = "\U0001f4f0"
DEFAULT_PUBLISHED_AT = "RÉCENT"
DEFAULT_IMPORTANCE = "Information clé pour comprendre l'actualité."
DEFAULT_SENTIMENT = Sentiment(positive="Point de vue positif.", negative="Point de vue critique.")
DEFAULT_IMAGE_SUBJECT = "current news event"

COMMENT_AUTHORS = {"positive": "User_Alpha", "negative": "Sceptic_X"}


def _get(raw, *keys):
    """First non-empty string among camelCase/snake_case variants."""
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def build_initial_comments(article_id, sentiment, index=0, now_ms=None):
    """One seeded comment per non-empty sentiment stance, oldest first."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if not isinstance(sentiment, Mapping):
        return ()

    comments = []
    offsets = {"positive": 60000, "negative": 30000}
    for tag in ("positive", "negative"):
        text = collapse_whitespace(sentiment.get(tag))
        if not text:
            continue
        comment_id = "c{}-{}".format(len(comments) + 1, article_id)
        comments.append(UserComment(
            id=comment_id,
            author=COMMENT_AUTHORS[tag],
            text=text,
            sentiment=tag,
            timestamp=now_ms - offsets[tag] * (index + 1),
            likes=5 + zlib.crc32(comment_id.encode("utf-8")) % 50,
        ))
    return tuple(comments)


def _image_context(detailed_summary, summary, importance):
    return collapse_whitespace("{} {}".format(detailed_summary or summary or "", importance or ""))


def _mood(emoji):
    return "Mood cue suggested by {}.".format(emoji) if emoji else ""


def build_tile_image_prompt(article):
    """Re-derive the artwork prompt of a built article (idempotent)."""
    subject = (collapse_whitespace(extract_image_subject(article.image_prompt))
               or collapse_whitespace(article.headline)
               or DEFAULT_IMAGE_SUBJECT)
    context = _image_context(article.detailed_summary, article.summary, article.importance)
    return build_image_prompt(subject, context, _mood(article.emoji))


def build_article(raw, index=0, default_category=None, now_ms=None):
    """Build one complete NewsArticle from raw, untrusted data."""
    if not isinstance(raw, Mapping):
        raw = {}

    raw_id = raw.get("id")
    article_id = collapse_whitespace(str(raw_id)) if raw_id is not None else ""
    article_id = article_id or generate_id("article")

    headline = clean_citations(_get(raw, "headline")) or DEFAULT_HEADLINE
    summary = clean_citations(_get(raw, "summary") or _get(raw, "detailedSummary", "detailed_summary"))
    detailed_summary = clean_citations(_get(raw, "detailedSummary", "detailed_summary") or summary)
    importance = clean_citations(_get(raw, "importance")) or DEFAULT_IMPORTANCE
    category = (collapse_whitespace(_get(raw, "category"))
                or collapse_whitespace(default_category)
                or DEFAULT_CATEGORY)
    emoji = collapse_whitespace(_get(raw, "emoji")) or CATEGORIES.get(category) or DEFAULT_EMOJI
    published_at = collapse_whitespace(_get(raw, "publishedAt", "published_at")) or DEFAULT_PUBLISHED_AT

    raw_sources = raw.get("sources")
    sources = ensure_source_floor(headline, summary, raw_sources if isinstance(raw_sources, list) else [])

    distribution = calculate_bias_distribution(sources)
    bias_analysis = BiasAnalysis(
        left=distribution["left"],
        center=distribution["center"],
        right=distribution["right"],
        consensus_score=calculate_reliability(sources),
    )

    raw_sentiment = raw.get("sentiment") if isinstance(raw.get("sentiment"), Mapping) else {}
    sentiment = Sentiment(
        positive=collapse_whitespace(raw_sentiment.get("positive")) or DEFAULT_SENTIMENT.positive,
        negative=collapse_whitespace(raw_sentiment.get("negative")) or DEFAULT_SENTIMENT.negative,
    )
    comments = build_initial_comments(article_id, raw_sentiment, index, now_ms)

    subject = collapse_whitespace(extract_image_subject(_get(raw, "imagePrompt", "image_prompt"))) or headline
    image_prompt = build_image_prompt(
        subject, _image_context(detailed_summary, summary, importance), _mood(emoji))

    image_url = _get(raw, "imageUrl", "image_url").strip()

    return NewsArticle(
        id=article_id,
        headline=headline,
        summary=summary,
        detailed_summary=detailed_summary,
        importance=importance,
        emoji=emoji,
        category=category,
        published_at=published_at,
        image_prompt=image_prompt,
        image_url=image_url,
        bias_analysis=bias_analysis,
        sources=tuple(sources),
        sentiment=sentiment,
        comments=comments,
    )


def build_articles(raw_list, default_category=None, now_ms=None):
    """Build every raw record with the same options. No state crosses articles."""
    if not isinstance(raw_list, (list, tuple)):
        return []
    return [build_article(raw, index=i, default_category=default_category, now_ms=now_ms)
            for i, raw in enumerate(raw_list)]


def with_image_url(article, image_url):
    return dataclasses.replace(article, image_url=image_url)


def with_image_prompt(article):
    return dataclasses.replace(article, image_prompt=build_tile_image_prompt(article))


def sort_by_source_richness(articles):
    """Most-sourced stories first; ties broken by headline."""
    return sorted(articles, key=lambda a: (-len(a.sources), a.headline or ""))


def sort_by_recency(articles):
    return sorted(articles, key=lambda a: parse_relative_time_to_minutes(a.published_at))
