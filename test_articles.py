"""Tests for article assembly, seeded comments, image prompts and sorting."""

import dataclasses

import pytest

from config import CATEGORIES
from models import NewsArticle
from pipeline.articles import (
    DEFAULT_CATEGORY,
    DEFAULT_EMOJI,
    DEFAULT_HEADLINE,
    DEFAULT_PUBLISHED_AT,
    build_article,
    build_articles,
    build_initial_comments,
    build_tile_image_prompt,
    sort_by_recency,
    sort_by_source_richness,
    with_image_prompt,
    with_image_url,
)
from pipeline.reliability import calculate_bias_distribution, calculate_reliability
from prompts import IMAGE_STYLE, extract_image_subject

NOW_MS = 1700000000000

RAW = {
    "id": "a1",
    "headline": "Sommet climat [cite: 1, 2] à Belém",
    "summary": "Les négociations  patinent.",
    "detailedSummary": "Les pays du Sud réclament des financements [cite: 3].",
    "importance": "Un accord conditionne la trajectoire 1,5 °C.",
    "emoji": "\U0001f30d",
    "category": "Environnement",
    "publishedAt": "Il y a 2h",
    "imagePrompt": "a melting globe on a negotiating table",
    "sentiment": {"positive": "Enfin un cap.", "negative": "Encore des promesses."},
    "sources": [
        {"name": "lemonde.fr", "bias": "left", "url": "https://lemonde.fr/climat"},
        {"name": "reuters.com", "bias": "center"},
        {"name": "lefigaro.fr", "bias": "right"},
    ],
}


def test_build_article_cleans_text():
    article = build_article(RAW, now_ms=NOW_MS)
    assert article.id == "a1"
    assert article.headline == "Sommet climat à Belém"
    assert article.summary == "Les négociations patinent."
    assert article.detailed_summary == "Les pays du Sud réclament des financements ."
    assert article.category == "Environnement"
    assert article.published_at == "Il y a 2h"


def test_build_article_scores_its_final_sources():
    article = build_article(RAW, now_ms=NOW_MS)
    assert len(article.sources) == 5
    assert len(article.verified_sources) == 3
    dist = calculate_bias_distribution(article.sources)
    assert article.bias_analysis.left == dist["left"]
    assert article.bias_analysis.center == dist["center"]
    assert article.bias_analysis.right == dist["right"]
    assert article.bias_analysis.consensus_score == calculate_reliability(article.sources)
    assert 15 <= article.bias_analysis.consensus_score <= 98


def test_build_article_from_nothing():
    article = build_article({}, now_ms=NOW_MS)
    assert article.id.startswith("article-")
    assert article.headline == DEFAULT_HEADLINE
    assert article.emoji == DEFAULT_EMOJI
    assert article.category == DEFAULT_CATEGORY
    assert article.published_at == DEFAULT_PUBLISHED_AT
    assert len(article.sources) == 5
    assert article.sentiment.positive
    assert article.sentiment.negative
    assert article.comments == ()
    assert article.image_prompt.startswith(IMAGE_STYLE)


@pytest.mark.parametrize("junk", [None, "text", 42, ["list"]])
def test_build_article_tolerates_non_mapping_input(junk):
    article = build_article(junk, now_ms=NOW_MS)
    assert article.headline == DEFAULT_HEADLINE


def test_default_category_applies_when_raw_has_none():
    raw = dict(RAW, category="")
    assert build_article(raw, default_category="Politique", now_ms=NOW_MS).category == "Politique"
    assert build_article(RAW, default_category="Politique", now_ms=NOW_MS).category == "Environnement"


def test_numeric_id_is_stringified():
    assert build_article(dict(RAW, id=7), now_ms=NOW_MS).id == "7"


def test_snake_case_keys_are_accepted():
    raw = {"headline": "H", "detailed_summary": "Détail.", "published_at": "Il y a 5 min"}
    article = build_article(raw, now_ms=NOW_MS)
    assert article.detailed_summary == "Détail."
    assert article.summary == "Détail."
    assert article.published_at == "Il y a 5 min"


def test_image_prompt_wraps_the_subject():
    article = build_article(RAW, now_ms=NOW_MS)
    assert article.image_prompt.startswith(IMAGE_STYLE)
    assert extract_image_subject(article.image_prompt) == "a melting globe on a negotiating table"
    assert "Les pays du Sud" in article.image_prompt


def test_image_prompt_defaults_to_headline():
    article = build_article(dict(RAW, imagePrompt=""), now_ms=NOW_MS)
    assert extract_image_subject(article.image_prompt) == "Sommet climat à Belém"


def test_image_prompt_rebuild_is_idempotent():
    article = build_article(RAW, now_ms=NOW_MS)
    once = with_image_prompt(article)
    assert once.image_prompt == article.image_prompt
    assert with_image_prompt(once) == once
    assert build_tile_image_prompt(once) == once.image_prompt


def test_with_image_url_returns_new_value():
    article = build_article(RAW, now_ms=NOW_MS)
    updated = with_image_url(article, "data:image/png;base64,AAA")
    assert updated.image_url == "data:image/png;base64,AAA"
    assert article.image_url == ""
    with pytest.raises(dataclasses.FrozenInstanceError):
        article.headline = "changed"


def test_initial_comments():
    comments = build_initial_comments("a1", RAW["sentiment"], index=1, now_ms=NOW_MS)
    assert [c.sentiment for c in comments] == ["positive", "negative"]
    assert [c.author for c in comments] == ["User_Alpha", "Sceptic_X"]
    assert [c.id for c in comments] == ["c1-a1", "c2-a1"]
    assert comments[0].timestamp == NOW_MS - 120000
    assert comments[1].timestamp == NOW_MS - 60000
    assert all(5 <= c.likes < 55 for c in comments)
    assert build_initial_comments("a1", RAW["sentiment"], index=1, now_ms=NOW_MS) == comments


def test_initial_comments_skip_empty_stances():
    comments = build_initial_comments("a1", {"positive": "", "negative": "Non."}, now_ms=NOW_MS)
    assert len(comments) == 1
    assert comments[0].sentiment == "negative"
    assert build_initial_comments("a1", None, now_ms=NOW_MS) == ()


def test_build_articles_is_per_item_and_tolerant():
    articles = build_articles([RAW, None, {"headline": "B"}], now_ms=NOW_MS)
    assert [a.headline for a in articles] == ["Sommet climat à Belém", DEFAULT_HEADLINE, "B"]
    assert build_articles("not a list") == []
    assert build_articles(None) == []


def test_article_dict_round_trip():
    article = build_article(RAW, now_ms=NOW_MS)
    assert NewsArticle.from_dict(article.to_dict()) == article


def _with(article, **changes):
    return dataclasses.replace(article, **changes)


def test_sort_by_source_richness():
    base = build_article({"headline": "base"}, now_ms=NOW_MS)
    a = _with(base, headline="B", sources=base.sources[:2])
    b = _with(base, headline="A", sources=base.sources)
    c = _with(base, headline="C", sources=base.sources[:2])
    assert [x.headline for x in sort_by_source_richness([a, c, b])] == ["A", "B", "C"]


def test_sort_by_recency():
    base = build_article({"headline": "base"}, now_ms=NOW_MS)
    items = [
        _with(base, headline="unknown", published_at="hier soir"),
        _with(base, headline="2 days", published_at="Il y a 2 jours"),
        _with(base, headline="live", published_at="EN DIRECT"),
        _with(base, headline="10 min", published_at="Il y a 10 min"),
        _with(base, headline="3 h", published_at="Il y a 3h"),
    ]
    assert [x.headline for x in sort_by_recency(items)] == [
        "live", "10 min", "3 h", "2 days", "unknown"]


def test_framed_image_prompt_is_not_wrapped_twice():
    first = build_article({"headline": "X"}, now_ms=NOW_MS)
    again = build_article({"headline": "X", "imagePrompt": first.image_prompt}, now_ms=NOW_MS)
    assert again.image_prompt == first.image_prompt
    assert again.image_prompt.count(IMAGE_STYLE) == 1


def test_emoji_falls_back_to_the_category():
    article = build_article({"headline": "H", "category": "Politique"}, now_ms=NOW_MS)
    assert article.emoji == CATEGORIES["Politique"]
    assert build_article({"headline": "H", "category": "Sport"}, now_ms=NOW_MS).emoji == DEFAULT_EMOJI
