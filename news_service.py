"""
News service: decide between cache and regeneration, run the harvest
(discovery > synthesis > build > artwork), and fall back to stale articles
when the harvest fails.

Collaborators are injected so the service can run against stubs; the
defaults are the real Gemini, Firecrawl/RSS and JSON-file adapters.
"""

import json
import re
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import requests

import config
import llm as llm_caller
from article_cache import ArticleCache
from config import ARTICLES, CACHE, TIMEOUTS
from errors import ParseError, PrismError, RateLimitError
from models import StepReport
from pipeline import fetch
from pipeline.articles import build_articles, sort_by_source_richness, with_image_url
from prompts import build_news_prompt, describe_task

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def build_cache_key(query=None, category=None):
    """Normalized cache key for a query or category, tied to the pipeline version."""
    if query and query.strip():
        base = "query:{}".format(query.lower().strip())
    elif category and category.strip():
        base = "category:{}".format(category.lower().strip())
    else:
        base = "general"
    return "{}|{}".format(base, CACHE["pipeline_version"])


def parse_llm_response(text):
    """Extract the raw article list from an LLM answer. Raises ParseError."""
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Empty LLM response")

    cleaned = _FENCE_RE.sub("", text).strip()
    first, last = cleaned.find("["), cleaned.rfind("]")
    candidate = cleaned[first:last + 1] if first != -1 and last > first else cleaned

    data = None
    for strict in (True, False):
        try:
            data = json.loads(candidate, strict=strict)
            break
        except json.JSONDecodeError:
            continue
    if data is None:
        raise ParseError("Could not parse LLM response as JSON")

    if isinstance(data, dict) and isinstance(data.get("articles"), list):
        data = data["articles"]
    if not isinstance(data, list):
        raise ParseError("LLM response is not an article array")
    return data


class NewsService:
    def __init__(self, cache=None, discover=None, generate_text=None, generate_image=None,
                 llm_configured=None, mock=None, clock=time.time):
        self.cache = cache or ArticleCache()
        self.discover = discover or fetch.discover
        self.generate_text = generate_text or llm_caller.generate_text
        self.generate_image = generate_image or llm_caller.generate_image
        self.llm_configured = llm_configured or llm_caller.is_configured
        self.mock = config.FORCE_MOCK_DATA if mock is None else mock
        self.clock = clock
        self.last_rate_limit_hit = None
        self.reports = []

    def in_rate_limit_cooldown(self):
        if self.last_rate_limit_hit is None:
            return False
        return self.clock() - self.last_rate_limit_hit < TIMEOUTS["rate_limit_cooldown_seconds"]

    def _stale(self, key):
        return self.cache.get(key, allow_stale=True) or self.cache.latest() or []

    def fetch_news_articles(self, query=None, category=None, force_refresh=False, with_images=False):
        """Return articles for a query/category, regenerating only when needed."""
        key = build_cache_key(query, category)
        print("\n>>> NEWS: key={} refresh={}".format(key, force_refresh))

        if self.mock:
            print("    Mock mode, serving cached articles")
            return self._stale(key)

        if not force_refresh:
            cached = self.cache.get(key)
            if cached and len(cached) >= ARTICLES["min_count"]:
                print("    Cache hit: {} articles".format(len(cached)))
                return cached

        if not self.llm_configured():
            print("    WARNING: no Gemini API key, serving cached articles")
            return self._stale(key)

        if self.in_rate_limit_cooldown():
            print("    WARNING: rate-limit cooldown active, serving stale cache")
            return self._stale(key)

        if not force_refresh:
            stale = self.cache.get(key, allow_stale=True)
            if stale:
                print("    Serving {} stale articles (use refresh to regenerate)".format(len(stale)))
                return stale

        try:
            articles = self.harvest(query, category, with_images)
        except RateLimitError as e:
            print("  ERROR: {}".format(str(e)[:100]))
            self.last_rate_limit_hit = self.clock()
            return self._stale(key)
        except (PrismError, requests.exceptions.RequestException) as e:
            print("  ERROR: harvest failed: {}".format(str(e)[:100]))
            return self._stale(key)

        self.cache.set(key, articles)
        return articles

    def harvest(self, query=None, category=None, with_images=False):
        """Full generation: discovery > synthesis > build > optional artwork."""
        discovery_report = StepReport("discovery")
        corpus = self.discover(query, category, report=discovery_report)
        if not corpus:
            discovery_report.notes.append("no corpus, LLM search only")
        self.reports.append(discovery_report)

        print("\n>>> SYNTHESIS: asking the LLM for {} tiles...".format(ARTICLES["min_count"]))
        synth_report = StepReport("synthesis", llm_calls=1)
        self.reports.append(synth_report)
        now = datetime.now()
        prompt = build_news_prompt(
            corpus,
            describe_task(ARTICLES["min_count"], query, category),
            now.strftime("%d/%m/%Y"), now.strftime("%H:%M"),
            ARTICLES["min_count"])

        result = self.generate_text(prompt)
        if not result or not result.get("text"):
            synth_report.llm_failures += 1
            raise ParseError("LLM returned no text")
        synth_report.llm_successes += 1
        synth_report.notes.append("model {}".format(result.get("model", "?")))

        raw_articles = parse_llm_response(result["text"])
        synth_report.items_out = len(raw_articles)

        print("\n>>> BUILD: {} raw articles...".format(len(raw_articles)))
        build_report = StepReport("build", items_in=len(raw_articles))
        articles = sort_by_source_richness(build_articles(raw_articles, default_category=category))
        synthesized = sum(1 for a in articles for s in a.sources if not s.is_verified)
        build_report.items_out = len(articles)
        build_report.notes.append("{} synthesized sources".format(synthesized))
        self.reports.append(build_report)
        print("    {} articles built, {} sources synthesized".format(len(articles), synthesized))

        if with_images and articles:
            articles = self.attach_images(articles)
        return articles

    def _image_for(self, article):
        try:
            return self.generate_image(article.image_prompt)
        except RateLimitError as e:
            print("    WARNING: image for {} skipped: {}".format(article.id, str(e)[:80]))
            return None

    def attach_images(self, articles):
        """Generate artwork in parallel and attach it to new article values."""
        print("\n>>> IMAGES: {} tiles...".format(len(articles)))
        report = StepReport("images", items_in=len(articles), llm_calls=len(articles))
        with ThreadPoolExecutor(max_workers=4) as executor:
            images = list(executor.map(self._image_for, articles))

        out = []
        for article, image in zip(articles, images):
            if image and image.get("data_url"):
                report.llm_successes += 1
                out.append(with_image_url(article, image["data_url"]))
            else:
                report.llm_failures += 1
                out.append(article)
        report.items_out = report.llm_successes
        self.reports.append(report)
        print("    {} images generated".format(report.llm_successes))
        return out
