#!/usr/bin/env python3
"""
PRISM Briefing Runner
=====================
Orchestrates: Cache check > Discovery > Synthesis > Build (sources, scores)
> Artwork > Cache write

Usage:
  python runner.py                              # General briefing (cache first)
  python runner.py --category Politique --refresh
  python runner.py --query "réforme des retraites" --images
  python runner.py --pack packs/belgium.json    # Market-specific trust tiers/feeds
"""

import argparse
import json
import sys
import time
from pathlib import Path

import config
import llm as llm_caller
from news_service import NewsService
from pipeline import fetch


def print_article(i, article):
    ba = article.bias_analysis
    verified = len(article.verified_sources)
    print("\n{:>2}. {} {}".format(i, article.emoji, article.headline[:90]))
    print("    [{}] {} | fiabilité {} | G {}% C {}% D {}%".format(
        article.category, article.published_at, ba.consensus_score, ba.left, ba.center, ba.right))
    print("    {} sources ({} verified): {}".format(
        len(article.sources), verified, ", ".join(s.name for s in article.sources)))


def main():
    parser = argparse.ArgumentParser(description="PRISM news briefing")
    parser.add_argument("--query", default=None, help="Free-text search")
    parser.add_argument("--category", default=None, help="Editorial category")
    parser.add_argument("--refresh", action="store_true", help="Ignore cache and regenerate")
    parser.add_argument("--images", action="store_true", help="Generate tile artwork")
    parser.add_argument("--pack", default=None, help="Path to market pack JSON")
    parser.add_argument("--out", default="output/articles.json", help="Where to write the articles")
    args = parser.parse_args()

    start_time = time.time()
    print("=" * 70)
    print("PRISM BRIEFING")
    print("=" * 70)

    pack = config.load_market_pack(args.pack)
    if pack:
        print("Market pack: {}".format(pack.get("name", args.pack)))
        # Packs swap market data in place; the pipeline reads these at call time
        tiers = dict(config.get_trust_keywords(pack))
        config.TRUST_KEYWORDS.clear()
        config.TRUST_KEYWORDS.update(tiers)
        config.RSS_FEEDS[:] = config.get_rss_feeds(pack)

    print("Gemini: {} | Firecrawl: {}".format(
        "configured" if llm_caller.is_configured() else "missing",
        "configured" if fetch.is_firecrawl_configured() else "missing (RSS fallback)"))

    service = NewsService()
    articles = service.fetch_news_articles(
        query=args.query, category=args.category,
        force_refresh=args.refresh, with_images=args.images)

    if not articles:
        print("\nNo articles available")
        sys.exit(1)

    for i, article in enumerate(articles, 1):
        print_article(i, article)

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        json.dumps([a.to_dict() for a in articles], indent=2, ensure_ascii=False),
        encoding="utf-8")
    print("\nArticles: {}".format(out_path))

    run_time = int(time.time() - start_time)
    print("\n" + "=" * 70)
    print("RUN REPORT")
    print("=" * 70)
    for r in service.reports:
        print("  " + r.summary())
    print("  Total runtime: {}s".format(run_time))
    print("=" * 70)


if __name__ == "__main__":
    main()
