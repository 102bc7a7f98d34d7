"""
Data models for the pipeline. Clean interfaces between steps.

Sources and articles are immutable values: "updating" one means building a
new value with dataclasses.replace, never assigning a field in place.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Tuple


LEFT = "left"
CENTER = "center"
RIGHT = "right"
NEUTRAL = "neutral"
BIASES = (LEFT, CENTER, RIGHT, NEUTRAL)


@dataclass(frozen=True)
class CuratedSourceProfile:
    """A known outlet in the curated pool. default_summary holds a {topic} slot."""
    name: str
    bias: str
    position: int
    default_summary: str


@dataclass(frozen=True)
class Source:
    """One citation attached to a story."""
    name: str
    bias: str
    position: int
    coverage_summary: str
    url: str
    logo_url: str
    is_verified: bool  # False = synthesized to meet the floor/diversity rules

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            name=data.get("name", ""),
            bias=data.get("bias", NEUTRAL),
            position=int(data.get("position", 50)),
            coverage_summary=data.get("coverage_summary", ""),
            url=data.get("url", ""),
            logo_url=data.get("logo_url", ""),
            is_verified=bool(data.get("is_verified", False)),
        )


@dataclass(frozen=True)
class BiasAnalysis:
    """Left/center/right percentages plus the computed consensus score."""
    left: int
    center: int
    right: int
    consensus_score: int


@dataclass(frozen=True)
class Sentiment:
    positive: str
    negative: str


@dataclass(frozen=True)
class UserComment:
    id: str
    author: str
    text: str
    sentiment: str  # "positive" or "negative"
    timestamp: int  # epoch milliseconds
    likes: int = 0


@dataclass(frozen=True)
class NewsArticle:
    """A fully-populated, scored story tile, ready to render."""
    id: str
    headline: str
    summary: str
    detailed_summary: str
    importance: str
    emoji: str
    category: str
    published_at: str
    image_prompt: str
    bias_analysis: BiasAnalysis
    sources: Tuple[Source, ...] = ()
    sentiment: Optional[Sentiment] = None
    comments: Tuple[UserComment, ...] = ()
    image_url: str = ""

    @property
    def verified_sources(self):
        return [s for s in self.sources if s.is_verified]

    def to_dict(self):
        """Convert to dict for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        """Rebuild an article stored by to_dict (cache round-trip)."""
        bias = data.get("bias_analysis") or {}
        sentiment = data.get("sentiment")
        return cls(
            id=data.get("id", ""),
            headline=data.get("headline", ""),
            summary=data.get("summary", ""),
            detailed_summary=data.get("detailed_summary", ""),
            importance=data.get("importance", ""),
            emoji=data.get("emoji", ""),
            category=data.get("category", ""),
            published_at=data.get("published_at", ""),
            image_prompt=data.get("image_prompt", ""),
            image_url=data.get("image_url", ""),
            bias_analysis=BiasAnalysis(
                left=int(bias.get("left", 33)),
                center=int(bias.get("center", 34)),
                right=int(bias.get("right", 33)),
                consensus_score=int(bias.get("consensus_score", 15)),
            ),
            sources=tuple(Source.from_dict(s) for s in data.get("sources", [])),
            sentiment=Sentiment(**sentiment) if sentiment else None,
            comments=tuple(UserComment(**c) for c in data.get("comments", [])),
        )


@dataclass
class StepReport:
    """Observability for each pipeline step."""
    step_name: str
    items_in: int = 0
    items_out: int = 0
    llm_calls: int = 0
    llm_successes: int = 0
    llm_failures: int = 0
    notes: List[str] = field(default_factory=list)

    def summary(self):
        success_rate = ""
        if self.llm_calls > 0:
            pct = int(100 * self.llm_successes / self.llm_calls)
            success_rate = " ({}% success)".format(pct)
        return "{}: {} in -> {} out | {} LLM calls{}{}".format(
            self.step_name, self.items_in, self.items_out,
            self.llm_calls, success_rate,
            " | " + "; ".join(self.notes) if self.notes else "")
