"""
Reliability: a quantified consensus score computed from a story's sources.
No LLM calls: the score is derived after the fact, never generated.

Three pillars, summed then clamped to [15, 98]:
  1. Volume (30 pts): 4 pts per source beyond the second.
  2. Diversity (30 pts): full spectrum 30, two groups 20, echo chamber 5.
  3. Quality (40 pts): 8 per high-trust outlet, 4 per medium, 1 otherwise.
Scores therefore never reach 0 or 100.
"""

from collections.abc import Mapping

from config import TRUST_KEYWORDS
from models import LEFT, CENTER, RIGHT, NEUTRAL


SCORE_FLOOR = 15
SCORE_CEILING = 98
EMPTY_DISTRIBUTION = {"left": 33, "center": 34, "right": 33}
BALANCE_THRESHOLD = 60


def _field(source, key):
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def _bias(source):
    bias = _field(source, "bias")
    return bias if bias in (LEFT, CENTER, RIGHT, NEUTRAL) else NEUTRAL


def volume_points(count):
    return min(30, max(0, (count - 2) * 4))


def diversity_points(biases):
    groups = {
        LEFT if b == LEFT else RIGHT if b == RIGHT else CENTER
        for b in biases
    }
    if len(groups) == 3:
        return 30
    if len(groups) == 2:
        return 20
    return 5  # echo chamber


def quality_points(names, trust_keywords=None):
    tiers = trust_keywords or TRUST_KEYWORDS
    high = tiers.get("high", [])
    medium = tiers.get("medium", [])
    total = 0
    for name in names:
        name = name.lower()
        if any(k in name for k in high):
            total += 8
        elif any(k in name for k in medium):
            total += 4
        else:
            total += 1
    return min(40, total)


def calculate_reliability(sources, trust_keywords=None):
    """Score a source set between SCORE_FLOOR and SCORE_CEILING."""
    sources = list(sources or [])
    names = [str(_field(s, "name") or "") for s in sources]
    score = (volume_points(len(sources))
             + diversity_points([_bias(s) for s in sources])
             + quality_points(names, trust_keywords))
    return min(SCORE_CEILING, max(SCORE_FLOOR, int(round(score))))


def _percent(count, total):
    # Half-up, so an exact .5 share never rounds down
    return int(count * 100.0 / total + 0.5)


def calculate_bias_distribution(sources):
    """Left/center/right shares in percent; neutral is folded into center."""
    sources = list(sources or [])
    if not sources:
        return dict(EMPTY_DISTRIBUTION)

    counts = {"left": 0, "center": 0, "right": 0}
    for s in sources:
        bias = _bias(s)
        if bias == LEFT:
            counts["left"] += 1
        elif bias == RIGHT:
            counts["right"] += 1
        else:
            counts["center"] += 1

    total = len(sources)
    return {k: _percent(v, total) for k, v in counts.items()}


def is_balanced(sources):
    """True when no bias bucket exceeds 60% of the sources."""
    distribution = calculate_bias_distribution(sources)
    return all(share <= BALANCE_THRESHOLD for share in distribution.values())
