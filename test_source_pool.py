"""Tests for the curated source pool and profile lookup."""

import pytest

from errors import PoolIntegrityError
from models import BIASES, CuratedSourceProfile
from pipeline.source_pool import (
    CURATED_SOURCE_POOL,
    check_pool_integrity,
    default_position,
    find_known_source_profile,
    get_sources_by_bias,
)


def test_every_bias_bucket_is_populated():
    for bias in BIASES:
        assert get_sources_by_bias(bias)


def test_positions_agree_with_bias():
    for profile in get_sources_by_bias("left"):
        assert profile.position < 50
    for profile in get_sources_by_bias("right"):
        assert profile.position > 50
    for bias in BIASES:
        for profile in get_sources_by_bias(bias):
            assert profile.bias == bias
            assert 0 <= profile.position <= 100
            assert "{topic}" in profile.default_summary


def test_unknown_bias_gives_empty_list():
    assert get_sources_by_bias("far-out") == []


def test_get_sources_by_bias_returns_a_copy():
    profiles = get_sources_by_bias("left")
    profiles.clear()
    assert get_sources_by_bias("left")


@pytest.mark.parametrize("raw,expected", [
    ("lemonde.fr", "lemonde.fr"),
    ("  LeMonde.fr ", "lemonde.fr"),
    ("www.lemonde.fr", "lemonde.fr"),
    ("https://www.lefigaro.fr/politique/article", "lefigaro.fr"),
    ("le monde.fr", "lemonde.fr"),
    ("reuters", "reuters.com"),
    ("eurostat", "eurostat.ec.europa.eu"),
])
def test_find_known_source_profile(raw, expected):
    profile = find_known_source_profile(raw)
    assert profile is not None
    assert profile.name == expected


@pytest.mark.parametrize("raw", [None, "", "   ", 42, "unknown-blog.example", "fr"])
def test_find_known_source_profile_misses(raw):
    assert find_known_source_profile(raw) is None


def test_known_outlet_bias_comes_from_pool():
    assert find_known_source_profile("lefigaro.fr").bias == "right"
    assert find_known_source_profile("who.int").bias == "neutral"


def test_default_positions():
    assert default_position("left") == 35
    assert default_position("center") == 50
    assert default_position("neutral") == 50
    assert default_position("right") == 65
    assert default_position("bogus") == 50


def test_shipped_pool_passes_integrity_check():
    check_pool_integrity()


def test_integrity_check_rejects_empty_bucket():
    pool = dict(CURATED_SOURCE_POOL)
    pool["neutral"] = ()
    with pytest.raises(PoolIntegrityError):
        check_pool_integrity(pool)


def test_integrity_check_rejects_contradicting_position():
    pool = dict(CURATED_SOURCE_POOL)
    pool["left"] = (CuratedSourceProfile("odd.example", "left", 70, "x {topic}"),)
    with pytest.raises(PoolIntegrityError):
        check_pool_integrity(pool)
