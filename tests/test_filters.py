"""Tests for shared text heuristics."""

import pytest

from city_updates.adapters.sources.filters import (
    KeywordTables,
    categorize,
    has_location,
    mentions_any,
)
from city_updates.core import Category

TABLES = KeywordTables()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Heavy traffic on Expressway", Category.TRAFFIC),
        ("Rain expected this evening", Category.WEATHER),
        ("Emergency services on alert", Category.EMERGENCIES),
        ("Spring festival at Lok Virsa", Category.EVENT),
        ("Stock market closes higher", Category.BUSINESS),
        ("Residents clean up the park", Category.COMMUNITY),
        ("New flight to Gilgit", Category.TRAVEL),
        ("Cabinet meets today", Category.NEWS),
    ],
)
def test_categorize(text, expected):
    """Test each category keyword table."""
    assert categorize(text, TABLES.categories) == expected


def test_categorize_first_match_wins():
    """Test ordering when several categories match."""
    # traffic is checked before weather
    assert categorize("Rain causes traffic jam", TABLES.categories) == Category.TRAFFIC


def test_categorize_case_insensitive():
    """Test case-insensitive matching."""
    assert categorize("WEATHER WARNING", TABLES.categories) == Category.WEATHER


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Protest at Blue Area", True),
        ("Shops open in F-7 Markaz", True),
        ("Crowds at Faisal Mosque", True),
        ("Lahore weather update", False),
    ],
)
def test_has_location(text, expected):
    """Test gazetteer lookup."""
    assert has_location(text, TABLES.gazetteer) is expected


def test_mentions_any_match_in_content():
    """Test place match in content."""
    assert mentions_any("Power outage", "Several sectors of Islamabad affected", TABLES.places)


def test_mentions_any_no_match():
    """Test when no place matches."""
    assert not mentions_any("Karachi port news", "Shipping resumes", TABLES.places)


def test_mentions_any_empty_places():
    """Test that empty place list disables filtering."""
    assert mentions_any("Anything", "at all", [])


def test_keyword_tables_from_config():
    """Test overriding tables from config preserves category order."""
    tables = KeywordTables.from_config(
        {
            "places": ["Murree"],
            "categories": {"weather": ["snow"], "traffic": ["snow", "road"]},
        }
    )

    assert tables.places == ["Murree"]
    assert tables.gazetteer == KeywordTables().gazetteer
    assert categorize("Snow on the road", tables.categories) == Category.WEATHER
    assert categorize("Road repairs", tables.categories) == Category.TRAFFIC
