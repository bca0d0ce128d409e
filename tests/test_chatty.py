"""
Tests for the chatty ranking.
"""

import random
import sys
from pathlib import Path

# Add parent directory to path to import the package
sys.path.append(str(Path(__file__).parent.parent))

import pytest

from chatty_stats.factories.chatty import (
    CHATTY_LIMIT,
    chatty_keys,
    get_chatty,
    process_chatty,
)
from chatty_stats.factories.registry import get_ranking_source
from chatty_stats.models import GlobalAggregate, SourceAggregate, UsageStat


def test_tie_break_by_key():
    """Equal ratios are ordered by ascending key."""
    assert get_chatty([("A", 2.0), ("B", 2.0), ("C", 3.0)]) == ["C", "A", "B"]
    assert get_chatty([("B", 2.0), ("C", 3.0), ("A", 2.0)]) == ["C", "A", "B"]


def test_bounded_ranking():
    """Only the ten chattiest keys are kept, in ratio order."""
    items = [
        ("num1", 58.5980452027),
        ("num2", 94.7379952794),
        ("num3", 51.1235244736),
        ("num4", 66.0260148323),
        ("num5", 8.1785348445),
        ("num6", 56.7970283287),
        ("num7", 76.515530613),
        ("num8", 13.00056099),
        ("num9", 56.8006524708),
        ("num10", 49.57237619),
        ("num11", 58.6966479713),
        ("num12", 48.0282510822),
        ("num13", 87.699566394),
        ("num14", 66.862834759),
        ("num15", 60.4379047171),
    ]

    result = get_chatty(items)

    assert result == [
        "num2", "num13", "num7", "num14", "num4",
        "num15", "num11", "num1", "num9", "num6",
    ]
    assert len(result) == CHATTY_LIMIT


def test_strictly_decreasing_ratios():
    items = [(f"key{idx:02d}", 100.0 - idx) for idx in range(15)]
    assert get_chatty(items) == [f"key{idx:02d}" for idx in range(10)]


def test_fewer_keys_than_limit():
    assert get_chatty([("b", 1.0), ("a", 4.0)]) == ["a", "b"]
    assert get_chatty([]) == []


def test_custom_limit():
    assert get_chatty([("a", 1.0), ("b", 2.0), ("c", 3.0)], limit=2) == ["c", "b"]


def test_input_order_does_not_matter():
    items = [(f"k{idx}", float(idx % 4)) for idx in range(40)]
    expected = get_chatty(items)

    rng = random.Random(7)
    for _ in range(20):
        shuffled = list(items)
        rng.shuffle(shuffled)
        assert get_chatty(shuffled) == expected


def test_chatty_keys_uses_words_per_question():
    stats = {"short": UsageStat(4, 4), "long": UsageStat(1, 25), "mid": UsageStat(3, 30)}
    assert chatty_keys(stats) == ["long", "mid", "short"]


def test_chatty_keys_rejects_zero_questions():
    with pytest.raises(ValueError):
        chatty_keys({"empty": UsageStat(0, 0)})


def make_sites_report():
    report = GlobalAggregate()
    report.sources = {
        "site1": SourceAggregate(
            UsageStat(2, 10),
            {"tag1": UsageStat(2, 10), "tag2": UsageStat(1, 25)},
            ["chatty_1"],
        ),
        "site2": SourceAggregate(
            UsageStat(1, 25),
            {"tag1": UsageStat(3, 30), "tag2": UsageStat(4, 4)},
            ["chatty_2"],
        ),
    }
    report.tags = {
        "tag1": UsageStat(2, 10),
        "tag2": UsageStat(1, 25),
        "tag3": UsageStat(3, 30),
        "tag4": UsageStat(4, 4),
    }
    return report


def test_process_chatty():
    report = process_chatty(make_sites_report())

    assert report.rankings == {
        "chatty_sites": ["site2", "site1"],
        "chatty_tags": ["tag2", "tag3", "tag1", "tag4"],
    }
    # Per-site rankings replace whatever was there before
    assert report.sources["site1"].chatty_tags == ["tag2", "tag1"]
    assert report.sources["site2"].chatty_tags == ["tag1", "tag2"]


def test_process_chatty_is_idempotent():
    report = process_chatty(make_sites_report())
    first = (report.rankings, {n: s.chatty_tags for n, s in report.sources.items()})

    process_chatty(report)

    assert (report.rankings, {n: s.chatty_tags for n, s in report.sources.items()}) == first


def test_process_chatty_caps_tags_per_source():
    """A source with more than ten tags keeps only its ten chattiest."""
    report = make_sites_report()
    report.add_source(
        "site3",
        SourceAggregate(
            UsageStat(1, 12),
            {f"tag{idx:02d}": UsageStat(1, idx) for idx in range(1, 13)},
        ),
    )

    process_chatty(report)

    chatty_tags = report.sources["site3"].chatty_tags
    assert len(chatty_tags) == CHATTY_LIMIT
    assert chatty_tags == [f"tag{idx:02d}" for idx in range(12, 2, -1)]
    assert len(report.rankings["chatty_tags"]) == CHATTY_LIMIT


def test_process_chatty_selected_rankings():
    report = process_chatty(make_sites_report(), rankings=["chatty_sites"])
    assert report.rankings == {"chatty_sites": ["site2", "site1"]}

    with pytest.raises(NotImplementedError):
        process_chatty(make_sites_report(), rankings=["chatty_users"])


def test_process_chatty_empty_report():
    report = process_chatty(GlobalAggregate())
    assert report.rankings == {"chatty_sites": [], "chatty_tags": []}


def test_get_ranking_source():
    report = make_sites_report()

    assert get_ranking_source("chatty_tags")(report) == report.tags
    assert get_ranking_source("chatty_sites")(report) == {
        "site1": UsageStat(2, 10),
        "site2": UsageStat(1, 25),
    }
    with pytest.raises(NotImplementedError):
        get_ranking_source("chatty_users")
