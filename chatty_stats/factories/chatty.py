"""
Chatty ranking: the keys with the most words per question.

Keys are ordered by descending words/questions ratio, ties broken by ascending
key, and the list is cut at ``CHATTY_LIMIT``. The sort key is a total order on
distinct keys, so the ranking does not depend on input order or worker count.
"""

import heapq
import logging
from typing import Iterable, List, Mapping, Sequence, Tuple

from ..models import GlobalAggregate, UsageStat
from .registry import CHATTY_SITES, CHATTY_TAGS, get_ranking_source

logger = logging.getLogger(__name__)

CHATTY_LIMIT = 10


def get_chatty(items: Iterable[Tuple[str, float]], limit: int = CHATTY_LIMIT) -> List[str]:
    """Return up to ``limit`` keys from ``(key, ratio)`` pairs, chattiest first.

    Example:
        >>> get_chatty([("A", 2.0), ("B", 2.0), ("C", 3.0)])
        ['C', 'A', 'B']
    """
    top = heapq.nsmallest(limit, items, key=lambda item: (-item[1], item[0]))
    return [key for key, _ in top]


def chatty_keys(stats: Mapping[str, UsageStat], limit: int = CHATTY_LIMIT) -> List[str]:
    """Rank the keys of a stat mapping by their words/questions ratio."""
    return get_chatty(((key, stat.ratio()) for key, stat in stats.items()), limit)


def process_chatty(
    aggregate: GlobalAggregate,
    limit: int = CHATTY_LIMIT,
    rankings: Sequence[str] = (CHATTY_SITES, CHATTY_TAGS),
) -> GlobalAggregate:
    """Compute the chatty rankings of a fully merged report, in place.

    Fills each named ranking (``chatty_sites`` and ``chatty_tags`` by default)
    in the report totals and the ``chatty_tags`` of each source. Earlier
    rankings are replaced.
    """
    aggregate.rankings = {
        name: chatty_keys(get_ranking_source(name)(aggregate), limit) for name in rankings
    }
    for source in aggregate.sources.values():
        source.chatty_tags = chatty_keys(source.tags, limit)

    logger.info(
        f"Ranked {len(aggregate.sources)} sources and {len(aggregate.tags)} tags "
        f"(top {limit})"
    )
    return aggregate
