"""
Ranking and Reduce Registry

Central registry for the global chatty rankings and the helpers that move
aggregates between the map, shuffle and reduce phases.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

from ..models import DEFAULT_REPORT_ID, GlobalAggregate, SourceAggregate, UsageStat
from .site_stats import SiteStatsMapReduce

logger = logging.getLogger(__name__)

CHATTY_SITES = "chatty_sites"
CHATTY_TAGS = "chatty_tags"

RankingSource = Callable[[GlobalAggregate], Mapping[str, UsageStat]]

RANKINGS: Dict[str, RankingSource] = {
    CHATTY_SITES: GlobalAggregate.source_stats,
    CHATTY_TAGS: lambda aggregate: aggregate.tags,
}


def get_ranking_source(name: str) -> RankingSource:
    """Get the function that extracts the stats a global ranking is built from."""
    try:
        return RANKINGS[name]
    except KeyError:
        raise NotImplementedError(f"Unsupported ranking: {name}") from None


def shuffle_results(
    named_aggregates: Iterable[Tuple[str, SourceAggregate]],
) -> Dict[str, List[SourceAggregate]]:
    """Shuffle phase: group per-partition aggregates by source name."""
    per_source = defaultdict(list)
    for name, aggregate in named_aggregates:
        per_source[name].append(aggregate)
    return dict(per_source)


def reduce_across_partitions(
    partials: Sequence[GlobalAggregate],
    use_reduce: bool = False,
    use_tree: bool = False,
    report_id: str = DEFAULT_REPORT_ID,
) -> GlobalAggregate:
    """Final reduce phase: merge the partial reports of every worker."""
    if use_tree:
        logger.info(f"Merging {len(partials)} partial reports as a balanced tree")
        return SiteStatsMapReduce.merge_tree(partials, report_id=report_id)
    strategy = "functools.reduce" if use_reduce else "loop"
    logger.info(f"Merging {len(partials)} partial reports ({strategy})")
    return SiteStatsMapReduce.reduce_all(partials, use_reduce, report_id=report_id)
