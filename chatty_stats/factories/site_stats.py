"""
Site Statistics MapReduce Operations

Implements the MapReduce operations for question and word statistics.
Provides static methods for every phase of the pipeline:
map, reduce, reduce_all, reduce_shuffled and merge_tree.
"""

from functools import reduce
from typing import Dict, Iterable, List, Sequence

from ..models import DEFAULT_REPORT_ID, GlobalAggregate, SourceAggregate, UsageStat
from ..records import Record


class SiteStatsMapReduce:
    """MapReduce operations for per-source and per-tag usage statistics."""

    @staticmethod
    def map(record: Record) -> SourceAggregate:
        """Map phase: turn one record into a single-question source fragment.

        Every tag of the record gets the full word count of the record.
        """
        stat = UsageStat(questions=1, words=record.word_count())
        return SourceAggregate(stat=stat, tags={tag: stat for tag in record.tags})

    @staticmethod
    def reduce(
        fragments: Iterable[SourceAggregate], use_reduce: bool = False
    ) -> SourceAggregate:
        """Reduce phase: fold the fragments of one source into one aggregate."""
        if use_reduce:
            # Fresh accumulator: fragments are never mutated.
            def accumulate(
                accumulated: SourceAggregate, fragment: SourceAggregate
            ) -> SourceAggregate:
                accumulated += fragment
                return accumulated

            return reduce(accumulate, fragments, SourceAggregate())

        aggregate = SourceAggregate()
        for fragment in fragments:
            aggregate += fragment
        return aggregate

    @staticmethod
    def reduce_all(
        partials: Iterable[GlobalAggregate],
        use_reduce: bool = False,
        report_id: str = DEFAULT_REPORT_ID,
    ) -> GlobalAggregate:
        """Merge partial reports, e.g. one per worker, into one report."""
        if use_reduce:

            def accumulate(
                accumulated: GlobalAggregate, partial: GlobalAggregate
            ) -> GlobalAggregate:
                accumulated += partial
                return accumulated

            return reduce(accumulate, partials, GlobalAggregate(report_id=report_id))

        total = GlobalAggregate(report_id=report_id)
        for partial in partials:
            total += partial
        return total

    @staticmethod
    def reduce_shuffled(
        shuffled: Dict[str, List[SourceAggregate]],
        report_id: str = DEFAULT_REPORT_ID,
    ) -> GlobalAggregate:
        """Reduce source aggregates grouped by source name after the shuffle."""
        total = GlobalAggregate(report_id=report_id)
        for name, aggregates in shuffled.items():
            for aggregate in aggregates:
                total.add_source(name, aggregate)
        return total

    @staticmethod
    def merge_tree(
        partials: Sequence[GlobalAggregate], report_id: str = DEFAULT_REPORT_ID
    ) -> GlobalAggregate:
        """Merge partial reports pairwise, as a balanced reduction tree."""
        level = list(partials)
        if not level:
            return GlobalAggregate(report_id=report_id)
        while len(level) > 1:
            next_level = [
                level[idx] + level[idx + 1] for idx in range(0, len(level) - 1, 2)
            ]
            if len(level) % 2:
                next_level.append(level[-1])
            level = next_level
        # Copy, the result never aliases an input partial.
        return level[0] + GlobalAggregate(report_id=level[0].report_id)
