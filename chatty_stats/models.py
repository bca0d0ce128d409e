"""
Aggregate value types for question and word statistics.

UsageStat is the atomic (questions, words) pair. SourceAggregate holds the
totals of one source plus its per-tag stats, and GlobalAggregate is the report:
every source, the tag totals across sources and the chatty rankings.

``a + b`` always returns a new aggregate and never touches its operands.
``a += b`` folds ``b`` into ``a`` in place and is meant for accumulators that
a single worker owns. Rankings are never merged: they are computed once, after
the last merge.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

DEFAULT_REPORT_ID = "106160"


@dataclass(frozen=True)
class UsageStat:
    """Question and word counts for a source or a tag."""

    questions: int = 0
    words: int = 0

    def __add__(self, other: "UsageStat") -> "UsageStat":
        if not isinstance(other, UsageStat):
            return NotImplemented
        return UsageStat(self.questions + other.questions, self.words + other.words)

    def ratio(self) -> float:
        """Average words per question."""
        if self.questions <= 0:
            raise ValueError(f"Cannot compute a ratio for {self!r}: no questions")
        return self.words / self.questions

    def to_dict(self) -> Dict[str, int]:
        return {"questions": self.questions, "words": self.words}


def merge_stat_maps(
    left: Mapping[str, UsageStat], right: Mapping[str, UsageStat]
) -> Dict[str, UsageStat]:
    """Union of two stat maps, adding the stats of keys present in both."""
    merged = dict(left)
    for key, stat in right.items():
        merged[key] = merged[key] + stat if key in merged else stat
    return merged


def _fold_stat_map(target: Dict[str, UsageStat], other: Mapping[str, UsageStat]) -> None:
    for key, stat in other.items():
        current = target.get(key)
        target[key] = stat if current is None else current + stat


@dataclass
class SourceAggregate:
    """Statistics of one source: its totals and the stats of each of its tags."""

    stat: UsageStat = field(default_factory=UsageStat)
    tags: Dict[str, UsageStat] = field(default_factory=dict)
    chatty_tags: List[str] = field(default_factory=list)

    @property
    def questions(self) -> int:
        return self.stat.questions

    @property
    def words(self) -> int:
        return self.stat.words

    def __add__(self, other: "SourceAggregate") -> "SourceAggregate":
        if not isinstance(other, SourceAggregate):
            return NotImplemented
        return SourceAggregate(
            stat=self.stat + other.stat,
            tags=merge_stat_maps(self.tags, other.tags),
        )

    def __iadd__(self, other: "SourceAggregate") -> "SourceAggregate":
        if not isinstance(other, SourceAggregate):
            return NotImplemented
        self.stat = self.stat + other.stat
        _fold_stat_map(self.tags, other.tags)
        return self

    def to_dict(self) -> Dict:
        return {
            "questions": self.questions,
            "words": self.words,
            "tags": {name: stat.to_dict() for name, stat in self.tags.items()},
            "chatty_tags": list(self.chatty_tags),
        }


@dataclass
class GlobalAggregate:
    """Aggregated report over every source.

    ``tags`` always equals the per-tag sum of ``sources[*].tags``; use
    ``add_source`` or ``+`` rather than writing the mappings directly.
    """

    report_id: str = DEFAULT_REPORT_ID
    sources: Dict[str, SourceAggregate] = field(default_factory=dict)
    tags: Dict[str, UsageStat] = field(default_factory=dict)
    rankings: Dict[str, List[str]] = field(default_factory=dict)

    def add_source(self, name: str, aggregate: SourceAggregate) -> None:
        """Fold one source aggregate into the sources and the tag totals."""
        current = self.sources.get(name)
        if current is None:
            self.sources[name] = SourceAggregate(
                stat=aggregate.stat, tags=dict(aggregate.tags)
            )
        else:
            current += aggregate
        _fold_stat_map(self.tags, aggregate.tags)

    def __add__(self, other: "GlobalAggregate") -> "GlobalAggregate":
        if not isinstance(other, GlobalAggregate):
            return NotImplemented
        merged = GlobalAggregate(report_id=self.report_id)
        merged += self
        merged += other
        return merged

    def __iadd__(self, other: "GlobalAggregate") -> "GlobalAggregate":
        if not isinstance(other, GlobalAggregate):
            return NotImplemented
        if other.report_id != self.report_id:
            raise ValueError(
                f"Cannot merge reports '{self.report_id}' and '{other.report_id}'"
            )
        for name, aggregate in other.sources.items():
            current = self.sources.get(name)
            if current is None:
                self.sources[name] = SourceAggregate(
                    stat=aggregate.stat, tags=dict(aggregate.tags)
                )
            else:
                current += aggregate
        _fold_stat_map(self.tags, other.tags)
        return self

    def source_stats(self) -> Dict[str, UsageStat]:
        return {name: source.stat for name, source in self.sources.items()}

    def to_dict(self) -> Dict:
        return {
            "padron": self.report_id,
            "sites": {name: source.to_dict() for name, source in self.sources.items()},
            "tags": {name: stat.to_dict() for name, stat in self.tags.items()},
            "totals": {name: list(keys) for name, keys in self.rankings.items()},
        }
