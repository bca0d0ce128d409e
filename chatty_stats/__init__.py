"""
Question and word statistics per site and tag, with chatty rankings.
"""

from .config import StatsConfig, resolve_num_workers
from .errors import (
    ChattyStatsError,
    FormatError,
    MalformedRecord,
    PartitionUnreadable,
    ResultMismatch,
)
from .factories.chatty import CHATTY_LIMIT, get_chatty, process_chatty
from .factories.site_stats import SiteStatsMapReduce
from .models import GlobalAggregate, SourceAggregate, UsageStat
from .partitions import FilePartition, Partition, discover_partitions
from .records import Record, parse_line, scan_partition
from .stats_framework import process_sites, run

__all__ = [
    "CHATTY_LIMIT",
    "ChattyStatsError",
    "FilePartition",
    "FormatError",
    "GlobalAggregate",
    "MalformedRecord",
    "Partition",
    "PartitionUnreadable",
    "Record",
    "ResultMismatch",
    "SiteStatsMapReduce",
    "SourceAggregate",
    "StatsConfig",
    "UsageStat",
    "discover_partitions",
    "get_chatty",
    "parse_line",
    "process_chatty",
    "process_sites",
    "run",
    "resolve_num_workers",
    "scan_partition",
]
