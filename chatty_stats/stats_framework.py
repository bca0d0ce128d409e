"""
Site Statistics MapReduce Framework

Computes question and word statistics over a directory of line-delimited JSON
partitions, one file per site, and ranks the chattiest sites and tags (most
words per question).

Phases:
1. Scan: every partition is parsed and mapped into one aggregate per site,
   the partitions of one worker are combined locally
2. Reduce: the per-worker partial reports are merged into one report
3. Rank: chatty sites, chatty tags, and chatty tags per site

Sequential and parallel (process or thread pool) modes are supported; "both"
runs them side by side and checks the results are identical.
"""

# Standard library imports
import argparse
import logging
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from multiprocessing import Pool
from typing import List, Optional, Sequence, Tuple, TypeVar

# Third-party imports
import psutil

# Local imports
from .config import EXECUTORS, MODES, StatsConfig
from .errors import ChattyStatsError, ResultMismatch
from .factories.chatty import process_chatty
from .factories.registry import reduce_across_partitions, shuffle_results
from .factories.site_stats import SiteStatsMapReduce
from .models import DEFAULT_REPORT_ID, GlobalAggregate, SourceAggregate
from .partitions import PartitionLike, discover_partitions
from .records import scan_partition
from .report import write_report

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RunTimings:
    """Wall-clock seconds spent per mode, None for a mode that did not run."""

    sequential_time: Optional[float] = None
    parallel_time: Optional[float] = None
    speedup: Optional[float] = None


def get_memory_usage() -> float:
    """Get current memory usage in MB"""
    process = psutil.Process()
    return process.memory_info().rss / (1024 * 1024)


def get_source_stats(partition: PartitionLike, use_reduce: bool = False) -> SourceAggregate:
    """Scan one partition into the aggregate of its source."""
    fragments = (SiteStatsMapReduce.map(record) for record in scan_partition(partition))
    return SiteStatsMapReduce.reduce(fragments, use_reduce=use_reduce)


def get_partition_stats(
    partitions: Sequence[PartitionLike],
    use_reduce: bool = False,
    report_id: str = DEFAULT_REPORT_ID,
) -> GlobalAggregate:
    """Process a chunk of partitions with the local combiner pattern and return
    one partial report for the whole chunk."""
    pid = os.getpid()
    partial_report = GlobalAggregate(report_id=report_id)
    for partition in partitions:
        start_time = time.time()
        partial_report.add_source(partition.name, get_source_stats(partition, use_reduce))
        end_time = time.time() - start_time
        logger.info(f"Processing {partition.name} in PID {pid} took {end_time:.6f} seconds")
    return partial_report


def chunkify(items: Sequence[T], num_chunks: int) -> List[List[T]]:
    """Distribute items across workers, the first chunks taking the remainder."""
    num_items = len(items)
    items_per_chunk = num_items // num_chunks
    remainder = num_items - (num_chunks * items_per_chunk)

    result = []
    start = 0
    for idx in range(num_chunks):
        chunk_size = items_per_chunk + (1 if idx < remainder else 0)
        end = start + chunk_size

        if start < num_items:
            result.append(list(items[start:end]))
        start = end

    return result


def process_sites_sequential(
    partitions: Sequence[PartitionLike], config: StatsConfig
) -> GlobalAggregate:
    """Scan every partition in turn, shuffle by site name and reduce."""
    named_aggregates: List[Tuple[str, SourceAggregate]] = []
    for partition in partitions:
        start_time = time.time()
        named_aggregates.append(
            (partition.name, get_source_stats(partition, config.use_reduce))
        )
        end_time = time.time() - start_time
        logger.info(f"Processing {partition.name} sequentially took {end_time:.6f} seconds")

    return SiteStatsMapReduce.reduce_shuffled(
        shuffle_results(named_aggregates), report_id=config.report_id
    )


def process_sites_parallel(
    partitions: Sequence[PartitionLike], config: StatsConfig
) -> GlobalAggregate:
    """Scan the partitions on a worker pool, one chunk per worker, and merge
    the partial reports."""
    chunks = chunkify(partitions, config.num_workers)
    get_stats_with_params = partial(
        get_partition_stats, use_reduce=config.use_reduce, report_id=config.report_id
    )

    workers = max(1, min(config.num_workers, len(chunks)))
    if config.executor == "process":
        with Pool(processes=workers) as pool:
            partial_reports = pool.map(get_stats_with_params, chunks)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            partial_reports = list(executor.map(get_stats_with_params, chunks))

    logger.info(
        f"Used {workers} {config.executor} workers for {len(partitions)} partitions "
        f"(out of {config.num_workers} requested, {os.cpu_count()} CPUs available)"
    )

    return reduce_across_partitions(
        partial_reports,
        use_reduce=config.use_reduce,
        use_tree=config.use_tree_reduce,
        report_id=config.report_id,
    )


def calculate_speedup(sequential_time: float, parallel_time: float, num_workers: int) -> float:
    """Calculate and log performance metrics for parallel vs sequential
    processing."""
    if parallel_time == 0:
        logger.warning("Parallel time is zero, cannot calculate speedup")
        return float("inf")

    speedup = sequential_time / parallel_time
    efficiency = speedup / num_workers

    logger.info(f"Sequential time:     {sequential_time:.4f} seconds")
    logger.info(f"Parallel time:       {parallel_time:.4f} seconds")
    logger.info(f"Speedup:             {speedup:.2f}x")
    logger.info(f"Efficiency:          {efficiency:.2f} ({efficiency*100:.1f}%)")
    logger.info(f"Workers used:        {num_workers}")
    logger.info(f"Memory usage:        {get_memory_usage():.1f} MB")

    if speedup <= 1:
        logger.info(f"Sequential processing is {1/speedup:.2f}x faster (overhead dominates)")
    return speedup


def check_same_results(sequential: GlobalAggregate, parallel: GlobalAggregate) -> None:
    """Raise ResultMismatch unless both runs produced the same report."""
    if sequential.sources != parallel.sources:
        raise ResultMismatch("Sequential and parallel runs produced different sites")
    if sequential.tags != parallel.tags:
        raise ResultMismatch("Sequential and parallel runs produced different tags")
    if sequential.rankings != parallel.rankings:
        raise ResultMismatch("Sequential and parallel runs produced different rankings")


def process_sites(
    partitions: Sequence[PartitionLike],
    config: StatsConfig,
    timings: Optional[RunTimings] = None,
) -> GlobalAggregate:
    """Scan, reduce and rank the partitions according to ``config.mode``."""
    timings = timings if timings is not None else RunTimings()
    sequential_report = None
    parallel_report = None

    if config.mode in ("sequential", "both"):
        start_time = time.time()
        sequential_report = process_chatty(
            process_sites_sequential(partitions, config), config.chatty_limit
        )
        timings.sequential_time = time.time() - start_time

    if config.mode in ("parallel", "both"):
        start_time = time.time()
        parallel_report = process_chatty(
            process_sites_parallel(partitions, config), config.chatty_limit
        )
        timings.parallel_time = time.time() - start_time

    if sequential_report is not None and parallel_report is not None:
        check_same_results(sequential_report, parallel_report)
        logger.info("Sequential and parallel results are identical")
        timings.speedup = calculate_speedup(
            timings.sequential_time, timings.parallel_time, config.num_workers
        )
        return parallel_report

    return sequential_report if sequential_report is not None else parallel_report


def run(config: StatsConfig) -> Tuple[GlobalAggregate, RunTimings]:
    """Discover the partitions of ``config.data_dir`` and build the ranked report."""
    partitions = discover_partitions(config.data_dir)
    if not partitions:
        raise ChattyStatsError(f"No .jsonl partitions found in {config.data_dir}")

    timings = RunTimings()
    report = process_sites(partitions, config, timings)
    return report, timings


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the site statistics run."""
    parser = argparse.ArgumentParser(
        description="Question and word statistics per site and tag",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chatty-stats                          # All CPUs, ./data, parallel
  chatty-stats 4                        # Use 4 workers
  chatty-stats 4 --mode both            # Run both modes and compare results
  chatty-stats --executor thread        # Thread pool instead of processes
  chatty-stats --use-reduce             # Use functools.reduce instead of for loops
  chatty-stats --tree-reduce            # Merge partial reports as a balanced tree
  chatty-stats --data-dir ./corpus -o report.json
        """,
    )

    parser.add_argument(
        "num_threads",
        nargs="?",
        default=None,
        help="Number of workers (default: all CPU cores)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default="./data",
        help="Directory containing the .jsonl partitions to process (default: ./data)",
    )

    parser.add_argument(
        "--mode",
        choices=MODES,
        default="parallel",
        help="Processing mode: 'sequential', 'parallel', or 'both' (default: parallel)",
    )

    parser.add_argument(
        "--executor",
        choices=EXECUTORS,
        default="process",
        help="Worker pool backend for parallel processing (default: process)",
    )

    parser.add_argument(
        "--use-reduce",
        action="store_true",
        help="Use functools.reduce instead of for loops for aggregation",
    )

    parser.add_argument(
        "--tree-reduce",
        action="store_true",
        help="Merge the partial reports pairwise as a balanced tree",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write the JSON report to this file instead of stdout",
    )

    parser.add_argument(
        "--report-id",
        type=str,
        default=DEFAULT_REPORT_ID,
        help=f"Identifier written in the report (default: {DEFAULT_REPORT_ID})",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level, logs go to stderr (default: WARNING)",
    )

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = StatsConfig.from_args(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        report, _ = run(config)
        write_report(report, config.output)
    except (ChattyStatsError, OSError) as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
