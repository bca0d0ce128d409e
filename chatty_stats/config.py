"""
Run configuration for the statistics pipeline.
"""

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .factories.chatty import CHATTY_LIMIT
from .models import DEFAULT_REPORT_ID

logger = logging.getLogger(__name__)

MODES = ("sequential", "parallel", "both")
EXECUTORS = ("process", "thread")


def default_num_workers() -> int:
    return os.cpu_count() or 1


def resolve_num_workers(value: Optional[Union[str, int]]) -> int:
    """Worker count from an explicit override, or the host CPU count.

    An override that is not a positive integer is logged and ignored.
    """
    default = default_num_workers()
    if value is None:
        return default
    try:
        num_workers = int(value)
    except (TypeError, ValueError):
        num_workers = 0
    if num_workers < 1:
        logger.warning(
            f"Invalid worker count {value!r}, using the value for this system "
            f"({default} workers)"
        )
        return default
    return num_workers


@dataclass
class StatsConfig:
    """Configuration for one statistics run

    - Input directory and worker count
    - Sequential, parallel or both (with a correctness check)
    - Pool backend and reduce strategy
    - Ranking size and report identifier
    """

    data_dir: Path = Path("./data")
    num_workers: int = None
    mode: str = "parallel"
    executor: str = "process"
    use_reduce: bool = False
    use_tree_reduce: bool = False
    chatty_limit: int = CHATTY_LIMIT
    report_id: str = DEFAULT_REPORT_ID
    output: Optional[Path] = None

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        if self.output is not None:
            self.output = Path(self.output)
        if self.num_workers is None:
            self.num_workers = default_num_workers()
        if self.num_workers < 1:
            raise ValueError(f"num_workers must be positive, got {self.num_workers}")
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode '{self.mode}', expected one of {MODES}")
        if self.executor not in EXECUTORS:
            raise ValueError(
                f"Unknown executor '{self.executor}', expected one of {EXECUTORS}"
            )
        if self.chatty_limit < 1:
            raise ValueError(f"chatty_limit must be positive, got {self.chatty_limit}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "StatsConfig":
        return cls(
            data_dir=args.data_dir,
            num_workers=resolve_num_workers(args.num_threads),
            mode=args.mode,
            executor=args.executor,
            use_reduce=args.use_reduce,
            use_tree_reduce=args.tree_reduce,
            report_id=args.report_id,
            output=args.output,
        )
