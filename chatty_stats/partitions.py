"""
Input partitions.

A partition is one named unit of input lines attributed to a single source.
``Partition`` holds its lines in memory, ``FilePartition`` reads a ``.jsonl``
file lazily. Both are picklable as long as ``Partition.lines`` is a list, so
either can be shipped to a worker process.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Union

from .errors import PartitionUnreadable

logger = logging.getLogger(__name__)

PARTITION_SUFFIX = ".jsonl"


@dataclass
class Partition:
    """In-memory partition: a source name and its raw lines."""

    name: str
    lines: Iterable[str]

    def iter_lines(self) -> Iterator[str]:
        return iter(self.lines)


@dataclass
class FilePartition:
    """Partition backed by a ``<source>.jsonl`` file."""

    path: Path

    def __post_init__(self):
        self.path = Path(self.path)

    @property
    def name(self) -> str:
        return self.path.name.replace(PARTITION_SUFFIX, "")

    def iter_lines(self) -> Iterator[str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                for line in f:
                    yield line
        except (OSError, UnicodeDecodeError) as e:
            raise PartitionUnreadable(str(self.path), str(e)) from e


PartitionLike = Union[Partition, FilePartition]


def get_jsonl_paths(data_dir: Union[str, Path]) -> List[Path]:
    """Return the ``.jsonl`` files directly inside ``data_dir``, sorted by name."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Data directory {data_dir} does not exist")
    return sorted(
        path
        for path in data_dir.iterdir()
        if path.is_file() and path.suffix == PARTITION_SUFFIX
    )


def discover_partitions(data_dir: Union[str, Path]) -> List[FilePartition]:
    partitions = [FilePartition(path) for path in get_jsonl_paths(data_dir)]
    logger.info(
        f"Found {len(partitions)} partitions in {data_dir}: "
        f"{[partition.name for partition in partitions]}"
    )
    return partitions
