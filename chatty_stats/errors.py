"""
Error types raised while scanning and aggregating partitions.

Every exception keeps its constructor arguments in ``args`` so it can be
pickled back from a worker process unchanged.
"""

from typing import Optional


class ChattyStatsError(Exception):
    """Base class for all errors raised by the statistics pipeline."""


class PartitionUnreadable(ChattyStatsError):
    """A partition could not be opened or read."""

    def __init__(self, partition: str, reason: str):
        super().__init__(partition, reason)
        self.partition = partition
        self.reason = reason

    def __str__(self) -> str:
        return f"Could not read partition '{self.partition}': {self.reason}"


class MalformedRecord(ChattyStatsError, ValueError):
    """A line does not decode to a record with ``texts`` and ``tags``."""

    def __init__(
        self,
        reason: str,
        partition: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        super().__init__(reason, partition, line_number)
        self.reason = reason
        self.partition = partition
        self.line_number = line_number

    def __str__(self) -> str:
        location = self.partition or "<unknown partition>"
        if self.line_number is not None:
            location = f"{location}:{self.line_number}"
        return f"Malformed record at {location}: {self.reason}"


FormatError = MalformedRecord


class ResultMismatch(ChattyStatsError):
    """Sequential and parallel runs produced different reports."""
