"""
Record parsing.

Each input line is a JSON object with a ``texts`` list and a ``tags`` list,
for example::

    {"texts": ["How do I ...", "I tried ..."], "tags": ["python", "lists"]}

Other fields are ignored. Texts and tags are used verbatim.
"""

import json
import re
from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Optional

from .errors import MalformedRecord
from .partitions import PartitionLike

# str.isspace() also counts U+001C..U+001F, which are not White_Space
WORD_PATTERN = re.compile(r"(?:\S|[\x1c-\x1f])+")


@dataclass(frozen=True)
class Record:
    """Question texts and tags decoded from one line."""

    texts: List[str]
    tags: FrozenSet[str]

    def word_count(self) -> int:
        """Whitespace-delimited tokens across all texts joined by one space.

        Whitespace is the Unicode White_Space set, so the information
        separators U+001C..U+001F do not split words.
        """
        return len(WORD_PATTERN.findall(" ".join(self.texts)))


def _string_list(data: dict, field_name: str) -> List[str]:
    if field_name not in data:
        raise ValueError(f"missing field '{field_name}'")
    values = data[field_name]
    if not isinstance(values, list):
        raise ValueError(
            f"field '{field_name}' must be a list, got {type(values).__name__}"
        )
    for value in values:
        if not isinstance(value, str):
            raise ValueError(
                f"field '{field_name}' must only hold strings, got {value!r}"
            )
    return values


def parse_line(
    line: str, partition: Optional[str] = None, line_number: Optional[int] = None
) -> Record:
    """Decode one line into a Record, raising MalformedRecord on any other shape."""
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedRecord(f"invalid JSON ({e})", partition, line_number) from e

    if not isinstance(data, dict):
        raise MalformedRecord(
            f"expected a JSON object, got {type(data).__name__}", partition, line_number
        )

    try:
        texts = _string_list(data, "texts")
        tags = _string_list(data, "tags")
    except ValueError as e:
        raise MalformedRecord(str(e), partition, line_number) from e

    return Record(texts=texts, tags=frozenset(tags))


def scan_partition(partition: PartitionLike) -> Iterator[Record]:
    """Lazily parse every line of a partition."""
    for line_number, line in enumerate(partition.iter_lines(), start=1):
        yield parse_line(line, partition.name, line_number)
