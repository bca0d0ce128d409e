"""
JSON rendering of the final report.
"""

import json
import sys
from pathlib import Path
from typing import Optional, TextIO

from .models import GlobalAggregate


def render_report(aggregate: GlobalAggregate, indent: Optional[int] = 2) -> str:
    return json.dumps(aggregate.to_dict(), indent=indent, ensure_ascii=False)


def write_report(
    aggregate: GlobalAggregate,
    output: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Write the report to ``output`` if given, else to ``stream`` (stdout)."""
    rendered = render_report(aggregate)
    if output is not None:
        Path(output).write_text(rendered + "\n", encoding="utf-8")
        return
    stream = stream or sys.stdout
    stream.write(rendered + "\n")
