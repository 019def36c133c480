"""Library for formatting tabular console output."""

from collections.abc import Generator, Sequence
from dataclasses import dataclass
import sys
from typing import Any, TextIO

PADDING = 4


@dataclass(frozen=True)
class Column:
    """A column of a table, read from `key` of each row."""

    key: str
    header: str | None = None

    @property
    def title(self) -> str:
        return (self.header or self.key).upper()


def format_columns(
    headers: Sequence[str], rows: Sequence[Sequence[str]]
) -> Generator[str, None, None]:
    """Yield the header and rows aligned in columns."""
    if not headers:
        return
    widths = [len(header) for header in headers]
    for row in rows:
        for i, value in enumerate(row):
            widths[i] = max(widths[i], len(value))
    for row in [headers, *rows]:
        yield "".join(
            value.ljust(width + PADDING) for value, width in zip(row, widths)
        ).rstrip()


class TableFormatter:
    """A formatter that prints rows as an aligned table."""

    def __init__(self, columns: list[Column], empty_message: str | None = None):
        """Initialize the TableFormatter with the columns to print."""
        self._columns = columns
        self._empty_message = empty_message

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the data objects."""
        if not data:
            if self._empty_message:
                yield self._empty_message
            return
        rows = [[str(row.get(col.key, "")) for col in self._columns] for row in data]
        yield from format_columns([col.title for col in self._columns], rows)

    def print(
        self, data: list[dict[str, Any]], file: TextIO | None = None
    ) -> None:
        """Output the data objects, to stdout unless a file is given."""
        out = file or sys.stdout
        for line in self.format(data):
            print(line, file=out)
