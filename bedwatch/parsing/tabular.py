"""
Delimited text splitting with double-quote handling.
"""

from dataclasses import dataclass, field
from typing import List

from ..config import CSV_DELIMITER, CSV_QUOTE


@dataclass
class Table:
    """Header cells plus the cells of every data line, in source order."""
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.headers


def split_line(line: str, delimiter: str = CSV_DELIMITER, quote: str = CSV_QUOTE) -> List[str]:
    """
    Split one line into trimmed cells.

    A quote toggles quoted mode and is dropped from the output; delimiters
    inside quoted mode are kept as text.

    Args:
        line: Raw line without its newline
        delimiter: Cell separator
        quote: Quote character

    Returns:
        List of cells (at least one, even for an empty line)
    """
    cells = []
    current = []
    in_quotes = False

    for char in line:
        if char == quote:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            cells.append(''.join(current).strip())
            current = []
        else:
            current.append(char)

    cells.append(''.join(current).strip())
    return cells


def parse_table(text: str, delimiter: str = CSV_DELIMITER) -> Table:
    """
    Split raw export text into headers and data rows.

    Args:
        text: Whole file contents

    Returns:
        Table; empty when there are fewer than two lines (no data)
    """
    lines = [line.rstrip('\r') for line in text.strip().split('\n')]
    if len(lines) < 2:
        return Table()

    return Table(
        headers=split_line(lines[0], delimiter),
        rows=[split_line(line, delimiter) for line in lines[1:]],
    )
