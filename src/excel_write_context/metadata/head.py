"""Header metadata: columns, header row count and merged regions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from excel_write_context.utils.exceptions import InvalidArgumentError

HeadSpec = Sequence[Sequence[str]]
"""A head declaration: one entry per column, each listing its names top-down."""


@dataclass(frozen=True)
class CellRange:
    """An inclusive, zero-based rectangle of cells."""

    first_row: int
    last_row: int
    first_col: int
    last_col: int

    def translate(self, rows: int) -> CellRange:
        """Return the same rectangle moved down by ``rows`` rows."""
        return CellRange(
            first_row=self.first_row + rows,
            last_row=self.last_row + rows,
            first_col=self.first_col,
            last_col=self.last_col,
        )


@dataclass(frozen=True)
class Head:
    """One header column and its display name on every header row."""

    column_index: int
    head_name_list: tuple[str, ...]

    def head_name(self, row: int) -> str:
        return self.head_name_list[row]


class HeadProperty:
    """Computed header layout for one sheet or table scope.

    Built once per scope from a head declaration. Columns shorter than the
    tallest one are padded by repeating their last name, so every column has
    exactly ``head_row_number`` names.
    """

    def __init__(self, head_list: Sequence[Head]) -> None:
        self._head_list = tuple(head_list)
        self._head_row_number = max(
            (len(head.head_name_list) for head in self._head_list), default=0
        )

    @classmethod
    def from_head(cls, head: HeadSpec | None) -> HeadProperty:
        """Build header metadata from a head declaration.

        Args:
            head: Column-major header names, or None for no header.

        Returns:
            The computed header metadata.

        Raises:
            InvalidArgumentError: If a column declares no names.
        """
        if not head:
            return cls([])

        columns: list[list[str]] = []
        for index, names in enumerate(head):
            if isinstance(names, str):
                names = [names]
            if not names:
                raise InvalidArgumentError(
                    f"Head column {index} declares no names", argument="head"
                )
            columns.append(list(names))

        row_number = max(len(names) for names in columns)
        head_list = []
        for index, names in enumerate(columns):
            padded = names + [names[-1]] * (row_number - len(names))
            head_list.append(Head(column_index=index, head_name_list=tuple(padded)))
        return cls(head_list)

    @property
    def head_list(self) -> tuple[Head, ...]:
        return self._head_list

    @property
    def head_row_number(self) -> int:
        return self._head_row_number

    def has_head(self) -> bool:
        return bool(self._head_list) and self._head_row_number > 0

    def head_by_row(self, row: int) -> list[str]:
        """Names of every column on header row ``row``, left to right."""
        return [head.head_name(row) for head in self._head_list]

    def cell_ranges(self) -> list[CellRange]:
        """Merged regions of the header block, relative to its first row.

        A run of equal names extending right along a row and/or down a column
        becomes one region anchored at the run's first cell.
        """
        ranges: list[CellRange] = []
        for col, head in enumerate(self._head_list):
            column_names = head.head_name_list
            for row, name in enumerate(column_names):
                last_row = _last_range_index(row, name, column_names)
                last_col = _last_range_index(col, name, self.head_by_row(row))
                if last_row < 0 or last_col < 0:
                    continue
                if last_row > row or last_col > col:
                    ranges.append(CellRange(row, last_row, col, last_col))
        return ranges


def _last_range_index(index: int, value: str | None, values: Sequence[str]) -> int:
    """Last index of the run of ``value`` starting at ``index``, or -1.

    Returns -1 when the run started before ``index``; that cell already
    belongs to an earlier region.
    """
    if value is None:
        return -1
    if index > 0 and values[index - 1] == value:
        return -1
    last = index
    for position in range(index + 1, len(values)):
        if values[position] != value:
            break
        last = position
    return last
