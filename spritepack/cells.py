"""
Cell grid used by the greedy placer.

The sheet is divided into rows and columns. Every cell is the intersection
of one row and one column and is either wholly occupied by a frame or wholly
free. All cells in a row share a height and all cells in a column share a
width, so the grid is stored as two index tables (row heights, column
widths) plus an occupancy matrix. Cells are only ever split, never merged,
and together they always cover the sheet with no gaps and no overlaps.

The rightmost column has no right edge: its width is UNBOUNDED, which lets
the sheet grow to the right as frames are added.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Tuple, Union


class Extent(Enum):
    """Marker for a dimension that extends to infinity."""
    UNBOUNDED = "unbounded"


UNBOUNDED = Extent.UNBOUNDED

ColumnWidth = Union[int, Extent]


class Cell(NamedTuple):
    x: int
    y: int
    width: ColumnWidth
    height: int
    occupied: bool


class Span(NamedTuple):
    """Block of cells a frame would cover when placed at (row, col)."""
    row: int
    col: int
    end_row: int
    end_col: int
    last_row_keep: int  # height of end_row the frame actually uses
    last_col_keep: int  # width of end_col the frame actually uses


class CellGrid:
    """Mutable partition of a sheet of fixed height and unbounded width."""

    def __init__(self, height: int):
        if height <= 0:
            raise ValueError(f"Sheet height must be positive, got {height}")
        self.height = height
        self.row_heights: List[int] = [height]
        self.col_widths: List[ColumnWidth] = [UNBOUNDED]
        self.occupied: List[List[bool]] = [[False]]

    @property
    def rows(self) -> int:
        return len(self.row_heights)

    @property
    def cols(self) -> int:
        return len(self.col_widths)

    def origin_of(self, row: int, col: int) -> Tuple[int, int]:
        """Pixel position of the upper-left corner of a cell."""
        # Only the last column is unbounded, so every column left of col is finite.
        x = sum(self.col_widths[:col])
        y = sum(self.row_heights[:row])
        return x, y

    def cell(self, row: int, col: int) -> Cell:
        x, y = self.origin_of(row, col)
        return Cell(x, y, self.col_widths[col], self.row_heights[row], self.occupied[row][col])

    def iter_cells(self) -> Iterator[Cell]:
        for row in range(self.rows):
            for col in range(self.cols):
                yield self.cell(row, col)

    def find_span(self, width: int, height: int, row: int, col: int) -> Optional[Span]:
        """
        Work out which cells a width x height frame would cover at (row, col).

        Rows are accumulated downwards until they cover the frame's height;
        running out of rows means the sheet is too short at this position.
        Columns are accumulated to the right until they cover its width,
        which always succeeds because the last column is unbounded.

        Returns:
            The covered Span, or None if the frame cannot be placed here
        """
        if self.occupied[row][col]:
            return None

        end_row = row
        covered_height = self.row_heights[row]
        while covered_height < height:
            end_row += 1
            if end_row >= self.rows:
                return None
            covered_height += self.row_heights[end_row]
        last_row_keep = height - (covered_height - self.row_heights[end_row])

        end_col = col
        covered_width = 0
        while True:
            for r in range(row, end_row + 1):
                if self.occupied[r][end_col]:
                    return None
            col_width = self.col_widths[end_col]
            if col_width is UNBOUNDED:
                last_col_keep = width - covered_width
                break
            covered_width += col_width
            if covered_width >= width:
                last_col_keep = width - (covered_width - col_width)
                break
            end_col += 1

        return Span(row, col, end_row, end_col, last_row_keep, last_col_keep)

    def split_row(self, row: int, keep: int) -> None:
        """Split a row so its first part is `keep` pixels tall."""
        rest = self.row_heights[row] - keep
        if keep <= 0 or rest <= 0:
            raise ValueError(f"Cannot split row {row} of height {self.row_heights[row]} at {keep}")
        self.row_heights[row] = keep
        self.row_heights.insert(row + 1, rest)
        self.occupied.insert(row + 1, list(self.occupied[row]))

    def split_column(self, col: int, keep: int) -> None:
        """
        Split a column so its first part is `keep` pixels wide.

        Splitting the unbounded column turns it into a real column and
        appends a fresh unbounded column after it.
        """
        current = self.col_widths[col]
        if current is UNBOUNDED:
            if keep <= 0:
                raise ValueError(f"Cannot split unbounded column at {keep}")
            rest = UNBOUNDED
        else:
            rest = current - keep
            if keep <= 0 or rest <= 0:
                raise ValueError(f"Cannot split column {col} of width {current} at {keep}")
        self.col_widths[col] = keep
        self.col_widths.insert(col + 1, rest)
        for flags in self.occupied:
            flags.insert(col + 1, flags[col])

    def occupy(self, span: Span) -> None:
        for r in range(span.row, span.end_row + 1):
            for c in range(span.col, span.end_col + 1):
                self.occupied[r][c] = True

    def place(self, width: int, height: int, row: int, col: int) -> Optional[Tuple[int, int]]:
        """
        Try to put a frame with its upper-left corner on cell (row, col).

        On success the cells along the bottom and right edges of the frame
        are split so the frame covers whole cells exactly, those cells are
        marked occupied, and the frame's pixel position is returned.
        """
        span = self.find_span(width, height, row, col)
        if span is None:
            return None

        if span.last_row_keep < self.row_heights[span.end_row]:
            self.split_row(span.end_row, span.last_row_keep)
        end_width = self.col_widths[span.end_col]
        if end_width is UNBOUNDED or span.last_col_keep < end_width:
            self.split_column(span.end_col, span.last_col_keep)

        self.occupy(span)
        return self.origin_of(row, col)

    def is_valid_partition(self) -> bool:
        """Check that the cells tile the sheet without gaps or overlaps."""
        if sum(self.row_heights) != self.height:
            return False
        if any(h <= 0 for h in self.row_heights):
            return False
        if self.col_widths[-1] is not UNBOUNDED:
            return False
        if any(w is UNBOUNDED or w <= 0 for w in self.col_widths[:-1]):
            return False
        if len(self.occupied) != self.rows:
            return False
        return all(len(flags) == self.cols for flags in self.occupied)

    def describe(self) -> str:
        """Text picture of the grid: '#' for occupied cells, '.' for free ones."""
        header = " ".join("inf" if w is UNBOUNDED else str(w) for w in self.col_widths)
        lines = [f"cols: {header}"]
        for row, flags in enumerate(self.occupied):
            cells = "".join("#" if f else "." for f in flags)
            lines.append(f"{self.row_heights[row]:>5} {cells}")
        return "\n".join(lines)
