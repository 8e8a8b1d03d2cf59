# src/gemshift/game/core/grid.py
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Sequence

import numpy as np

from gemshift.game.core.constants import EMPTY_CELL, MIN_RUN
from gemshift.game.core.types import DEFAULT_TOKEN_TYPES, Axis, Coord, Match, MoveAction, TokenType
from gemshift.utils.logging import setup_logger

if TYPE_CHECKING:
    from gemshift.game.core.influence import InfluenceSource

LOG = setup_logger(name="gemshift.game.core.grid", use_rich=True, level="info")


@dataclass(eq=False)
class Grid:
    """
    Logical W x H board.

    Contracts:
      - cells has shape (width, height) and is indexed [col, row]; row 0 is the top.
      - cell values are palette ids: 0 = empty, k >= 1 encodes palette[k - 1].
      - empty cells only exist transiently (while a grid is being built);
        a committed grid is always full.
    """

    width: int
    height: int
    palette: tuple[TokenType, ...]
    cells: np.ndarray

    @classmethod
    def empty(cls, *, width: int, height: int, palette: Sequence[TokenType]) -> "Grid":
        w, h = int(width), int(height)
        if w <= 0 or h <= 0:
            raise ValueError(f"grid size must be positive, got width={w} height={h}")
        pal = tuple(TokenType(t) for t in palette)
        if not pal:
            raise ValueError("palette must contain at least one token type")
        if len(pal) > 255:
            raise ValueError(f"palette too large for uint8 cells ({len(pal)} types)")
        return cls(width=w, height=h, palette=pal, cells=np.zeros((w, h), dtype=np.uint8))

    @classmethod
    def from_columns(
        cls,
        columns: Sequence[Sequence[Optional[TokenType]]],
        *,
        palette: Sequence[TokenType] = DEFAULT_TOKEN_TYPES,
    ) -> "Grid":
        """Build a grid from columns listed left-to-right, each top-to-bottom."""
        if not columns:
            raise ValueError("columns must be non-empty")
        h = len(columns[0])
        if any(len(c) != h for c in columns):
            raise ValueError("all columns must have the same height")
        grid = cls.empty(width=len(columns), height=h, palette=palette)
        for x, col in enumerate(columns):
            for y, token in enumerate(col):
                grid.set_token(x, y, token)
        return grid

    # ---- encoding ------------------------------------------------------------------

    def token_id(self, token: TokenType) -> int:
        try:
            return self.palette.index(TokenType(token)) + 1
        except ValueError as e:
            raise KeyError(
                f"unknown token {token!r} (not in palette {[t.value for t in self.palette]!r})"
            ) from e

    def decode(self, value: int) -> Optional[TokenType]:
        v = int(value)
        if v == EMPTY_CELL:
            return None
        return self.palette[v - 1]

    # ---- access --------------------------------------------------------------------

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= int(col) < self.width and 0 <= int(row) < self.height

    def token_at(self, col: int, row: int) -> Optional[TokenType]:
        return self.decode(self.cells[int(col), int(row)])

    def set_token(self, col: int, row: int, token: Optional[TokenType]) -> None:
        self.cells[int(col), int(row)] = EMPTY_CELL if token is None else self.token_id(token)

    def column(self, col: int) -> tuple[Optional[TokenType], ...]:
        return tuple(self.decode(v) for v in self.cells[int(col), :])

    def row(self, row: int) -> tuple[Optional[TokenType], ...]:
        return tuple(self.decode(v) for v in self.cells[:, int(row)])

    def columns(self) -> tuple[tuple[Optional[TokenType], ...], ...]:
        return tuple(self.column(x) for x in range(self.width))

    def count_empty(self) -> int:
        return int(np.count_nonzero(self.cells == EMPTY_CELL))

    def copy(self) -> "Grid":
        return Grid(width=self.width, height=self.height, palette=self.palette, cells=self.cells.copy())

    def same_tokens(self, other: "Grid") -> bool:
        return (
            self.width == other.width
            and self.height == other.height
            and self.palette == other.palette
            and bool(np.array_equal(self.cells, other.cells))
        )

    def render(self) -> str:
        lines = []
        for y in range(self.height):
            lines.append(" ".join("." if t is None else t.glyph for t in self.row(y)))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


# ---- run helpers -------------------------------------------------------------------


def would_complete_run(
    line: Sequence[Optional[TokenType]],
    index: int,
    token: TokenType,
    *,
    min_run: int = MIN_RUN,
) -> bool:
    """
    True iff placing `token` at line[index] forms a run of >= min_run with the
    contiguous equal neighbours on both sides. Empty (None) cells stop a run.
    """
    n = 1
    i = index - 1
    while i >= 0 and line[i] == token:
        n += 1
        i -= 1
    i = index + 1
    while i < len(line) and line[i] == token:
        n += 1
        i += 1
    return n >= min_run


def find_matches(grid: Grid) -> list[Match]:
    """
    Run-length scan, one pass per axis (columns first, then rows).

    Each maximal run of >= MIN_RUN identical tokens is reported exactly once
    per axis; the scan pointer jumps past a recorded run. A cell may belong to
    one COL match and one ROW match.
    """
    cells = grid.cells
    w, h = grid.width, grid.height
    matches: list[Match] = []

    for x in range(w):
        y = 0
        while y < h:
            v = int(cells[x, y])
            if v == EMPTY_CELL:
                y += 1
                continue
            n = 1
            while y + n < h and int(cells[x, y + n]) == v:
                n += 1
            if n >= MIN_RUN:
                run = tuple((x, y + i) for i in range(n))
                matches.append(Match(token=grid.palette[v - 1], axis=Axis.COL, cells=run))
            y += n

    for y in range(h):
        x = 0
        while x < w:
            v = int(cells[x, y])
            if v == EMPTY_CELL:
                x += 1
                continue
            n = 1
            while x + n < w and int(cells[x + n, y]) == v:
                n += 1
            if n >= MIN_RUN:
                run = tuple((x + i, y) for i in range(n))
                matches.append(Match(token=grid.palette[v - 1], axis=Axis.ROW, cells=run))
            x += n

    return matches


def has_matches(grid: Grid) -> bool:
    return bool(find_matches(grid))


# ---- generation --------------------------------------------------------------------


def generate(width: int, height: int, *, source: "InfluenceSource") -> Grid:
    """
    Build a full grid with no run of MIN_RUN anywhere (given >= 3 usable types).

    Fill order is column-major: column 0 top-to-bottom, then column 1, ...
    so only the neighbours above and to the left are known at each step.
    Every cell goes through InfluenceSource.choose(); the manual queue is not
    consumed by generation.
    """
    grid = Grid.empty(width=width, height=height, palette=source.token_types)
    degenerate: list[Coord] = []

    for x in range(grid.width):
        for y in range(grid.height):
            col_line = grid.column(x)
            row_line = grid.row(y)

            def rejects(t: TokenType) -> bool:
                return would_complete_run(col_line, y, t) or would_complete_run(row_line, x, t)

            token = source.choose(rejects, use_queue=False)
            if rejects(token):
                degenerate.append((x, y))
            grid.set_token(x, y, token)

    if degenerate:
        LOG.warning(
            "[grid] generated %dx%d board with %d unavoidable run cell(s) (palette=%d): %s",
            grid.width,
            grid.height,
            len(degenerate),
            len(grid.palette),
            degenerate[:8],
        )
    return grid


# ---- moves -------------------------------------------------------------------------


def line_length(grid: Grid, axis: Axis) -> int:
    return grid.width if Axis(axis) is Axis.ROW else grid.height


def move_in_bounds(grid: Grid, move: MoveAction) -> bool:
    axis = Axis(move.axis)
    limit = grid.height if axis is Axis.ROW else grid.width
    return 0 <= int(move.index) < limit


def apply_shift(grid: Grid, move: MoveAction) -> bool:
    """
    Rotate one row/column in place with wraparound.

    Returns True iff the grid changed. An out-of-range index or an amount that
    normalizes to 0 is a no-op (False); callers decide whether to report it.
    """
    axis = Axis(move.axis)
    if not move_in_bounds(grid, move):
        return False

    length = line_length(grid, axis)
    shift = int(move.amount) % length
    if shift == 0:
        return False

    i = int(move.index)
    if axis is Axis.ROW:
        grid.cells[:, i] = np.roll(grid.cells[:, i], shift)
    else:
        grid.cells[i, :] = np.roll(grid.cells[i, :], shift)
    return True


# ---- commit ------------------------------------------------------------------------


def remove_and_compact(
    grid: Grid,
    cells_to_clear: Iterable[Coord],
    replacements_by_col: Mapping[int, Sequence[TokenType]],
) -> None:
    """
    Remove cleared cells and refill each column from the top.

    Per column: final = replacements ++ survivors, survivors keeping their
    original top-to-bottom order. The number of replacements must equal the
    number of cleared cells in that column; any mismatch is an internal
    invariant violation and raises RuntimeError before the grid is touched.
    """
    cleared_rows: dict[int, set[int]] = {}
    for c, r in cells_to_clear:
        c, r = int(c), int(r)
        if not grid.in_bounds(c, r):
            raise RuntimeError(f"cleared cell {(c, r)} outside {grid.width}x{grid.height} grid")
        cleared_rows.setdefault(c, set()).add(r)

    unknown_cols = [int(c) for c in replacements_by_col if not 0 <= int(c) < grid.width]
    if unknown_cols:
        raise RuntimeError(f"replacements for columns outside grid: {sorted(unknown_cols)}")

    out = grid.cells.copy()
    for x in range(grid.width):
        rows = cleared_rows.get(x, set())
        new_tokens = tuple(replacements_by_col.get(x, ()))
        if len(new_tokens) != len(rows):
            raise RuntimeError(
                f"column {x}: {len(rows)} cleared cell(s) but {len(new_tokens)} replacement(s)"
            )
        if not rows:
            continue

        survivors = [int(v) for y, v in enumerate(grid.cells[x, :]) if y not in rows]
        column = [grid.token_id(t) for t in new_tokens] + survivors
        if len(column) != grid.height:
            raise RuntimeError(f"column {x}: length {len(column)} after commit, expected {grid.height}")
        out[x, :] = np.asarray(column, dtype=np.uint8)

    grid.cells = out


__all__ = [
    "Grid",
    "apply_shift",
    "find_matches",
    "generate",
    "has_matches",
    "line_length",
    "move_in_bounds",
    "remove_and_compact",
    "would_complete_run",
]
