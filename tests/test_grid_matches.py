# tests/test_grid_matches.py
from __future__ import annotations

from gemshift.game.core.grid import Grid, find_matches, has_matches, would_complete_run
from gemshift.game.core.types import Axis, TokenType

R, G, B, Y, P, O = (
    TokenType.RED,
    TokenType.GREEN,
    TokenType.BLUE,
    TokenType.YELLOW,
    TokenType.PURPLE,
    TokenType.ORANGE,
)


def test_single_column_run_is_reported_once() -> None:
    grid = Grid.from_columns(
        [
            [R, R, R, B, G],
            [G, B, Y, P, O],
            [B, Y, P, O, R],
        ]
    )
    matches = find_matches(grid)
    assert len(matches) == 1
    m = matches[0]
    assert m.cells == ((0, 0), (0, 1), (0, 2))
    assert m.token is R
    assert m.axis is Axis.COL


def test_long_run_is_one_match_not_overlapping_triples() -> None:
    grid = Grid.from_columns([[B, B, B, B, B]])
    matches = find_matches(grid)
    assert len(matches) == 1
    assert len(matches[0]) == 5


def test_two_runs_in_one_row() -> None:
    grid = Grid.from_columns([[R], [R], [R], [B], [B], [B]])
    matches = find_matches(grid)
    assert [m.cells for m in matches] == [
        ((0, 0), (1, 0), (2, 0)),
        ((3, 0), (4, 0), (5, 0)),
    ]
    assert all(m.axis is Axis.ROW for m in matches)


def test_cell_can_belong_to_row_and_column_match() -> None:
    grid = Grid.from_columns(
        [
            [G, R, B],
            [R, R, R],
            [B, R, G],
        ]
    )
    matches = find_matches(grid)
    assert len(matches) == 2
    axes = {m.axis for m in matches}
    assert axes == {Axis.ROW, Axis.COL}
    assert all((1, 1) in m for m in matches)


def test_empty_cells_break_runs() -> None:
    grid = Grid.from_columns([[R, R, None, R, R]])
    assert not has_matches(grid)


def test_pairs_are_not_matches() -> None:
    grid = Grid.from_columns(
        [
            [R, R, G, G],
            [B, B, Y, Y],
        ]
    )
    assert find_matches(grid) == []


def test_would_complete_run_counts_both_sides() -> None:
    line = [R, R, None, R, B]
    assert would_complete_run(line, 2, R)
    assert not would_complete_run(line, 2, B)
    assert would_complete_run([None, G, G], 0, G)
    assert not would_complete_run([G, None, G], 1, B)
