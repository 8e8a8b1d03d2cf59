# tests/test_phase.py
from __future__ import annotations

import pytest

from gemshift.game.core.phase import FallMove, PhaseResult
from gemshift.game.core.types import DEFAULT_TOKEN_TYPES, Axis, Match, MoveAction

R, G, B, Y, P, O = DEFAULT_TOKEN_TYPES


def test_nothing_to_do() -> None:
    phase = PhaseResult.nothing(moves=(MoveAction.row(0, 1),))
    assert phase.is_nothing_to_do()
    assert not phase.is_cascade
    assert phase.cleared_cells() == ()
    assert phase.fall_plan(5) == []
    assert PhaseResult().is_cascade


def test_cleared_cells_are_unique_across_axes() -> None:
    phase = PhaseResult(
        matches=(
            Match(token=R, axis=Axis.COL, cells=((1, 0), (1, 1), (1, 2))),
            Match(token=R, axis=Axis.ROW, cells=((0, 1), (1, 1), (2, 1))),
        ),
        replacements={0: (G,), 1: (B, Y, P), 2: (O,)},
    )
    assert phase.cleared_cells() == ((0, 1), (1, 0), (1, 1), (1, 2), (2, 1))
    assert phase.cleared_per_column() == {0: 1, 1: 3, 2: 1}
    assert phase.spawn_count() == 5


def test_fall_plan_moves_survivors_below_spawns() -> None:
    phase = PhaseResult(
        matches=(Match(token=R, axis=Axis.ROW, cells=((0, 1), (0, 3))),),
        replacements={0: (O, R)},
    )
    plan = phase.fall_plan(5)
    assert FallMove(col=0, from_row=0, to_row=2) in plan
    assert FallMove(col=0, from_row=2, to_row=3) in plan
    # row 4 survivor does not move
    assert all(m.from_row != 4 for m in plan)
    spawned = [m for m in plan if m.spawned]
    assert spawned == [
        FallMove(col=0, from_row=-2, to_row=0, token=O),
        FallMove(col=0, from_row=-1, to_row=1, token=R),
    ]


def test_fall_plan_rejects_inconsistent_payload() -> None:
    phase = PhaseResult(
        matches=(Match(token=R, axis=Axis.COL, cells=((0, 0), (0, 1), (0, 2))),),
        replacements={0: (G,)},
    )
    with pytest.raises(RuntimeError, match="replacement"):
        phase.fall_plan(4)


def test_payload_containers_are_read_only() -> None:
    replacements = {0: [G, Y, B]}
    match = Match(token=R, axis=Axis.COL, cells=((0, 0), (0, 1), (0, 2)))
    phase = PhaseResult(matches=[match], replacements=replacements)  # type: ignore[arg-type]

    assert phase.matches == (match,)
    assert phase.replacements[0] == (G, Y, B)
    with pytest.raises(TypeError):
        phase.replacements[0] = (R,)  # type: ignore[index]

    # later edits to the caller's dict do not leak into the payload
    replacements[0] = [R]
    assert phase.replacements[0] == (G, Y, B)
