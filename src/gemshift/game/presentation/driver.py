# src/gemshift/game/presentation/driver.py
from __future__ import annotations

from typing import Optional

from gemshift.game.core.constants import DEFAULT_MAX_CASCADES
from gemshift.game.core.engine import PuzzleEngine
from gemshift.game.core.phase import PhaseResult
from gemshift.game.core.types import Match, MoveAction
from gemshift.game.presentation.contract import PresentationContract
from gemshift.utils.logging import setup_logger

LOG = setup_logger(name="gemshift.game.presentation.driver", use_rich=True, level="info")


class CascadeDriver:
    """
    Thin driver that owns the cascade loop and the in-flight flag.

    Contracts:
      - submit() is rejected (RuntimeError) while a previous sequence is in flight;
        input is "disabled" from submission until the chain settles.
      - For every non-empty phase: removals -> falls -> phase_done, each
        awaited (returned) before the next phase is computed.
      - A chain longer than max_cascades cascade phases is a bug and raises
        RuntimeError before the next phase is committed, so engine and
        presentation stay in sync.
      - require_match=True turns no-match moves into presentation-only reverts:
        the engine is never invoked for them.
    """

    def __init__(
            self,
            engine: PuzzleEngine,
            presentation: PresentationContract,
            *,
            max_cascades: int = DEFAULT_MAX_CASCADES,
            require_match: bool = False,
    ) -> None:
        if int(max_cascades) <= 0:
            raise ValueError(f"max_cascades must be positive, got {max_cascades}")
        self.engine = engine
        self.presentation = presentation
        self.max_cascades = int(max_cascades)
        self.require_match = bool(require_match)

        self.last_cascade_depth = 0
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def preview(self, move: MoveAction) -> list[Match]:
        return self.engine.preview_matches(move)

    def submit(self, move: Optional[MoveAction]) -> list[PhaseResult]:
        """
        Run one move (or None to just settle the board) through the engine and
        the presentation. Returns the non-empty phases in commit order.
        """
        if self._busy:
            raise RuntimeError("move submitted while a phase sequence is still animating")

        self._busy = True
        try:
            if move is not None and self.require_match and not self.engine.preview_matches(move):
                LOG.debug("[driver] move %s produces no match; reverting", move)
                self.presentation.revert_move(move)
                self.last_cascade_depth = 0
                return []

            moves = () if move is None else (move,)
            phase = self.engine.advance(moves)
            for m in phase.moves:
                self.presentation.commit_move(m)

            phases: list[PhaseResult] = []
            depth = 0
            while not phase.is_nothing_to_do():
                self._play(phase)
                phases.append(phase)

                if not self.engine.is_settled():
                    depth += 1
                    if depth > self.max_cascades:
                        raise RuntimeError(
                            f"cascade did not settle within {self.max_cascades} phases"
                        )
                phase = self.engine.advance(())

            self.last_cascade_depth = depth
            if phases:
                LOG.debug("[driver] settled after %d phase(s), cascade depth %d", len(phases), depth)
            return phases
        finally:
            self._busy = False

    def _play(self, phase: PhaseResult) -> None:
        self.presentation.animate_removals(phase.cleared_cells())
        self.presentation.animate_falls(phase.fall_plan(self.engine.height))
        self.presentation.phase_done(phase)


__all__ = ["CascadeDriver"]
