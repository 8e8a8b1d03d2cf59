# src/gemshift/game/presentation/contract.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from gemshift.game.core.phase import FallMove, PhaseResult
from gemshift.game.core.types import Coord, MoveAction


class PresentationContract(ABC):
    """
    Obligations of the visual layer driven by CascadeDriver.

    Per committed phase the calls arrive strictly in this order:

      commit_move(move)        once per applied move (move phases only)
      animate_removals(cells)  every matched cell of the phase
      animate_falls(moves)     every surviving token that moves + every spawn
      phase_done(phase)        the driver may now request the next cascade

    Each method returns only once its animation has completed; returning is the
    completion signal. The visual layer keeps its own array of renderables and
    is synchronized only through these payloads.
    """

    @abstractmethod
    def commit_move(self, move: MoveAction) -> None:
        raise NotImplementedError

    @abstractmethod
    def animate_removals(self, cells: Sequence[Coord]) -> None:
        raise NotImplementedError

    @abstractmethod
    def animate_falls(self, moves: Sequence[FallMove]) -> None:
        raise NotImplementedError

    def phase_done(self, phase: PhaseResult) -> None:
        return None

    def revert_move(self, move: MoveAction) -> None:
        """Move rejected before reaching the engine: snap the dragged line back."""
        return None


__all__ = ["PresentationContract"]
