# src/gemshift/game/core/influence.py
from __future__ import annotations

from collections import deque
from typing import Callable, Iterable, Mapping, Optional, Sequence

import numpy as np

from gemshift.game.core.types import TokenType
from gemshift.utils.logging import setup_logger

LOG = setup_logger(name="gemshift.game.core.influence", use_rich=True, level="info")

# Land-cover style category codes -> token type.
DEFAULT_CATEGORY_MAP: dict[int, TokenType] = {
    10: TokenType.GREEN,  # tree cover
    20: TokenType.YELLOW,  # shrubland
    30: TokenType.YELLOW,  # grassland
    40: TokenType.ORANGE,  # cropland
    50: TokenType.RED,  # built-up
    60: TokenType.ORANGE,  # bare / sparse vegetation
    70: TokenType.PURPLE,  # snow and ice
    80: TokenType.BLUE,  # permanent water
    90: TokenType.BLUE,  # herbaceous wetland
    95: TokenType.GREEN,  # mangroves
    100: TokenType.PURPLE,  # moss and lichen
}


def _as_category(code: object) -> Optional[int]:
    if isinstance(code, bool):
        return None
    if isinstance(code, (int, np.integer)):
        return int(code)
    if isinstance(code, (float, np.floating)):
        f = float(code)
        if f.is_integer():
            return int(f)
    return None


class InfluenceSource:
    """
    Token type selection shared by board generation and replacement spawns.

    Precedence:
      1) manual queue (FIFO), used for scripted/testing scenarios
      2) influence weights derived from external category codes
      3) uniform random over the palette

    Notes:
      - The RNG is injected (numpy Generator) so boards are reproducible.
      - Influence never excludes a type; it only orders the preference. Types
        with zero weight are still reachable as fallbacks.
    """

    def __init__(
        self,
        token_types: Sequence[TokenType],
        *,
        rng: np.random.Generator,
        category_map: Mapping[int, TokenType] | None = None,
    ) -> None:
        types = tuple(dict.fromkeys(TokenType(t) for t in token_types))
        if not types:
            raise ValueError("InfluenceSource requires at least one token type")
        self.token_types: tuple[TokenType, ...] = types
        self._rng = rng
        self._category_map: dict[int, TokenType] = dict(
            DEFAULT_CATEGORY_MAP if category_map is None else category_map
        )
        self._weights: dict[TokenType, float] = {}
        self._queue: deque[TokenType] = deque()

    # ---- influence -----------------------------------------------------------------

    def set_influence(self, codes: Iterable[object] | None) -> bool:
        """
        Replace the current weighting. Returns True iff any code mapped to a
        palette type (i.e. influence is active afterwards).
        """
        self._weights = {}
        if codes is None:
            return False

        counts: dict[TokenType, float] = {}
        ignored = 0
        for raw in codes:
            cat = _as_category(raw)
            token = self._category_map.get(cat) if cat is not None else None
            if token is None or token not in self.token_types:
                ignored += 1
                continue
            counts[token] = counts.get(token, 0.0) + 1.0

        if ignored:
            LOG.debug("[influence] ignored %d unmapped/invalid category codes", ignored)
        if not counts:
            LOG.info("[influence] no usable category codes; falling back to uniform selection")
            return False

        self._weights = counts
        return True

    def clear_influence(self) -> None:
        self._weights = {}

    def has_influence(self) -> bool:
        return bool(self._weights)

    def weights(self) -> dict[TokenType, float]:
        """Normalized selection probabilities over the palette (uniform if no influence)."""
        if not self._weights:
            p = 1.0 / len(self.token_types)
            return {t: p for t in self.token_types}
        total = float(sum(self._weights.values()))
        return {t: float(self._weights.get(t, 0.0)) / total for t in self.token_types}

    # ---- manual queue --------------------------------------------------------------

    def queue(self, types: Iterable[TokenType]) -> None:
        for t in types:
            token = TokenType(t)
            if token not in self.token_types:
                raise ValueError(f"cannot queue {token.value!r}: not in palette {[x.value for x in self.token_types]}")
            self._queue.append(token)

    def clear_queue(self) -> None:
        self._queue.clear()

    def pending(self) -> tuple[TokenType, ...]:
        return tuple(self._queue)

    # ---- selection -----------------------------------------------------------------

    def _pool(self, candidates: Sequence[TokenType] | None) -> list[TokenType]:
        if candidates is None:
            return list(self.token_types)
        pool = [t for t in dict.fromkeys(TokenType(c) for c in candidates) if t in self.token_types]
        if not pool:
            raise ValueError("candidate list has no token type from the palette")
        return pool

    def _draw(self, pool: Sequence[TokenType]) -> TokenType:
        if self._weights:
            w = np.asarray([self._weights.get(t, 0.0) for t in pool], dtype=np.float64)
            total = float(w.sum())
            if total > 0.0:
                i = int(self._rng.choice(len(pool), p=w / total))
                return pool[i]
        i = int(self._rng.integers(0, len(pool)))
        return pool[i]

    def pick_token_type(self, candidates: Sequence[TokenType] | None = None) -> TokenType:
        """
        Single pick: queued token if any, else an influence-weighted draw from
        candidates (default: whole palette), else a uniform draw.
        """
        if self._queue:
            return self._queue.popleft()
        return self._draw(self._pool(candidates))

    def preference_order(self, candidates: Sequence[TokenType] | None = None) -> list[TokenType]:
        """
        Influence/random first pick followed by the remaining candidates in
        shuffled order. Never consumes the manual queue.
        """
        pool = self._pool(candidates)
        first = self._draw(pool)
        rest = [t for t in pool if t != first]
        self._rng.shuffle(rest)
        return [first, *rest]

    def choose(self, rejects: Callable[[TokenType], bool], *, use_queue: bool = True) -> TokenType:
        """
        Selection routine used for both generation and replacement.

          - use_queue=True and a queued token exists -> that token, unchecked
          - else the first preference not rejected
          - if every type is rejected -> the first preference (degenerate palette),
            logged as a warning
        """
        if use_queue and self._queue:
            return self._queue.popleft()

        order = self.preference_order()
        for t in order:
            if not rejects(t):
                return t

        LOG.warning(
            "[influence] every token type completes a run (palette=%d); keeping %s",
            len(self.token_types),
            order[0].value,
        )
        return order[0]


__all__ = ["DEFAULT_CATEGORY_MAP", "InfluenceSource"]
