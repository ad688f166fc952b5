"""Search bookkeeping: root moves and the limits a search runs under."""

from __future__ import annotations

from dataclasses import dataclass, field

from chesscore.types import VALUE_INFINITE, VALUE_ZERO, Color


class RootMove:
    """A move at the root with its score and principal variation."""

    def __init__(self, move: int) -> None:
        self.pv: list[int] = [move]
        self.score = -VALUE_INFINITE
        self.previous_score = -VALUE_INFINITE
        self.average_score = -VALUE_INFINITE
        self.uci_score = -VALUE_INFINITE
        self.score_lowerbound = False
        self.score_upperbound = False
        self.sel_depth = 0
        self.tb_rank = 0
        self.tb_score = VALUE_ZERO

    def __eq__(self, other: object) -> bool:
        if isinstance(other, int):
            return self.pv[0] == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: RootMove) -> bool:
        # Ordering puts better moves first: higher score, then higher previous score.
        if not isinstance(other, RootMove):
            return NotImplemented
        if other.score != self.score:
            return other.score < self.score
        return other.previous_score < self.previous_score

    def __repr__(self) -> str:
        return f"RootMove(pv={self.pv!r}, score={self.score})"


RootMoves = list[RootMove]


@dataclass
class SearchLimits:
    """Time, depth and node limits received for a search."""

    searchmoves: list[int] = field(default_factory=list)
    time: list[int] = field(default_factory=lambda: [0, 0])
    inc: list[int] = field(default_factory=lambda: [0, 0])
    npmsec: int = 0
    movetime: int = 0
    start_time: int = 0
    movestogo: int = 0
    depth: int = 0
    mate: int = 0
    perft: int = 0
    infinite: bool = False
    nodes: int = 0

    def use_time_management(self) -> bool:
        return bool(self.time[Color.WHITE] or self.time[Color.BLACK])