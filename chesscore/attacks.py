"""Bitboard helpers and attack sets for every piece type."""

from __future__ import annotations

from collections.abc import Iterator

from chesscore.types import (
    EAST,
    MASK64,
    NORTH,
    NORTH_EAST,
    NORTH_WEST,
    SOUTH,
    SOUTH_EAST,
    SOUTH_WEST,
    SQUARE_NB,
    WEST,
    Color,
    PieceType,
    file_of,
    rank_of,
)

ALL_SQUARES = MASK64
FILE_A_BB = 0x0101010101010101
RANK_1_BB = 0xFF
FILE_BB: tuple[int, ...] = tuple(FILE_A_BB << f for f in range(8))
RANK_BB: tuple[int, ...] = tuple(RANK_1_BB << (8 * r) for r in range(8))
RANK_8_BB = RANK_BB[7]
DARK_SQUARES = 0xAA55AA55AA55AA55

_KNIGHT_STEPS = (17, 15, 10, 6, -6, -10, -15, -17)
_KING_STEPS = (9, 8, 7, 1, -1, -7, -8, -9)
_ROOK_DIRECTIONS = (NORTH, SOUTH, EAST, WEST)
_BISHOP_DIRECTIONS = (NORTH_EAST, SOUTH_EAST, SOUTH_WEST, NORTH_WEST)


def _destination(square: int, step: int) -> int | None:
    """Target of a single step, or None if it leaves the board or wraps."""
    target = square + step
    if not 0 <= target < SQUARE_NB:
        return None
    distance = max(abs(file_of(square) - file_of(target)),
                   abs(rank_of(square) - rank_of(target)))
    return target if distance <= 2 else None


def _leaper_table(steps: tuple[int, ...]) -> tuple[int, ...]:
    table = []
    for sq in range(SQUARE_NB):
        bb = 0
        for step in steps:
            target = _destination(sq, step)
            if target is not None:
                bb |= 1 << target
        table.append(bb)
    return tuple(table)


def _ray(square: int, direction: int) -> tuple[int, ...]:
    squares = []
    current = _destination(square, direction)
    while current is not None:
        squares.append(current)
        current = _destination(current, direction)
    return tuple(squares)


_RAYS: dict[int, tuple[tuple[int, ...], ...]] = {
    d: tuple(_ray(sq, d) for sq in range(SQUARE_NB))
    for d in _ROOK_DIRECTIONS + _BISHOP_DIRECTIONS
}

_KNIGHT = _leaper_table(_KNIGHT_STEPS)
_KING = _leaper_table(_KING_STEPS)
_PAWN = (
    _leaper_table((NORTH_WEST, NORTH_EAST)),
    _leaper_table((SOUTH_WEST, SOUTH_EAST)),
)


def _slide(directions: tuple[int, ...], square: int, occupied: int) -> int:
    bb = 0
    for direction in directions:
        for target in _RAYS[direction][square]:
            bb |= 1 << target
            if (occupied >> target) & 1:
                break
    return bb


def square_bb(square: int) -> int:
    """Bitboard with only the given square set."""
    if not 0 <= square < SQUARE_NB:
        raise ValueError(f"invalid square: {square}")
    return 1 << square


def popcount(bb: int) -> int:
    """Number of squares set in a bitboard."""
    return (bb & MASK64).bit_count()


def lsb(bb: int) -> int:
    """Index of the least significant set square."""
    bb &= MASK64
    if not bb:
        raise ValueError("empty bitboard has no least significant square")
    return (bb & -bb).bit_length() - 1


def iter_squares(bb: int) -> Iterator[int]:
    """Yield the set squares of a bitboard from lowest to highest."""
    bb &= MASK64
    while bb:
        low = bb & -bb
        yield low.bit_length() - 1
        bb ^= low


def pawn_attacks(color: Color, square: int) -> int:
    """Squares a pawn of the given colour on the square attacks."""
    return _PAWN[int(color)][square]


def attacks(piece_type: PieceType, square: int, occupied: int = 0) -> int:
    """Attack set of a non-pawn piece; sliders stop at occupied squares."""
    if piece_type == PieceType.KNIGHT:
        return _KNIGHT[square]
    if piece_type == PieceType.KING:
        return _KING[square]
    if piece_type == PieceType.BISHOP:
        return _slide(_BISHOP_DIRECTIONS, square, occupied)
    if piece_type == PieceType.ROOK:
        return _slide(_ROOK_DIRECTIONS, square, occupied)
    if piece_type == PieceType.QUEEN:
        return (_slide(_BISHOP_DIRECTIONS, square, occupied)
                | _slide(_ROOK_DIRECTIONS, square, occupied))
    raise ValueError(f"no colour-independent attacks for {piece_type!r}")


def _build_lines() -> tuple[list[list[int]], list[list[int]]]:
    line = [[0] * SQUARE_NB for _ in range(SQUARE_NB)]
    between_table = [[0] * SQUARE_NB for _ in range(SQUARE_NB)]
    rook_empty = [attacks(PieceType.ROOK, s) for s in range(SQUARE_NB)]
    bishop_empty = [attacks(PieceType.BISHOP, s) for s in range(SQUARE_NB)]
    for s1 in range(SQUARE_NB):
        for s2 in range(SQUARE_NB):
            b2 = 1 << s2
            for pt, empty in ((PieceType.BISHOP, bishop_empty),
                              (PieceType.ROOK, rook_empty)):
                if empty[s1] & b2:
                    line[s1][s2] = (empty[s1] & empty[s2]) | (1 << s1) | b2
                    between_table[s1][s2] = (attacks(pt, s1, b2)
                                             & attacks(pt, s2, 1 << s1))
            between_table[s1][s2] |= b2
    return line, between_table


_LINE, _BETWEEN = _build_lines()


def between(a: int, b: int) -> int:
    """Squares strictly between a and b on a shared line, plus b itself.

    When a and b share no line, only b is set.
    """
    return _BETWEEN[a][b]


def aligned(a: int, b: int, c: int) -> bool:
    """True when c lies on the full line through a and b."""
    return bool(_LINE[a][b] & (1 << c))