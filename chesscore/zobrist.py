"""Zobrist hashing keys and the cuckoo tables of reversible piece moves."""

from __future__ import annotations

import random

from chesscore.attacks import attacks
from chesscore.types import (
    CASTLING_RIGHT_NB,
    FILE_NB,
    MOVE_NONE,
    PIECE_NB,
    SQUARE_NB,
    Piece,
    PieceType,
    make_move,
    type_of,
)

CUCKOO_SIZE = 8192

_PIECES = (
    Piece.W_PAWN, Piece.W_KNIGHT, Piece.W_BISHOP, Piece.W_ROOK, Piece.W_QUEEN, Piece.W_KING,
    Piece.B_PAWN, Piece.B_KNIGHT, Piece.B_BISHOP, Piece.B_ROOK, Piece.B_QUEEN, Piece.B_KING,
)


def _generate_keys():
    rng = random.Random(1070372)
    psq = [[0] * SQUARE_NB for _ in range(PIECE_NB)]
    for pc in _PIECES:
        for sq in range(SQUARE_NB):
            psq[pc][sq] = rng.getrandbits(64)
    enpassant = tuple(rng.getrandbits(64) for _ in range(FILE_NB))
    castling = tuple(rng.getrandbits(64) for _ in range(CASTLING_RIGHT_NB))
    side = rng.getrandbits(64)
    no_pawns = rng.getrandbits(64)
    return tuple(tuple(row) for row in psq), enpassant, castling, side, no_pawns


PSQ, ENPASSANT, CASTLING, SIDE, NO_PAWNS = _generate_keys()


def h1(key: int) -> int:
    """First cuckoo slot of a key."""
    return key & 0x1FFF


def h2(key: int) -> int:
    """Second cuckoo slot of a key."""
    return (key >> 16) & 0x1FFF


def _build_cuckoo() -> tuple[list[int], list[int], int]:
    keys = [0] * CUCKOO_SIZE
    moves = [MOVE_NONE] * CUCKOO_SIZE
    count = 0
    for pc in _PIECES:
        pt = type_of(pc)
        if pt == PieceType.PAWN:
            continue
        for s1 in range(SQUARE_NB):
            reach = attacks(pt, s1, 0)
            for s2 in range(s1 + 1, SQUARE_NB):
                if not reach & (1 << s2):
                    continue
                move = make_move(s1, s2)
                key = PSQ[pc][s1] ^ PSQ[pc][s2] ^ SIDE
                slot = h1(key)
                for _ in range(CUCKOO_SIZE * 4):
                    keys[slot], key = key, keys[slot]
                    moves[slot], move = move, moves[slot]
                    if move == MOVE_NONE:
                        break
                    slot = h2(key) if slot == h1(key) else h1(key)
                else:
                    raise RuntimeError("cuckoo table insertion did not terminate")
                count += 1
    return keys, moves, count


_CUCKOO_KEYS, _CUCKOO_MOVES, _CUCKOO_COUNT = _build_cuckoo()
CUCKOO = tuple(_CUCKOO_KEYS)
CUCKOO_MOVE = tuple(_CUCKOO_MOVES)


def cuckoo_lookup(key: int) -> int | None:
    """The reversible move whose key difference is `key`, or None."""
    for slot in (h1(key), h2(key)):
        if CUCKOO[slot] == key and CUCKOO_MOVE[slot] != MOVE_NONE:
            return CUCKOO_MOVE[slot]
    return None


def cuckoo_size() -> int:
    """Number of reversible moves stored in the cuckoo tables."""
    return _CUCKOO_COUNT