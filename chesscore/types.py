"""Core chess types, constants and the bit-level encodings used throughout."""

from __future__ import annotations

from enum import IntEnum, IntFlag

MAX_MOVES = 256
MAX_PLY = 246

MASK64 = (1 << 64) - 1

# Moves are plain integers of 16 bits:
#   bits 0-5   destination square
#   bits 6-11  origin square
#   bits 12-13 promotion piece type minus KNIGHT
#   bits 14-15 special move flag
MOVE_NONE = 0
MOVE_NULL = 65

FILE_NB = 8
RANK_NB = 8
SQUARE_NB = 64
COLOR_NB = 2
PIECE_TYPE_NB = 8
PIECE_NB = 16
CASTLING_RIGHT_NB = 16

SQ_A1, SQ_B1, SQ_C1, SQ_D1, SQ_E1, SQ_F1, SQ_G1, SQ_H1 = range(8)
SQ_A8, SQ_H8 = 56, 63
SQ_NONE = 64

FILE_A, FILE_H = 0, 7
RANK_1, RANK_2, RANK_3, RANK_6, RANK_7, RANK_8 = 0, 1, 2, 5, 6, 7

NORTH = 8
EAST = 1
SOUTH = -NORTH
WEST = -EAST
NORTH_EAST = NORTH + EAST
SOUTH_EAST = SOUTH + EAST
SOUTH_WEST = SOUTH + WEST
NORTH_WEST = NORTH + WEST

MG = 0
EG = 1
PHASE_ENDGAME = 0
PHASE_MIDGAME = 128

SCALE_FACTOR_DRAW = 0
SCALE_FACTOR_NORMAL = 64
SCALE_FACTOR_MAX = 128
SCALE_FACTOR_NONE = 255

VALUE_ZERO = 0
VALUE_DRAW = 0
VALUE_KNOWN_WIN = 10000
VALUE_MATE = 32000
VALUE_INFINITE = 32001
VALUE_NONE = 32002

VALUE_TB_WIN_IN_MAX_PLY = VALUE_MATE - 2 * MAX_PLY
VALUE_TB_LOSS_IN_MAX_PLY = -VALUE_TB_WIN_IN_MAX_PLY
VALUE_MATE_IN_MAX_PLY = VALUE_MATE - MAX_PLY
VALUE_MATED_IN_MAX_PLY = -VALUE_MATE_IN_MAX_PLY

PAWN_VALUE_MG, PAWN_VALUE_EG = 126, 208
KNIGHT_VALUE_MG, KNIGHT_VALUE_EG = 781, 854
BISHOP_VALUE_MG, BISHOP_VALUE_EG = 825, 915
ROOK_VALUE_MG, ROOK_VALUE_EG = 1276, 1380
QUEEN_VALUE_MG, QUEEN_VALUE_EG = 2538, 2682

MIDGAME_LIMIT = 15258
ENDGAME_LIMIT = 3915

DEPTH_QS_CHECKS = 0
DEPTH_QS_NO_CHECKS = -1
DEPTH_QS_RECAPTURES = -5
DEPTH_NONE = -6
DEPTH_OFFSET = -7


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    def __invert__(self) -> "Color":
        return Color(self ^ 1)


class PieceType(IntEnum):
    NO_PIECE_TYPE = 0
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6
    ALL_PIECES = 0


class Piece(IntEnum):
    NO_PIECE = 0
    W_PAWN = 1
    W_KNIGHT = 2
    W_BISHOP = 3
    W_ROOK = 4
    W_QUEEN = 5
    W_KING = 6
    B_PAWN = 9
    B_KNIGHT = 10
    B_BISHOP = 11
    B_ROOK = 12
    B_QUEEN = 13
    B_KING = 14


class MoveType(IntEnum):
    NORMAL = 0
    PROMOTION = 1 << 14
    EN_PASSANT = 2 << 14
    CASTLING = 3 << 14


class CastlingRights(IntFlag):
    NO_CASTLING = 0
    WHITE_OO = 1
    WHITE_OOO = 2
    BLACK_OO = 4
    BLACK_OOO = 8
    KING_SIDE = WHITE_OO | BLACK_OO
    QUEEN_SIDE = WHITE_OOO | BLACK_OOO
    WHITE_CASTLING = WHITE_OO | WHITE_OOO
    BLACK_CASTLING = BLACK_OO | BLACK_OOO
    ANY_CASTLING = WHITE_CASTLING | BLACK_CASTLING


class Bound(IntFlag):
    NONE = 0
    UPPER = 1
    LOWER = 2
    EXACT = UPPER | LOWER


# Material values indexed by [phase][piece].
PIECE_VALUE: tuple[tuple[int, ...], tuple[int, ...]] = (
    (VALUE_ZERO, PAWN_VALUE_MG, KNIGHT_VALUE_MG, BISHOP_VALUE_MG, ROOK_VALUE_MG,
     QUEEN_VALUE_MG, VALUE_ZERO, VALUE_ZERO) * 2,
    (VALUE_ZERO, PAWN_VALUE_EG, KNIGHT_VALUE_EG, BISHOP_VALUE_EG, ROOK_VALUE_EG,
     QUEEN_VALUE_EG, VALUE_ZERO, VALUE_ZERO) * 2,
)

_FILE_LETTERS = "abcdefgh"


def make_square(file: int, rank: int) -> int:
    """Square index from file and rank (both 0-7)."""
    return (rank << 3) + file


def file_of(square: int) -> int:
    return square & 7


def rank_of(square: int) -> int:
    return square >> 3


def is_ok_square(square: int) -> bool:
    return SQ_A1 <= square <= SQ_H8


def relative_square(color: Color, square: int) -> int:
    """The square as seen from the given side's point of view."""
    return square ^ (int(color) * 56)


def relative_rank(color: Color, rank: int) -> int:
    return rank ^ (int(color) * 7)


def flip_rank(square: int) -> int:
    """Mirror vertically: A1 <-> A8."""
    return square ^ SQ_A8


def flip_file(square: int) -> int:
    """Mirror horizontally: A1 <-> H1."""
    return square ^ SQ_H1


def square_name(square: int) -> str:
    """Algebraic name such as 'e4'."""
    if not is_ok_square(square):
        raise ValueError(f"invalid square: {square}")
    return f"{_FILE_LETTERS[file_of(square)]}{rank_of(square) + 1}"


def make_piece(color: Color, piece_type: PieceType) -> Piece:
    """Coloured piece; raises ValueError when the combination is no piece."""
    return Piece((int(color) << 3) + int(piece_type))


def type_of(piece: Piece) -> PieceType:
    return PieceType(int(piece) & 7)


def color_of(piece: Piece) -> Color:
    if piece == Piece.NO_PIECE:
        raise ValueError("an empty square has no colour")
    return Color(int(piece) >> 3)


def flip_piece(piece: Piece) -> Piece:
    """Same piece type with the other colour."""
    return Piece(int(piece) ^ 8)


def pawn_push(color: Color) -> int:
    return NORTH if color == Color.WHITE else SOUTH


def castling_for(color: Color, rights: int) -> CastlingRights:
    """The part of the given rights that belongs to one side."""
    side = (CastlingRights.WHITE_CASTLING if color == Color.WHITE
            else CastlingRights.BLACK_CASTLING)
    return CastlingRights(side & int(rights))


def make_move(origin: int, target: int) -> int:
    return (origin << 6) + target


def make_special(kind: MoveType, origin: int, target: int,
                 promotion: PieceType = PieceType.KNIGHT) -> int:
    """Encode a promotion, en passant or castling move."""
    return int(kind) + ((int(promotion) - PieceType.KNIGHT) << 12) + (origin << 6) + target


def from_sq(move: int) -> int:
    return (move >> 6) & 0x3F


def to_sq(move: int) -> int:
    return move & 0x3F


def from_to(move: int) -> int:
    return move & 0xFFF


def move_type(move: int) -> MoveType:
    return MoveType(move & (3 << 14))


def promotion_type(move: int) -> PieceType:
    return PieceType(((move >> 12) & 3) + PieceType.KNIGHT)


def is_ok_move(move: int) -> bool:
    """False for MOVE_NONE and MOVE_NULL, whose origin equals destination."""
    return from_sq(move) != to_sq(move)


def mate_in(ply: int) -> int:
    return VALUE_MATE - ply


def mated_in(ply: int) -> int:
    return -VALUE_MATE + ply


def _to_int16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def make_score(mg: int, eg: int) -> int:
    """Pack a middlegame and an endgame value into one integer."""
    return (eg << 16) + mg


def mg_value(score: int) -> int:
    return _to_int16(score)


def eg_value(score: int) -> int:
    return _to_int16((score + 0x8000) >> 16)


def make_key(seed: int) -> int:
    """64-bit key derived from a seed by a linear congruential step."""
    return (seed * 6364136223846793005 + 1442695040888963407) & MASK64