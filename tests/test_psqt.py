import pytest

from chesscore.psqt import build_psq, psq_score
from chesscore.types import (
    KNIGHT_VALUE_EG,
    KNIGHT_VALUE_MG,
    PAWN_VALUE_EG,
    PAWN_VALUE_MG,
    SQ_A1,
    SQ_E1,
    Piece,
    eg_value,
    flip_file,
    flip_piece,
    flip_rank,
    make_score,
    mg_value,
)

WHITE = [Piece.W_PAWN, Piece.W_KNIGHT, Piece.W_BISHOP, Piece.W_ROOK, Piece.W_QUEEN, Piece.W_KING]


@pytest.mark.parametrize("piece", WHITE)
def test_black_is_negated_mirror(piece):
    for sq in range(64):
        assert psq_score(flip_piece(piece), flip_rank(sq)) == -psq_score(piece, sq)


@pytest.mark.parametrize("piece", WHITE[1:])
def test_non_pawns_are_file_symmetric(piece):
    for sq in range(64):
        assert psq_score(piece, sq) == psq_score(piece, flip_file(sq))


def test_pawn_table_is_not_file_symmetric():
    assert any(
        psq_score(Piece.W_PAWN, sq) != psq_score(Piece.W_PAWN, flip_file(sq))
        for sq in range(8, 56)
    )


def test_pawn_on_back_rank_is_pure_material():
    assert psq_score(Piece.W_PAWN, SQ_A1) == make_score(PAWN_VALUE_MG, PAWN_VALUE_EG)
    assert mg_value(psq_score(Piece.W_PAWN, 60)) == PAWN_VALUE_MG


def test_knight_corner_value():
    s = psq_score(Piece.W_KNIGHT, SQ_A1)
    assert mg_value(s) == KNIGHT_VALUE_MG - 175
    assert eg_value(s) == KNIGHT_VALUE_EG - 96


def test_king_has_no_material():
    s = psq_score(Piece.W_KING, SQ_E1)
    assert mg_value(s) == 198
    assert eg_value(s) == 76


def test_unused_piece_codes_are_zero():
    table = build_psq()
    assert len(table) == 16
    for code in (0, 7, 8, 15):
        assert all(v == 0 for v in table[code])


def test_build_matches_lookup():
    table = build_psq()
    for pc in WHITE:
        for sq in range(64):
            assert table[pc][sq] == psq_score(pc, sq)
            assert len(table[pc]) == 64


def test_white_values_positive_midgame_for_minors():
    for sq in range(64):
        assert mg_value(psq_score(Piece.W_KNIGHT, sq)) > 0
        assert mg_value(psq_score(Piece.B_KNIGHT, sq)) < 0