import pytest

from chesscore.attacks import (
    aligned,
    attacks,
    between,
    iter_squares,
    lsb,
    pawn_attacks,
    popcount,
    square_bb,
)
from chesscore.types import Color, PieceType, make_square

A1 = make_square(0, 0)
A3 = make_square(0, 2)
A4 = make_square(0, 3)
B2 = make_square(1, 1)
B3 = make_square(1, 2)
C2 = make_square(2, 1)
E4 = make_square(4, 3)
E5 = make_square(4, 4)
D5 = make_square(3, 4)
F5 = make_square(5, 4)
H8 = make_square(7, 7)

ALL = range(64)


def test_square_bb_round_trip():
    for sq in ALL:
        assert lsb(square_bb(sq)) == sq
        assert popcount(square_bb(sq)) == 1


def test_square_bb_rejects_bad_square():
    with pytest.raises(ValueError):
        square_bb(64)


def test_lsb_of_empty_raises():
    with pytest.raises(ValueError):
        lsb(0)


def test_iter_squares_order_and_contents():
    bb = square_bb(H8) | square_bb(A1) | square_bb(E4)
    assert list(iter_squares(bb)) == [A1, E4, H8]
    assert list(iter_squares(0)) == []


def test_knight_in_corner():
    assert attacks(PieceType.KNIGHT, A1) == square_bb(B3) | square_bb(C2)


def test_white_pawn_attacks_from_e4():
    assert pawn_attacks(Color.WHITE, E4) == square_bb(D5) | square_bb(F5)


def test_pawn_attacks_are_mirrored_between_colours():
    for s in ALL:
        for t in iter_squares(pawn_attacks(Color.WHITE, s)):
            assert s in set(iter_squares(pawn_attacks(Color.BLACK, t)))


def test_leaper_attacks_are_symmetric():
    for pt in (PieceType.KNIGHT, PieceType.KING):
        for s in ALL:
            for t in iter_squares(attacks(pt, s)):
                assert s in set(iter_squares(attacks(pt, t)))


def test_queen_is_rook_plus_bishop():
    occ = square_bb(E4) | square_bb(D5) | square_bb(B2)
    for s in ALL:
        assert attacks(PieceType.QUEEN, s, occ) == (
            attacks(PieceType.ROOK, s, occ) | attacks(PieceType.BISHOP, s, occ))


def test_rook_stops_at_blocker():
    squares = set(iter_squares(attacks(PieceType.ROOK, A1, square_bb(A3))))
    assert A3 in squares
    assert A4 not in squares
    assert A1 not in squares


def test_king_attacks_within_queen_attacks():
    for s in ALL:
        king = attacks(PieceType.KING, s)
        assert king & ~attacks(PieceType.QUEEN, s) == 0
        assert popcount(king) <= 8


def test_pawn_has_no_generic_attacks():
    with pytest.raises(ValueError):
        attacks(PieceType.PAWN, E4)


def test_between_contains_target_and_lies_on_line():
    for a in ALL:
        for b in ALL:
            bb = between(a, b)
            assert b in set(iter_squares(bb))
            if aligned(a, b, b) and a != b:
                for s in iter_squares(bb):
                    assert aligned(a, b, s)


def test_between_unaligned_is_only_target():
    assert between(A1, B3) == square_bb(B3)
    assert not aligned(A1, B3, C2)


def test_diagonal_between_excludes_origin():
    squares = set(iter_squares(between(A1, H8)))
    assert A1 not in squares
    assert B2 in squares
    assert aligned(A1, H8, E5)
    assert not aligned(A1, H8, E4)


def test_between_is_symmetric_apart_from_endpoints():
    for a in ALL:
        for b in ALL:
            inner_ab = between(a, b) & ~square_bb(b)
            inner_ba = between(b, a) & ~square_bb(a)
            assert inner_ab == inner_ba