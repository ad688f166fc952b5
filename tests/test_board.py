import pytest

from chesscore import zobrist
from chesscore.attacks import RANK_BB, attacks, popcount, square_bb
from chesscore.board import Board, StateInfo
from chesscore.types import (
    SQ_A1,
    SQ_B1,
    SQ_G1,
    SQ_H1,
    SQ_NONE,
    CastlingRights,
    Color,
    Piece,
    PieceType,
    make_key,
    make_square,
)

START = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
CHESS960 = "bqnb1rkr/pp3ppp/3ppn2/2p5/5P2/P2P4/NPP1P1PP/BQ1BNRKR w HFhf - 2 9"


@pytest.mark.parametrize("fen", [
    START,
    KIWIPETE,
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 b kq - 3 17",
])
def test_fen_round_trip(fen):
    assert Board.from_fen(fen).fen() == fen


def test_chess960_round_trip_uses_rook_files():
    board = Board.from_fen(CHESS960, chess960=True)
    assert board.fen() == CHESS960
    assert board.is_chess960()
    assert board.castling_rook_square(CastlingRights.WHITE_OO) == SQ_H1


def test_en_passant_kept_when_capture_possible():
    fen = "rnbqkbnr/ppp1pppp/8/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3"
    board = Board.from_fen(fen)
    assert board.ep_square() == make_square(3, 5)
    assert board.fen() == fen


def test_en_passant_dropped_without_capturer():
    fen = "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2"
    board = Board.from_fen(fen)
    assert board.ep_square() == SQ_NONE
    assert board.fen() == fen.replace(" d6 ", " - ")


def test_side_to_move_toggles_side_key():
    white = Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    black = Board.from_fen("4k3/8/8/8/8/8/8/4K3 b - - 0 1")
    assert white.key() ^ black.key() == zobrist.SIDE


def test_rule50_perturbs_key():
    fresh = Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    late = Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 14 1")
    assert late.key() == fresh.key() ^ make_key(0)
    assert late.rule50_count() == 14


def test_pawnless_pawn_key():
    board = Board.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    assert board.pawn_key() == zobrist.NO_PAWNS


def test_material_key_ignores_placement():
    a = Board.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    b = Board.from_fen("4k3/8/8/3R4/8/8/8/4K3 w - - 0 1")
    assert a.material_key() == b.material_key()
    assert a.key() != b.key()


def test_start_position_is_symmetric():
    board = Board.from_fen(START)
    assert board.psq_score() == 0
    assert board.psq_eg_stm() == 0
    assert board.non_pawn_material(Color.WHITE) == board.non_pawn_material(Color.BLACK)
    assert board.non_pawn_material() == 2 * board.non_pawn_material(Color.WHITE)
    assert popcount(board.pieces()) == board.count(PieceType.ALL_PIECES)
    assert board.count(PieceType.PAWN, Color.WHITE) == board.count(PieceType.PAWN, Color.BLACK)
    assert board.pieces(PieceType.PAWN) == RANK_BB[1] | RANK_BB[6]


def test_attacks_by():
    board = Board.from_fen(START)
    knights = attacks(PieceType.KNIGHT, SQ_B1) | attacks(PieceType.KNIGHT, SQ_G1)
    assert board.attacks_by(PieceType.KNIGHT, Color.WHITE) == knights
    assert board.attacks_by(PieceType.PAWN, Color.WHITE) == RANK_BB[2]


def test_checkers_and_display():
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K2r w - - 0 1")
    assert board.checkers() == square_bb(SQ_H1)
    text = str(board)
    assert "Checkers: h1 " in text
    assert f"Fen: {board.fen()}" in text
    assert f"Key: {board.key():016X}" in text


def test_pins_are_detected():
    board = Board.from_fen("4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1")
    e2, e7 = make_square(4, 1), make_square(4, 6)
    assert board.blockers_for_king(Color.WHITE) == square_bb(e2)
    assert board.pinners(Color.BLACK) == square_bb(e7)
    blockers, pinners = board.slider_blockers(board.pieces_of(Color.BLACK),
                                              board.king_square(Color.WHITE))
    assert (blockers, pinners) == (square_bb(e2), square_bb(e7))


def test_check_squares_match_attacks():
    board = Board.from_fen(KIWIPETE)
    ksq = board.king_square(Color.BLACK)
    assert board.check_squares(PieceType.KNIGHT) == attacks(PieceType.KNIGHT, ksq)
    assert board.check_squares(PieceType.QUEEN) == (
        board.check_squares(PieceType.BISHOP) | board.check_squares(PieceType.ROOK))


def test_castling_information():
    start = Board.from_fen(START)
    assert start.castling_rook_square(CastlingRights.WHITE_OOO) == SQ_A1
    assert start.castling_impeded(CastlingRights.WHITE_OO)
    assert start.castling_rights(Color.WHITE) == CastlingRights.WHITE_CASTLING
    kiwi = Board.from_fen(KIWIPETE)
    assert not kiwi.castling_impeded(CastlingRights.WHITE_OO)
    assert not kiwi.castling_impeded(CastlingRights.BLACK_OOO)


def test_castling_queries_need_single_right():
    board = Board.from_fen(START)
    with pytest.raises(ValueError):
        board.castling_rook_square(CastlingRights.ANY_CASTLING)
    with pytest.raises(ValueError):
        board.castling_impeded(CastlingRights.WHITE_CASTLING)


def test_missing_king_is_rejected():
    with pytest.raises(ValueError):
        Board.from_fen("8/8/8/8/8/8/8/8 w - - 0 1")


def test_castling_without_rook_is_rejected():
    with pytest.raises(ValueError):
        Board.from_fen("4k3/8/8/8/8/8/8/4K3 w K - 0 1")


def test_fullmove_zero_is_tolerated():
    assert Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 0").game_ply() == 0
    black = Board.from_fen("4k3/8/8/8/8/8/8/4K3 b - - 0 0")
    assert black.game_ply() == 1
    assert black.side_to_move() == Color.BLACK


def test_set_endgame():
    board = Board()
    board.set_endgame("KBPKN", Color.WHITE)
    assert board.fen() == "8/kn6/8/8/8/8/KBP5/8 w - - 0 10"
    other = Board().set_endgame("KBPvKN", Color.WHITE)
    assert other.material_key() == board.material_key()


def test_set_endgame_rejects_bad_code():
    with pytest.raises(ValueError):
        Board().set_endgame("QK", Color.WHITE)


def test_put_and_remove_restore_board():
    board = Board.from_fen(KIWIPETE)
    psq, occupied = board.psq_score(), board.pieces()
    square = make_square(3, 3)
    board.put_piece(Piece.W_QUEEN, square)
    assert board.piece_on(square) == Piece.W_QUEEN
    board.remove_piece(square)
    assert board.is_empty(square)
    assert (board.psq_score(), board.pieces()) == (psq, occupied)


def test_move_piece_updates_sets():
    board = Board.from_fen(START)
    e2, e4 = make_square(4, 1), make_square(4, 3)
    board.move_piece(e2, e4)
    assert board.piece_on(e4) == Piece.W_PAWN
    assert board.is_empty(e2)
    assert board.pieces_of(Color.WHITE, PieceType.PAWN) & square_bb(e4)
    with pytest.raises(ValueError):
        board.remove_piece(e2)


def test_pawn_structure_queries():
    passed = Board.from_fen("4k3/8/8/3P4/8/8/8/4K3 w - - 0 1")
    d5 = make_square(3, 4)
    assert passed.pawn_passed(Color.WHITE, d5)
    assert passed.is_on_semiopen_file(Color.BLACK, d5)
    blocked = Board.from_fen("4k3/4p3/8/3P4/8/8/8/4K3 w - - 0 1")
    assert not blocked.pawn_passed(Color.WHITE, d5)

    start = Board.from_fen(START)
    dark = start.pawns_on_same_color_squares(Color.WHITE, SQ_A1)
    light = start.pawns_on_same_color_squares(Color.WHITE, SQ_B1)
    assert dark + light == start.count(PieceType.PAWN, Color.WHITE)


def test_opposite_bishops():
    assert Board.from_fen("4k3/8/8/8/8/8/8/2B1Kb2 w - - 0 1").opposite_bishops()
    assert not Board.from_fen("4kb2/8/8/8/8/8/8/2B1K3 w - - 0 1").opposite_bishops()


def test_state_carry_over_links_previous():
    board = Board.from_fen(KIWIPETE)
    state = board._st
    nxt = state.carry_over()
    assert nxt.previous is state
    assert nxt.castling_rights == state.castling_rights
    assert nxt.checkers_bb == StateInfo().checkers_bb