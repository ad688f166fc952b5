"""Board representation: piece placement, FEN input/output and derived state."""

from __future__ import annotations

from dataclasses import dataclass, field

from chesscore import psqt, zobrist
from chesscore.attacks import (
    DARK_SQUARES,
    FILE_BB,
    RANK_BB,
    attacks,
    between,
    iter_squares,
    lsb,
    pawn_attacks,
    popcount,
    square_bb,
)
from chesscore.types import (
    COLOR_NB,
    MASK64,
    PIECE_NB,
    PIECE_TYPE_NB,
    RANK_1,
    SQ_A1,
    SQ_A8,
    SQ_C1,
    SQ_D1,
    SQ_F1,
    SQ_G1,
    SQ_H1,
    SQ_NONE,
    SQUARE_NB,
    CASTLING_RIGHT_NB,
    MG,
    PIECE_VALUE,
    CastlingRights,
    Color,
    Piece,
    PieceType,
    castling_for,
    color_of,
    eg_value,
    file_of,
    make_key,
    make_piece,
    make_square,
    pawn_push,
    rank_of,
    relative_rank,
    relative_square,
    square_name,
    type_of,
)

PIECE_TO_CHAR = " PNBRQK  pnbrqk"

_BOARD_LINE = " +---+---+---+---+---+---+---+---+\n"

_SINGLE_RIGHTS = frozenset({
    CastlingRights.WHITE_OO, CastlingRights.WHITE_OOO,
    CastlingRights.BLACK_OO, CastlingRights.BLACK_OOO,
})

_ALL_PIECES = (
    Piece.W_PAWN, Piece.W_KNIGHT, Piece.W_BISHOP, Piece.W_ROOK, Piece.W_QUEEN, Piece.W_KING,
    Piece.B_PAWN, Piece.B_KNIGHT, Piece.B_BISHOP, Piece.B_ROOK, Piece.B_QUEEN, Piece.B_KING,
)


@dataclass
class StateInfo:
    """Everything needed to restore a position when a move is taken back."""

    pawn_key: int = 0
    material_key: int = 0
    non_pawn_material: list[int] = field(default_factory=lambda: [0] * COLOR_NB)
    castling_rights: int = 0
    rule50: int = 0
    plies_from_null: int = 0
    ep_square: int = SQ_NONE

    key: int = 0
    checkers_bb: int = 0
    previous: StateInfo | None = field(default=None, repr=False, compare=False)
    blockers_for_king: list[int] = field(default_factory=lambda: [0] * COLOR_NB)
    pinners: list[int] = field(default_factory=lambda: [0] * COLOR_NB)
    check_squares: list[int] = field(default_factory=lambda: [0] * PIECE_TYPE_NB)
    captured_piece: Piece = Piece.NO_PIECE
    repetition: int = 0

    def carry_over(self) -> StateInfo:
        """A new state holding the fields kept across a move, linked to this one."""
        return StateInfo(
            pawn_key=self.pawn_key,
            material_key=self.material_key,
            non_pawn_material=list(self.non_pawn_material),
            castling_rights=self.castling_rights,
            rule50=self.rule50,
            plies_from_null=self.plies_from_null,
            ep_square=self.ep_square,
            previous=self,
        )


def _count_index(color: Color, piece_type: int) -> int:
    return (int(color) << 3) + int(piece_type)


class Board:
    """Piece placement plus the state that is derived from it."""

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self._board: list[Piece] = [Piece.NO_PIECE] * SQUARE_NB
        self._by_type: list[int] = [0] * PIECE_TYPE_NB
        self._by_color: list[int] = [0] * COLOR_NB
        self._piece_count: list[int] = [0] * PIECE_NB
        self._castling_rights_mask: list[int] = [0] * SQUARE_NB
        self._castling_rook_square: list[int] = [SQ_NONE] * CASTLING_RIGHT_NB
        self._castling_path: list[int] = [0] * CASTLING_RIGHT_NB
        self._st = StateInfo()
        self._game_ply = 0
        self._side_to_move = Color.WHITE
        self._psq = 0
        self._chess960 = False

    # ------------------------------------------------------------------ FEN

    @classmethod
    def from_fen(cls, fen: str, chess960: bool = False):
        """A new board set up from a FEN string."""
        board = cls()
        board.set_fen(fen, chess960)
        return board

    def set_fen(self, fen: str, chess960: bool = False):
        """Set up the position described by a FEN (or Shredder/X-FEN) string."""
        self._reset()
        fields = fen.split()
        placement = fields[0] if fields else ""
        active = fields[1] if len(fields) > 1 else ""
        castling = fields[2] if len(fields) > 2 else ""
        ep_field = fields[3] if len(fields) > 3 else ""
        halfmove = int(fields[4]) if len(fields) > 4 else 0
        fullmove = int(fields[5]) if len(fields) > 5 else 0

        sq = SQ_A8
        for token in placement:
            if token.isdigit():
                sq += int(token)
            elif token == "/":
                sq -= 16
            else:
                idx = PIECE_TO_CHAR.find(token)
                if idx > 0 and token != " ":
                    if not 0 <= sq < SQUARE_NB:
                        raise ValueError(f"piece placement runs off the board: {placement!r}")
                    self.put_piece(Piece(idx), sq)
                    sq += 1

        for color in Color:
            if self.count(PieceType.KING, color) != 1:
                raise ValueError(f"FEN must hold exactly one {color.name.lower()} king")

        self._side_to_move = Color.WHITE if active == "w" else Color.BLACK

        for token in castling:
            color = Color.BLACK if token.islower() else Color.WHITE
            rook = make_piece(color, PieceType.ROOK)
            upper = token.upper()
            if upper == "K":
                candidates = range(relative_square(color, SQ_H1),
                                   relative_square(color, SQ_A1) - 1, -1)
            elif upper == "Q":
                candidates = range(relative_square(color, SQ_A1),
                                   relative_square(color, SQ_H1) + 1)
            elif "A" <= upper <= "H":
                candidates = range(0)
                rsq = make_square(ord(upper) - ord("A"), relative_rank(color, RANK_1))
                self._set_castling_right(color, rsq)
                continue
            else:
                continue
            rsq = next((s for s in candidates if self._board[s] == rook), None)
            if rsq is None:
                raise ValueError(f"no rook for castling right {token!r}")
            self._set_castling_right(color, rsq)

        st = self._st
        stm = self._side_to_move
        enpassant = False
        if (len(ep_field) >= 2 and "a" <= ep_field[0] <= "h"
                and ep_field[1] == ("6" if stm == Color.WHITE else "3")):
            ep = make_square(ord(ep_field[0]) - ord("a"), int(ep_field[1]) - 1)
            st.ep_square = ep
            enpassant = bool(
                pawn_attacks(~stm, ep) & self.pieces_of(stm, PieceType.PAWN)
                and self.pieces_of(~stm, PieceType.PAWN) & square_bb(ep + pawn_push(~stm))
                and not self.pieces() & (square_bb(ep) | square_bb(ep + pawn_push(stm)))
            )
        if not enpassant:
            st.ep_square = SQ_NONE

        st.rule50 = halfmove
        self._game_ply = max(2 * (fullmove - 1), 0) + (stm == Color.BLACK)
        self._chess960 = chess960
        self._set_state(st)
        return self

    def set_endgame(self, code: str, color: Color):
        """Set up a material-only position from an endgame code such as 'KBPKN'.

        The side named first is the strong side; `color` is the colour it gets.
        """
        if not code or code[0] != "K":
            raise ValueError(f"endgame code must start with 'K': {code!r}")
        second_king = code.find("K", 1)
        if second_king < 0:
            raise ValueError(f"endgame code needs two kings: {code!r}")
        v_pos = code.find("v")
        strong_end = min(v_pos if v_pos >= 0 else len(code), second_king)
        sides = [code[second_king:], code[:strong_end]]
        for side in sides:
            if not 0 < len(side) < 8:
                raise ValueError(f"invalid endgame code: {code!r}")
        sides[int(color)] = sides[int(color)].lower()
        fen = (f"8/{sides[0]}{8 - len(sides[0])}/8/8/8/8/"
               f"{sides[1]}{8 - len(sides[1])}/8 w - - 0 10")
        return self.set_fen(fen, False)

    def fen(self) -> str:
        """FEN of the position; Shredder-FEN castling letters in Chess960."""
        rows = []
        for rank in range(7, -1, -1):
            row = ""
            empty = 0
            for file in range(8):
                pc = self._board[make_square(file, rank)]
                if pc == Piece.NO_PIECE:
                    empty += 1
                    continue
                if empty:
                    row += str(empty)
                    empty = 0
                row += PIECE_TO_CHAR[pc]
            if empty:
                row += str(empty)
            rows.append(row)

        rights = ""
        for cr, letter, base in (
            (CastlingRights.WHITE_OO, "K", "A"),
            (CastlingRights.WHITE_OOO, "Q", "A"),
            (CastlingRights.BLACK_OO, "k", "a"),
            (CastlingRights.BLACK_OOO, "q", "a"),
        ):
            if self.can_castle(cr):
                if self._chess960:
                    rights += chr(ord(base) + file_of(self.castling_rook_square(cr)))
                else:
                    rights += letter
        if not self.can_castle(CastlingRights.ANY_CASTLING):
            rights = "-"

        ep = self.ep_square()
        ep_text = "-" if ep == SQ_NONE else square_name(ep)
        side = "w" if self._side_to_move == Color.WHITE else "b"
        fullmove = 1 + (self._game_ply - (self._side_to_move == Color.BLACK)) // 2
        return f"{'/'.join(rows)} {side} {rights} {ep_text} {self._st.rule50} {fullmove}"

    def __str__(self) -> str:
        lines = ["\n", _BOARD_LINE]
        for rank in range(7, -1, -1):
            for file in range(8):
                lines.append(" | " + PIECE_TO_CHAR[self._board[make_square(file, rank)]])
            lines.append(f" | {rank + 1}\n{_BOARD_LINE}")
        lines.append("   a   b   c   d   e   f   g   h\n")
        lines.append(f"\nFen: {self.fen()}\nKey: {self.key():016X}\nCheckers: ")
        lines.extend(f"{square_name(s)} " for s in iter_squares(self.checkers()))
        return "".join(lines)

    # ------------------------------------------------------- setup helpers

    def _set_castling_right(self, color: Color, rfrom: int) -> None:
        kfrom = self.king_square(color)
        side = CastlingRights.KING_SIDE if kfrom < rfrom else CastlingRights.QUEEN_SIDE
        cr = int(castling_for(color, side))

        self._st.castling_rights |= cr
        self._castling_rights_mask[kfrom] |= cr
        self._castling_rights_mask[rfrom] |= cr
        self._castling_rook_square[cr] = rfrom

        king_side = bool(cr & CastlingRights.KING_SIDE)
        kto = relative_square(color, SQ_G1 if king_side else SQ_C1)
        rto = relative_square(color, SQ_F1 if king_side else SQ_D1)
        self._castling_path[cr] = ((between(rfrom, rto) | between(kfrom, kto))
                                   & ~(square_bb(kfrom) | square_bb(rfrom)) & MASK64)

    def _set_check_info(self, si: StateInfo) -> None:
        si.blockers_for_king[Color.WHITE], si.pinners[Color.BLACK] = self.slider_blockers(
            self.pieces_of(Color.BLACK), self.king_square(Color.WHITE))
        si.blockers_for_king[Color.BLACK], si.pinners[Color.WHITE] = self.slider_blockers(
            self.pieces_of(Color.WHITE), self.king_square(Color.BLACK))

        them = ~self._side_to_move
        ksq = self.king_square(them)
        occupied = self.pieces()
        bishop = attacks(PieceType.BISHOP, ksq, occupied)
        rook = attacks(PieceType.ROOK, ksq, occupied)
        squares = [0] * PIECE_TYPE_NB
        squares[PieceType.PAWN] = pawn_attacks(them, ksq)
        squares[PieceType.KNIGHT] = attacks(PieceType.KNIGHT, ksq)
        squares[PieceType.BISHOP] = bishop
        squares[PieceType.ROOK] = rook
        squares[PieceType.QUEEN] = bishop | rook
        si.check_squares = squares

    def _set_state(self, si: StateInfo) -> None:
        si.key = 0
        si.material_key = 0
        si.pawn_key = zobrist.NO_PAWNS
        si.non_pawn_material = [0] * COLOR_NB
        stm = self._side_to_move
        si.checkers_bb = self.attackers_to(self.king_square(stm)) & self.pieces_of(~stm)

        self._set_check_info(si)

        for s in iter_squares(self.pieces()):
            pc = self._board[s]
            si.key ^= zobrist.PSQ[pc][s]
            pt = type_of(pc)
            if pt == PieceType.PAWN:
                si.pawn_key ^= zobrist.PSQ[pc][s]
            elif pt != PieceType.KING:
                si.non_pawn_material[color_of(pc)] += PIECE_VALUE[MG][pc]

        if si.ep_square != SQ_NONE:
            si.key ^= zobrist.ENPASSANT[file_of(si.ep_square)]
        if stm == Color.BLACK:
            si.key ^= zobrist.SIDE
        si.key ^= zobrist.CASTLING[si.castling_rights]

        for pc in _ALL_PIECES:
            for cnt in range(self._piece_count[pc]):
                si.material_key ^= zobrist.PSQ[pc][cnt]

    def _adjust_key50(self, key: int, after_move: bool) -> int:
        limit = 14 - int(after_move)
        rule50 = self._st.rule50
        return key if rule50 < limit else key ^ make_key((rule50 - limit) // 8)

    # ------------------------------------------------------- representation

    def pieces(self, *args: PieceType) -> int:
        """Occupied squares, optionally restricted to some piece types."""
        if not args:
            return self._by_type[PieceType.ALL_PIECES]
        bb = 0
        for pt in args:
            bb |= self._by_type[pt]
        return bb

    def pieces_of(self, color: Color, *args: PieceType) -> int:
        """Squares of one colour, optionally restricted to some piece types."""
        bb = self._by_color[color]
        return bb & self.pieces(*args) if args else bb

    def piece_on(self, square: int) -> Piece:
        return self._board[square]

    def is_empty(self, square: int) -> bool:
        return self._board[square] == Piece.NO_PIECE

    def ep_square(self) -> int:
        return self._st.ep_square

    def count(self, piece_type: PieceType, color: Color | None = None) -> int:
        """Number of pieces of a type, for one colour or for both."""
        if color is None:
            return sum(self._piece_count[_count_index(c, piece_type)] for c in Color)
        return self._piece_count[_count_index(color, piece_type)]

    def king_square(self, color: Color) -> int:
        kings = self.pieces_of(color, PieceType.KING)
        if not kings:
            raise ValueError(f"no {color.name.lower()} king on the board")
        return lsb(kings)

    def is_on_semiopen_file(self, color: Color, square: int) -> bool:
        return not self.pieces_of(color, PieceType.PAWN) & FILE_BB[file_of(square)]

    # ------------------------------------------------------------- castling

    def castling_rights(self, color: Color) -> CastlingRights:
        return castling_for(color, self._st.castling_rights)

    def can_castle(self, rights: int) -> bool:
        return bool(self._st.castling_rights & int(rights))

    @staticmethod
    def _check_single_right(rights: int) -> int:
        if rights not in _SINGLE_RIGHTS:
            raise ValueError(f"expected a single castling right, got {rights!r}")
        return int(rights)

    def castling_impeded(self, rights: int) -> bool:
        return bool(self.pieces() & self._castling_path[self._check_single_right(rights)])

    def castling_rook_square(self, rights: int) -> int:
        return self._castling_rook_square[self._check_single_right(rights)]

    # ------------------------------------------------------------- checking

    def checkers(self) -> int:
        return self._st.checkers_bb

    def blockers_for_king(self, color: Color) -> int:
        return self._st.blockers_for_king[color]

    def pinners(self, color: Color) -> int:
        return self._st.pinners[color]

    def check_squares(self, piece_type: PieceType) -> int:
        return self._st.check_squares[piece_type]

    # -------------------------------------------------------------- attacks

    def attackers_to(self, square: int, occupied: int | None = None) -> int:
        """All pieces of both colours attacking a square, given an occupancy."""
        if occupied is None:
            occupied = self.pieces()
        return (
            (pawn_attacks(Color.BLACK, square) & self.pieces_of(Color.WHITE, PieceType.PAWN))
            | (pawn_attacks(Color.WHITE, square) & self.pieces_of(Color.BLACK, PieceType.PAWN))
            | (attacks(PieceType.KNIGHT, square) & self.pieces(PieceType.KNIGHT))
            | (attacks(PieceType.ROOK, square, occupied)
               & self.pieces(PieceType.ROOK, PieceType.QUEEN))
            | (attacks(PieceType.BISHOP, square, occupied)
               & self.pieces(PieceType.BISHOP, PieceType.QUEEN))
            | (attacks(PieceType.KING, square) & self.pieces(PieceType.KING))
        )

    def slider_blockers(self, sliders: int, square: int) -> tuple[int, int]:
        """Pieces shielding `square` from `sliders`, and the sliders pinning them.

        Returns (blockers, pinners); pinners only counts sliders whose blocker
        has the colour of the piece on `square`.
        """
        blockers = 0
        pinners = 0
        snipers = ((attacks(PieceType.ROOK, square)
                    & self.pieces(PieceType.QUEEN, PieceType.ROOK))
                   | (attacks(PieceType.BISHOP, square)
                      & self.pieces(PieceType.QUEEN, PieceType.BISHOP))) & sliders
        occupancy = self.pieces() ^ snipers
        for sniper in iter_squares(snipers):
            b = between(square, sniper) & occupancy
            if b and not b & (b - 1):
                blockers |= b
                if b & self.pieces_of(color_of(self._board[square])):
                    pinners |= square_bb(sniper)
        return blockers, pinners

    def attacks_by(self, piece_type: PieceType, color: Color) -> int:
        """Union of the squares attacked by all pieces of a type and colour."""
        threats = 0
        if piece_type == PieceType.PAWN:
            for s in iter_squares(self.pieces_of(color, PieceType.PAWN)):
                threats |= pawn_attacks(color, s)
            return threats
        occupied = self.pieces()
        for s in iter_squares(self.pieces_of(color, piece_type)):
            threats |= attacks(piece_type, s, occupied)
        return threats

    # --------------------------------------------------------- piece moving

    def put_piece(self, piece: Piece, square: int) -> None:
        bb = square_bb(square)
        color = color_of(piece)
        self._board[square] = piece
        self._by_type[PieceType.ALL_PIECES] |= bb
        self._by_type[type_of(piece)] |= bb
        self._by_color[color] |= bb
        self._piece_count[piece] += 1
        self._piece_count[_count_index(color, PieceType.ALL_PIECES)] += 1
        self._psq += psqt.psq_score(piece, square)

    def remove_piece(self, square: int) -> None:
        piece = self._board[square]
        if piece == Piece.NO_PIECE:
            raise ValueError(f"no piece on {square_name(square)}")
        bb = square_bb(square)
        color = color_of(piece)
        self._by_type[PieceType.ALL_PIECES] ^= bb
        self._by_type[type_of(piece)] ^= bb
        self._by_color[color] ^= bb
        self._board[square] = Piece.NO_PIECE
        self._piece_count[piece] -= 1
        self._piece_count[_count_index(color, PieceType.ALL_PIECES)] -= 1
        self._psq -= psqt.psq_score(piece, square)

    def move_piece(self, origin: int, target: int) -> None:
        piece = self._board[origin]
        if piece == Piece.NO_PIECE:
            raise ValueError(f"no piece on {square_name(origin)}")
        from_to = square_bb(origin) | square_bb(target)
        self._by_type[PieceType.ALL_PIECES] ^= from_to
        self._by_type[type_of(piece)] ^= from_to
        self._by_color[color_of(piece)] ^= from_to
        self._board[origin] = Piece.NO_PIECE
        self._board[target] = piece
        self._psq += psqt.psq_score(piece, target) - psqt.psq_score(piece, origin)

    # ----------------------------------------------------------- hash keys

    def key(self) -> int:
        """Position key, perturbed once the fifty-move counter grows large."""
        return self._adjust_key50(self._st.key, False)

    def pawn_key(self) -> int:
        return self._st.pawn_key

    def material_key(self) -> int:
        return self._st.material_key

    # ------------------------------------------------------ other properties

    def psq_score(self) -> int:
        return self._psq

    def psq_eg_stm(self) -> int:
        sign = 1 if self._side_to_move == Color.WHITE else -1
        return sign * eg_value(self._psq)

    def non_pawn_material(self, color: Color | None = None) -> int:
        if color is None:
            return sum(self._st.non_pawn_material)
        return self._st.non_pawn_material[color]

    def side_to_move(self) -> Color:
        return self._side_to_move

    def game_ply(self) -> int:
        return self._game_ply

    def rule50_count(self) -> int:
        return self._st.rule50

    def is_chess960(self) -> bool:
        return self._chess960

    def pawn_passed(self, color: Color, square: int) -> bool:
        """True when no enemy pawn can stop or capture a pawn on its way forward."""
        rank = rank_of(square)
        ahead = range(rank + 1, 8) if color == Color.WHITE else range(rank)
        ranks = 0
        for r in ahead:
            ranks |= RANK_BB[r]
        file = file_of(square)
        files = FILE_BB[file]
        if file > 0:
            files |= FILE_BB[file - 1]
        if file < 7:
            files |= FILE_BB[file + 1]
        return not self.pieces_of(~color, PieceType.PAWN) & ranks & files

    def opposite_bishops(self) -> bool:
        if (self.count(PieceType.BISHOP, Color.WHITE) != 1
                or self.count(PieceType.BISHOP, Color.BLACK) != 1):
            return False
        white = square_bb(lsb(self.pieces_of(Color.WHITE, PieceType.BISHOP)))
        black = square_bb(lsb(self.pieces_of(Color.BLACK, PieceType.BISHOP)))
        return bool(white & DARK_SQUARES) != bool(black & DARK_SQUARES)

    def pawns_on_same_color_squares(self, color: Color, square: int) -> int:
        shade = DARK_SQUARES if DARK_SQUARES & square_bb(square) else ~DARK_SQUARES & MASK64
        return popcount(self.pieces_of(color, PieceType.PAWN) & shade)