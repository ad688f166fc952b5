"""Making and unmaking moves, legality tests, exchange evaluation and repetition detection."""

from __future__ import annotations

from chesscore import zobrist
from chesscore.attacks import (
    RANK_8_BB,
    RANK_BB,
    aligned,
    attacks,
    between,
    pawn_attacks,
    popcount,
    square_bb,
)
from chesscore.board import Board, StateInfo
from chesscore.types import (
    MG,
    PIECE_VALUE,
    RANK_1,
    RANK_6,
    SQ_C1,
    SQ_D1,
    SQ_F1,
    SQ_G1,
    SQ_NONE,
    VALUE_ZERO,
    EAST,
    WEST,
    CastlingRights,
    Color,
    MoveType,
    Piece,
    PieceType,
    castling_for,
    color_of,
    file_of,
    from_sq,
    make_piece,
    make_square,
    move_type,
    pawn_push,
    promotion_type,
    rank_of,
    relative_rank,
    relative_square,
    to_sq,
    type_of,
)

_PIECES = (
    Piece.W_PAWN, Piece.W_KNIGHT, Piece.W_BISHOP, Piece.W_ROOK, Piece.W_QUEEN, Piece.W_KING,
    Piece.B_PAWN, Piece.B_KNIGHT, Piece.B_BISHOP, Piece.B_ROOK, Piece.B_QUEEN, Piece.B_KING,
)

# Capturing pieces in order of increasing value, with the slider rays that
# may open up behind each of them.
_SEE_ORDER = (
    (PieceType.PAWN, (PieceType.BISHOP,)),
    (PieceType.KNIGHT, ()),
    (PieceType.BISHOP, (PieceType.BISHOP,)),
    (PieceType.ROOK, (PieceType.ROOK,)),
    (PieceType.QUEEN, (PieceType.BISHOP, PieceType.ROOK)),
)

_XRAY_PIECES = {
    PieceType.BISHOP: (PieceType.BISHOP, PieceType.QUEEN),
    PieceType.ROOK: (PieceType.ROOK, PieceType.QUEEN),
}


class Position(Board):
    """A board that can make and take back moves while keeping its state history."""

    def __init__(self) -> None:
        super().__init__()
        self.nodes = 0

    # ----------------------------------------------------- move properties

    def moved_piece(self, move: int) -> Piece:
        return self.piece_on(from_sq(move))

    def captured_piece(self) -> Piece:
        return self._st.captured_piece

    def capture(self, move: int) -> bool:
        """True for captures; castling is encoded as king takes rook and is not one."""
        kind = move_type(move)
        return ((not self.is_empty(to_sq(move)) and kind != MoveType.CASTLING)
                or kind == MoveType.EN_PASSANT)

    def legal(self, move: int) -> bool:
        """Whether a pseudo-legal move leaves the own king safe."""
        us = self._side_to_move
        origin = from_sq(move)
        target = to_sq(move)
        kind = move_type(move)

        if kind == MoveType.EN_PASSANT:
            ksq = self.king_square(us)
            capsq = target - pawn_push(us)
            occupied = (self.pieces() ^ square_bb(origin) ^ square_bb(capsq)) | square_bb(target)
            return (not attacks(PieceType.ROOK, ksq, occupied)
                    & self.pieces_of(~us, PieceType.QUEEN, PieceType.ROOK)
                    and not attacks(PieceType.BISHOP, ksq, occupied)
                    & self.pieces_of(~us, PieceType.QUEEN, PieceType.BISHOP))

        if kind == MoveType.CASTLING:
            target = relative_square(us, SQ_G1 if target > origin else SQ_C1)
            step = WEST if target > origin else EAST
            s = target
            while s != origin:
                if self.attackers_to(s) & self.pieces_of(~us):
                    return False
                s += step
            return (not self._chess960
                    or not self.blockers_for_king(us) & square_bb(to_sq(move)))

        if type_of(self.piece_on(origin)) == PieceType.KING:
            return not (self.attackers_to(target, self.pieces() ^ square_bb(origin))
                        & self.pieces_of(~us))

        return (not self.blockers_for_king(us) & square_bb(origin)
                or aligned(origin, target, self.king_square(us)))

    def gives_check(self, move: int) -> bool:
        """Whether a pseudo-legal move checks the opponent's king."""
        origin = from_sq(move)
        target = to_sq(move)
        us = self._side_to_move
        them_ksq = self.king_square(~us)

        if self.check_squares(type_of(self.piece_on(origin))) & square_bb(target):
            return True

        if (self.blockers_for_king(~us) & square_bb(origin)
                and not aligned(origin, target, them_ksq)):
            return True

        kind = move_type(move)
        if kind == MoveType.NORMAL:
            return False
        if kind == MoveType.PROMOTION:
            occupied = self.pieces() ^ square_bb(origin)
            return bool(attacks(promotion_type(move), target, occupied) & square_bb(them_ksq))
        if kind == MoveType.EN_PASSANT:
            capsq = make_square(file_of(target), rank_of(origin))
            occupied = (self.pieces() ^ square_bb(origin) ^ square_bb(capsq)) | square_bb(target)
            return bool(
                (attacks(PieceType.ROOK, them_ksq, occupied)
                 & self.pieces_of(us, PieceType.QUEEN, PieceType.ROOK))
                | (attacks(PieceType.BISHOP, them_ksq, occupied)
                   & self.pieces_of(us, PieceType.QUEEN, PieceType.BISHOP)))
        rto = relative_square(us, SQ_F1 if target > origin else SQ_D1)
        occupied = self.pieces() ^ square_bb(origin) ^ square_bb(target)
        return bool(attacks(PieceType.ROOK, rto) & square_bb(them_ksq)
                    and attacks(PieceType.ROOK, rto, occupied) & square_bb(them_ksq))

    # ------------------------------------------------------ making moves

    def _do_castling(self, us: Color, origin: int, target: int,
                     do: bool) -> tuple[int, int, int]:
        """Move king and rook for castling; returns (king_to, rook_from, rook_to)."""
        king_side = target > origin
        rfrom = target
        rto = relative_square(us, SQ_F1 if king_side else SQ_D1)
        kto = relative_square(us, SQ_G1 if king_side else SQ_C1)
        # Both pieces leave first since the squares may overlap in Chess960.
        self.remove_piece(origin if do else kto)
        self.remove_piece(rfrom if do else rto)
        self.put_piece(make_piece(us, PieceType.KING), kto if do else origin)
        self.put_piece(make_piece(us, PieceType.ROOK), rto if do else rfrom)
        return kto, rfrom, rto

    def do_move(self, move: int, gives_check: bool | None = None) -> None:
        """Make a legal move; its check status is computed when not given."""
        if gives_check is None:
            gives_check = self.gives_check(move)
        self.nodes += 1
        k = self._st.key ^ zobrist.SIDE

        st = self._st.carry_over()
        self._st = st
        self._game_ply += 1
        st.rule50 += 1
        st.plies_from_null += 1

        us = self._side_to_move
        them = ~us
        origin = from_sq(move)
        target = to_sq(move)
        kind = move_type(move)
        pc = self.piece_on(origin)
        captured = (make_piece(them, PieceType.PAWN) if kind == MoveType.EN_PASSANT
                    else self.piece_on(target))

        if kind == MoveType.CASTLING:
            target, rfrom, rto = self._do_castling(us, origin, target, True)
            k ^= zobrist.PSQ[captured][rfrom] ^ zobrist.PSQ[captured][rto]
            captured = Piece.NO_PIECE

        if captured != Piece.NO_PIECE:
            capsq = target
            if type_of(captured) == PieceType.PAWN:
                if kind == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                st.pawn_key ^= zobrist.PSQ[captured][capsq]
            else:
                st.non_pawn_material[them] -= PIECE_VALUE[MG][captured]

            self.remove_piece(capsq)
            k ^= zobrist.PSQ[captured][capsq]
            st.material_key ^= zobrist.PSQ[captured][self._piece_count[captured]]
            st.rule50 = 0

        k ^= zobrist.PSQ[pc][origin] ^ zobrist.PSQ[pc][target]

        if st.ep_square != SQ_NONE:
            k ^= zobrist.ENPASSANT[file_of(st.ep_square)]
            st.ep_square = SQ_NONE

        changed = self._castling_rights_mask[origin] | self._castling_rights_mask[target]
        if st.castling_rights and changed:
            k ^= zobrist.CASTLING[st.castling_rights]
            st.castling_rights &= ~changed & 0xF
            k ^= zobrist.CASTLING[st.castling_rights]

        if kind != MoveType.CASTLING:
            self.move_piece(origin, target)

        if type_of(pc) == PieceType.PAWN:
            if ((target ^ origin) == 16
                    and pawn_attacks(us, target - pawn_push(us))
                    & self.pieces_of(them, PieceType.PAWN)):
                st.ep_square = target - pawn_push(us)
                k ^= zobrist.ENPASSANT[file_of(st.ep_square)]
            elif kind == MoveType.PROMOTION:
                promotion = make_piece(us, promotion_type(move))
                self.remove_piece(target)
                self.put_piece(promotion, target)
                k ^= zobrist.PSQ[pc][target] ^ zobrist.PSQ[promotion][target]
                st.pawn_key ^= zobrist.PSQ[pc][target]
                st.material_key ^= (zobrist.PSQ[promotion][self._piece_count[promotion] - 1]
                                    ^ zobrist.PSQ[pc][self._piece_count[pc]])
                st.non_pawn_material[us] += PIECE_VALUE[MG][promotion]

            st.pawn_key ^= zobrist.PSQ[pc][origin] ^ zobrist.PSQ[pc][target]
            st.rule50 = 0

        st.captured_piece = captured
        st.key = k
        st.checkers_bb = (self.attackers_to(self.king_square(them)) & self.pieces_of(us)
                          if gives_check else 0)

        self._side_to_move = them
        self._set_check_info(st)

        # Ply distance to an earlier occurrence, negative when it is a third one.
        st.repetition = 0
        end = min(st.rule50, st.plies_from_null)
        if end >= 4:
            stp = st.previous.previous
            for i in range(4, end + 1, 2):
                stp = stp.previous.previous
                if stp.key == st.key:
                    st.repetition = -i if stp.repetition else i
                    break

    def undo_move(self, move: int) -> None:
        """Take back the last move made with do_move."""
        if self._st.previous is None:
            raise ValueError("no move to take back")
        self._side_to_move = ~self._side_to_move
        us = self._side_to_move
        origin = from_sq(move)
        target = to_sq(move)
        kind = move_type(move)

        if kind == MoveType.PROMOTION:
            self.remove_piece(target)
            self.put_piece(make_piece(us, PieceType.PAWN), target)

        if kind == MoveType.CASTLING:
            self._do_castling(us, origin, target, False)
        else:
            self.move_piece(target, origin)
            captured = self._st.captured_piece
            if captured != Piece.NO_PIECE:
                capsq = target
                if kind == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                self.put_piece(captured, capsq)

        self._st = self._st.previous
        self._game_ply -= 1

    def do_null_move(self) -> None:
        """Pass the turn without moving; not allowed while in check."""
        if self.checkers():
            raise ValueError("cannot make a null move while in check")
        prev = self._st
        st = StateInfo(
            pawn_key=prev.pawn_key,
            material_key=prev.material_key,
            non_pawn_material=list(prev.non_pawn_material),
            castling_rights=prev.castling_rights,
            rule50=prev.rule50,
            plies_from_null=prev.plies_from_null,
            ep_square=prev.ep_square,
            key=prev.key,
            checkers_bb=prev.checkers_bb,
            previous=prev,
            blockers_for_king=list(prev.blockers_for_king),
            pinners=list(prev.pinners),
            check_squares=list(prev.check_squares),
            captured_piece=prev.captured_piece,
            repetition=prev.repetition,
        )
        self._st = st

        if st.ep_square != SQ_NONE:
            st.key ^= zobrist.ENPASSANT[file_of(st.ep_square)]
            st.ep_square = SQ_NONE

        st.key ^= zobrist.SIDE
        st.rule50 += 1
        st.plies_from_null = 0
        self._side_to_move = ~self._side_to_move
        self._set_check_info(st)
        st.repetition = 0

    def undo_null_move(self) -> None:
        """Take back a null move."""
        if self.checkers():
            raise ValueError("the last move was not a null move")
        if self._st.previous is None:
            raise ValueError("no null move to take back")
        self._st = self._st.previous
        self._side_to_move = ~self._side_to_move

    def key_after(self, move: int) -> int:
        """Key after a plain move; castling, en passant and promotions are not special-cased."""
        origin = from_sq(move)
        target = to_sq(move)
        pc = self.piece_on(origin)
        captured = self.piece_on(target)
        k = self._st.key ^ zobrist.SIDE
        if captured != Piece.NO_PIECE:
            k ^= zobrist.PSQ[captured][target]
        k ^= zobrist.PSQ[pc][target] ^ zobrist.PSQ[pc][origin]
        if captured != Piece.NO_PIECE or type_of(pc) == PieceType.PAWN:
            return k
        return self._adjust_key50(k, True)

    # ---------------------------------------------- static exchange

    def see_ge(self, move: int, threshold: int = VALUE_ZERO) -> bool:
        """Whether the static exchange value of a move is at least `threshold`."""
        if move_type(move) != MoveType.NORMAL:
            return VALUE_ZERO >= threshold

        origin = from_sq(move)
        target = to_sq(move)

        swap = PIECE_VALUE[MG][self.piece_on(target)] - threshold
        if swap < 0:
            return False
        swap = PIECE_VALUE[MG][self.piece_on(origin)] - swap
        if swap <= 0:
            return True

        occupied = self.pieces() ^ square_bb(origin) ^ square_bb(target)
        stm = self._side_to_move
        attackers = self.attackers_to(target, occupied)
        res = 1

        while True:
            stm = ~stm
            attackers &= occupied
            stm_attackers = attackers & self.pieces_of(stm)
            if not stm_attackers:
                break

            # Pinned pieces may not take part while their pinners remain.
            if self.pinners(~stm) & occupied:
                stm_attackers &= ~self.blockers_for_king(stm)
                if not stm_attackers:
                    break

            res ^= 1

            for pt, xrays in _SEE_ORDER:
                bb = stm_attackers & self.pieces(pt)
                if not bb:
                    continue
                swap = PIECE_VALUE[MG][pt] - swap
                if swap < res:
                    return bool(res)
                occupied ^= bb & -bb
                for ray in xrays:
                    attackers |= attacks(ray, target, occupied) & self.pieces(*_XRAY_PIECES[ray])
                break
            else:
                # Capturing with the king only works if the opponent has no attackers left.
                return bool(res ^ 1) if attackers & ~self.pieces_of(stm) else bool(res)

        return bool(res)

    # ------------------------------------------------------ repetitions

    def has_repeated(self) -> bool:
        """Whether any position repeated since the last capture, pawn move or null move."""
        stc = self._st
        end = min(self._st.rule50, self._st.plies_from_null)
        while end >= 4:
            if stc.repetition:
                return True
            stc = stc.previous
            end -= 1
        return False

    def has_game_cycle(self, ply: int) -> bool:
        """Whether a move draws by repetition, or an earlier position could reach this one."""
        end = min(self._st.rule50, self._st.plies_from_null)
        if end < 3:
            return False

        original_key = self._st.key
        stp = self._st.previous

        for i in range(3, end + 1, 2):
            stp = stp.previous.previous
            move = zobrist.cuckoo_lookup(original_key ^ stp.key)
            if move is None:
                continue
            s1 = from_sq(move)
            s2 = to_sq(move)
            if (between(s1, s2) ^ square_bb(s2)) & self.pieces():
                continue
            if ply > i:
                return True
            piece = self.piece_on(s2 if self.is_empty(s1) else s1)
            if piece == Piece.NO_PIECE or color_of(piece) != self._side_to_move:
                continue
            if stp.repetition:
                return True
        return False

    # ---------------------------------------------------------- debugging

    def flip(self) -> None:
        """Swap the colours of the position, mirroring the board vertically."""
        placement, active, castling, ep, halfmove, fullmove = self.fen().split(" ")
        head = "/".join(reversed(placement.split("/"))) + " "
        head += ("B " if active == "w" else "W ") + castling + " "
        head = head.swapcase()
        if ep != "-":
            ep = ep[0] + ("6" if ep[1] == "3" else "3")
        self.set_fen(f"{head}{ep} {halfmove} {fullmove}", self._chess960)

    def pos_is_ok(self) -> bool:
        """Check the internal consistency of the position; raise ValueError if broken."""
        stm = self._side_to_move
        if (self._piece_count[Piece.W_KING] != 1 or self._piece_count[Piece.B_KING] != 1):
            raise ValueError("pos_is_ok: Kings")
        ep = self.ep_square()
        if ep != SQ_NONE and relative_rank(stm, rank_of(ep)) != RANK_6:
            raise ValueError("pos_is_ok: Default")
        if self.attackers_to(self.king_square(~stm)) & self.pieces_of(stm):
            raise ValueError("pos_is_ok: Kings")

        if (self.pieces(PieceType.PAWN) & (RANK_BB[RANK_1] | RANK_8_BB)
                or self._piece_count[Piece.W_PAWN] > 8
                or self._piece_count[Piece.B_PAWN] > 8):
            raise ValueError("pos_is_ok: Pawns")

        white = self.pieces_of(Color.WHITE)
        black = self.pieces_of(Color.BLACK)
        if (white & black or (white | black) != self.pieces()
                or popcount(white) > 16 or popcount(black) > 16):
            raise ValueError("pos_is_ok: Bitboards")
        types = [pt for pt in PieceType if pt != PieceType.NO_PIECE_TYPE]
        for p1 in types:
            for p2 in types:
                if p1 != p2 and self.pieces(p1) & self.pieces(p2):
                    raise ValueError("pos_is_ok: Bitboards")

        st = self._st
        fresh = StateInfo(castling_rights=st.castling_rights, rule50=st.rule50,
                          plies_from_null=st.plies_from_null, ep_square=st.ep_square)
        self._set_state(fresh)
        if ((fresh.key, fresh.pawn_key, fresh.material_key, fresh.non_pawn_material,
             fresh.checkers_bb, fresh.blockers_for_king, fresh.pinners, fresh.check_squares)
                != (st.key, st.pawn_key, st.material_key, st.non_pawn_material,
                    st.checkers_bb, st.blockers_for_king, st.pinners, st.check_squares)):
            raise ValueError("pos_is_ok: State")

        for pc in _PIECES:
            count = self._piece_count[pc]
            if (count != popcount(self.pieces_of(color_of(pc), type_of(pc)))
                    or count != self._board.count(pc)):
                raise ValueError("pos_is_ok: Pieces")

        for color in Color:
            ksq = self.king_square(color)
            for side in (CastlingRights.KING_SIDE, CastlingRights.QUEEN_SIDE):
                cr = int(castling_for(color, side))
                if not self.can_castle(cr):
                    continue
                rsq = self._castling_rook_square[cr]
                if (self.piece_on(rsq) != make_piece(color, PieceType.ROOK)
                        or self._castling_rights_mask[rsq] != cr
                        or (self._castling_rights_mask[ksq] & cr) != cr):
                    raise ValueError("pos_is_ok: Castling")
        return True