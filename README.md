# chesscore

A pure-Python chess board core built on 64-bit bitboards (plain Python
integers). It provides:

- FEN parsing and output, including Shredder-FEN and X-FEN castling letters
  for Chess960
- Zobrist position, pawn and material keys, updated incrementally as moves
  are made
- making and taking back moves, null moves included
- legality and "gives check" tests for moves
- static exchange evaluation (`Position.see_ge`)
- repetition detection and upcoming-repetition detection through a cuckoo
  table of reversible moves
- piece-square scores packed as midgame and endgame values

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```python
from chesscore.position import Position
from chesscore.types import make_move, make_square

pos = Position.from_fen(
    "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1", False
)

e2 = make_square(4, 1)
e4 = make_square(4, 3)
move = make_move(e2, e4)

if pos.legal(move):
    pos.do_move(move, pos.gives_check(move))

print(pos.fen())   # rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1
print(hex(pos.key()))

pos.undo_move(move)
print(pos)         # ASCII board, FEN, key and checking squares
```

`do_move` computes the check status itself when the second argument is
left out.

## Modules

- `chesscore.types` — colours, piece types, pieces, move kinds, castling
  rights and bounds as enums; value constants; helpers for squares
  (`make_square`, `file_of`, `rank_of`, `square_name`, ...), moves
  (`make_move`, `make_special`, `from_sq`, `to_sq`, `move_type`,
  `promotion_type`) and packed scores (`make_score`, `mg_value`,
  `eg_value`).
- `chesscore.psqt` — piece-square tables; `psq_score(piece, square)` gives
  the packed score of a piece on a square.
- `chesscore.attacks` — bitboard helpers (`square_bb`, `popcount`, `lsb`,
  `iter_squares`) and attack sets (`pawn_attacks`, `attacks`, `between`,
  `aligned`).
- `chesscore.zobrist` — hashing keys and the cuckoo table
  (`cuckoo_lookup`, `cuckoo_size`).
- `chesscore.board` — `Board`: piece placement, FEN input and output,
  `set_endgame` for material-only positions from codes such as `"KBPKN"`,
  attackers, pins, castling data and keys; `StateInfo` holds the state
  restored when a move is taken back.
- `chesscore.position` — `Position`, a `Board` that makes and takes back
  moves: `legal`, `gives_check`, `capture`, `do_move`, `undo_move`,
  `do_null_move`, `undo_null_move`, `key_after`, `see_ge`, `has_repeated`,
  `has_game_cycle`, `flip`, and `pos_is_ok`, which raises `ValueError` when
  the position is inconsistent.
- `chesscore.search` — search bookkeeping types: `RootMove`, which orders
  better-scored moves first and compares equal to its first move, and
  `SearchLimits`.

Moves are plain integers in a 16-bit layout: the target square in bits 0-5,
the origin square in bits 6-11, the promotion piece in bits 12-13 and the
move kind in bits 14-15. Castling is encoded as the king capturing its own
rook.

## What this package does not do

There is no move generator, so the package cannot list the legal moves of a
position; moves have to be built by the caller. There is no evaluation
function, no search, no transposition table, no endgame tablebase access and
no command-line or engine-protocol interface. `RootMove` and `SearchLimits`
are data types only.