"""Bitboard chess position: FEN, Zobrist hashing, move making, legality and exchange evaluation."""

__version__ = "0.1.0"