from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, NamedTuple, Tuple


class BlockColor(IntEnum):
    I = 1
    O = 2
    T = 3
    J = 4
    L = 5
    S = 6
    Z = 7
    GRAY = 8  # placeholder, never dealt


PLAYABLE_COLORS: Tuple[BlockColor, ...] = tuple(c for c in BlockColor if c != BlockColor.GRAY)


class Position(NamedTuple):
    row: int
    column: int

    def offset(self, row: int = 0, column: int = 0) -> "Position":
        return Position(self.row + row, self.column + column)


def _p(row: int, column: int) -> Position:
    return Position(row, column)


# (blocks, pivot) in spawn orientation
BASE_SHAPES: Dict[BlockColor, Tuple[Tuple[Position, ...], Position]] = {
    BlockColor.I: ((_p(0, 0), _p(0, 1), _p(0, 2), _p(0, 3)), _p(0, 1)),
    BlockColor.O: ((_p(0, 0), _p(0, 1), _p(1, 0), _p(1, 1)), _p(0, 0)),
    BlockColor.T: ((_p(0, 1), _p(1, 0), _p(1, 1), _p(1, 2)), _p(1, 1)),
    BlockColor.J: ((_p(0, 0), _p(1, 0), _p(1, 1), _p(1, 2)), _p(1, 1)),
    BlockColor.L: ((_p(0, 2), _p(1, 0), _p(1, 1), _p(1, 2)), _p(1, 1)),
    BlockColor.S: ((_p(0, 1), _p(0, 2), _p(1, 0), _p(1, 1)), _p(1, 1)),
    BlockColor.Z: ((_p(0, 0), _p(0, 1), _p(1, 1), _p(1, 2)), _p(1, 1)),
    BlockColor.GRAY: ((_p(0, 0),), _p(0, 0)),
}


@dataclass(frozen=True)
class Piece:
    """A tetromino: block offsets and a pivot relative to an anchor.

    Values are immutable; `rotated` returns a new piece.
    """

    kind: BlockColor
    blocks: Tuple[Position, ...]
    pivot: Position

    def rotated(self, times: int = 1) -> "Piece":
        piece = self
        for _ in range(times % 4):
            piece = rotate(piece)
        return piece

    def cells_at(self, anchor: Position) -> List[Position]:
        return [Position(anchor.row + b.row, anchor.column + b.column) for b in self.blocks]

    def column_span(self) -> Tuple[int, int]:
        cols = [b.column for b in self.blocks]
        return min(cols), max(cols)

    def block_set(self) -> frozenset:
        return frozenset(self.blocks)


def create_piece(kind: BlockColor) -> Piece:
    blocks, pivot = BASE_SHAPES[BlockColor(kind)]
    return Piece(kind=BlockColor(kind), blocks=blocks, pivot=pivot)


def rotate(piece: Piece) -> Piece:
    """Rotate 90 degrees clockwise around the pivot."""
    pr, pc = piece.pivot
    blocks = tuple(Position(pr - (b.column - pc), pc + (b.row - pr)) for b in piece.blocks)
    return Piece(kind=piece.kind, blocks=blocks, pivot=piece.pivot)
