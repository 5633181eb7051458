from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence

from tetris_ai.game.grid import GameGrid
from tetris_ai.game.pieces import Piece, Position

from .evaluator import HeuristicEvaluator
from .features import extract_features


class Move(NamedTuple):
    column: int
    rotation: int
    row: int
    score: float


def drop_row(board: GameGrid, piece: Piece, column: int, start_row: int = 0) -> Optional[int]:
    """Lowest row a piece reaches when dropped straight down from `start_row`.

    None when the piece does not fit at `start_row` at all.
    """
    if not board.can_place(piece.cells_at(Position(start_row, column))):
        return None
    row = start_row
    while board.can_place(piece.cells_at(Position(row + 1, column))):
        row += 1
    return row


def enumerate_placements(board: GameGrid, piece: Piece, weights: Sequence[float],
                         evaluator: Optional[HeuristicEvaluator] = None) -> List[Move]:
    """Score every legal resting placement of `piece`.

    Order is rotation 0..3, then anchor column left to right.
    """
    evaluator = evaluator or HeuristicEvaluator(weights)
    moves: List[Move] = []
    for rotation in range(4):
        rotated = piece.rotated(rotation)
        min_col, max_col = rotated.column_span()
        for column in range(-min_col, board.width - max_col):
            row = drop_row(board, rotated, column)
            # blocked from the top
            if row is None:
                continue
            anchor = Position(row, column)
            result = extract_features(board, rotated, anchor)
            moves.append(Move(column, rotation, row, evaluator.evaluate(result.features, weights)))
    return moves


def best_move(board: GameGrid, piece: Piece, next_piece: Optional[Piece] = None,
              evaluator: Optional[HeuristicEvaluator] = None) -> Optional[Move]:
    """Highest-scoring placement; the first one wins ties.

    `next_piece` is accepted for a future one-piece lookahead and is not used.
    Returns None when the piece has no legal placement at all.
    """
    evaluator = evaluator or HeuristicEvaluator()
    weights = evaluator.weights
    best: Optional[Move] = None
    for move in enumerate_placements(board, piece, weights, evaluator):
        if best is None or move.score > best.score:
            best = move
    return best
