from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import numpy as np

from tetris_ai.game.grid import GameGrid
from tetris_ai.game.pieces import Piece, Position


FEATURE_NAMES = ("aggregate_height", "lines_cleared", "holes", "bumpiness")
NUM_FEATURES = len(FEATURE_NAMES)


@dataclass
class FeatureResult:
    features: np.ndarray
    board_after: GameGrid

    def as_dict(self) -> Dict[str, float]:
        return {name: float(v) for name, v in zip(FEATURE_NAMES, self.features)}


def board_features(board: GameGrid, lines_cleared: int = 0) -> np.ndarray:
    heights = board.column_heights()
    aggregate_height = int(heights.sum())
    holes = board.count_holes()
    bumpiness = int(np.abs(np.diff(heights)).sum())
    return np.array([aggregate_height, lines_cleared, holes, bumpiness], dtype=np.float64)


def extract_features(board: GameGrid, piece: Piece, anchor: Position) -> FeatureResult:
    """Features of `board` after locking `piece` at `anchor` and clearing lines.

    Works on a copy; `board` is never modified. Cells above the top edge are
    dropped, as they are when a real piece locks. No score is awarded.
    """
    temp = board.copy()
    temp.place(piece.cells_at(anchor), int(piece.kind))
    lines = temp.remove_rows(temp.full_rows())
    return FeatureResult(features=board_features(temp, lines), board_after=temp)
