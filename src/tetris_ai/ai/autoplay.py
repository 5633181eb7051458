from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tetris_ai.game.grid import GameGrid
from tetris_ai.game.pieces import Piece, Position
from tetris_ai.game.rules import GameRules

from .evaluator import HeuristicEvaluator
from .search import Move, best_move


class Autopilot:
    """Move planner for demo mode; owns the evaluator it plays with."""

    def __init__(self, evaluator: Optional[HeuristicEvaluator] = None) -> None:
        self.evaluator = evaluator or HeuristicEvaluator()

    def best_move(self, board: GameGrid, piece: Piece, next_piece: Optional[Piece] = None) -> Optional[Move]:
        return best_move(board, piece, next_piece, self.evaluator)


@dataclass
class GameResult:
    lines_cleared: int
    score: int
    level: int
    pieces_placed: int
    topped_out: bool


def simulate_game(rules: GameRules, evaluator: HeuristicEvaluator,
                  max_pieces: Optional[int] = None) -> GameResult:
    """Play one game with no timers: search, place, lock, clear, level up.

    Stops when a spawn fails or after `max_pieces` placements.
    """
    state = rules.new_state()
    rules.deal(state)
    pieces = 0
    topped_out = True
    while max_pieces is None or pieces < max_pieces:
        move = best_move(state.board, state.current_piece, state.next_piece, evaluator)
        if move is None:
            break
        state.current_piece = state.current_piece.rotated(move.rotation)
        state.anchor = Position(move.row, move.column)
        pieces += 1
        if not rules.spawn(state):
            break
        rules.remove_lines(rules.detect_full_lines(state.board), state)
        rules.check_level_progression(state)
    else:
        topped_out = False
    return GameResult(
        lines_cleared=state.lines_cleared,
        score=state.score,
        level=state.level,
        pieces_placed=pieces,
        topped_out=topped_out,
    )
