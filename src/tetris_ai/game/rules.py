from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .grid import GameGrid
from .pieces import PLAYABLE_COLORS, Piece, Position, create_piece
from .state import GameConfig, GameState


DOWN = Position(1, 0)
LEFT = Position(0, -1)
RIGHT = Position(0, 1)


@dataclass
class ScoringRules:
    line_score: int = 100
    tetris_bonus: int = 400

    def score_for_lines(self, lines: int, level: int) -> int:
        if lines <= 0:
            return 0
        score = lines * self.line_score * level
        if lines == 4:
            score += self.tetris_bonus
        return score


@dataclass
class LevelRules:
    lines_per_level: int = 10
    base_speed: float = 1.0
    speed_step: float = 0.05
    max_speed_reduction: float = 0.8

    def speed_for_level(self, level: int) -> float:
        """Gravity interval in seconds; shrinks linearly, floored at base - max reduction."""
        return max(self.base_speed - (level - 1) * self.speed_step,
                   self.base_speed - self.max_speed_reduction)


@dataclass
class GameRules:
    """Placement, locking, line clearing and level rules.

    Every guard is total: it answers with a bool and never raises.
    """

    config: GameConfig = field(default_factory=GameConfig)
    scoring: ScoringRules = field(default_factory=ScoringRules)
    levels: LevelRules = field(default_factory=LevelRules)
    rng: Optional[random.Random] = None

    def __post_init__(self) -> None:
        if self.rng is None:
            self.rng = random.Random(self.config.random_seed)

    def new_state(self, high_score: int = 0, is_muted: bool = False) -> GameState:
        return GameState.new(
            self.config,
            game_speed=self.levels.speed_for_level(1),
            lines_per_level=self.levels.lines_per_level,
            high_score=high_score,
            is_muted=is_muted,
        )

    def random_piece(self) -> Piece:
        return create_piece(self.rng.choice(PLAYABLE_COLORS))

    def spawn_anchor(self, piece: Piece) -> Position:
        row = self.config.spawn_rows.get(piece.kind, self.config.spawn_row)
        return Position(row, self.config.spawn_column)

    def deal(self, state: GameState) -> None:
        """Give a fresh game its current and next piece."""
        state.current_piece = self.random_piece()
        state.next_piece = self.random_piece()
        state.anchor = self.spawn_anchor(state.current_piece)

    def can_place(self, board: GameGrid, piece: Piece, anchor: Position) -> bool:
        return board.can_place(piece.cells_at(anchor))

    def can_move(self, state: GameState, offset: Position) -> bool:
        if state.current_piece is None:
            return False
        target = state.anchor.offset(offset.row, offset.column)
        return self.can_place(state.board, state.current_piece, target)

    def lock(self, state: GameState) -> None:
        if state.current_piece is not None:
            state.board.place(state.current_piece.cells_at(state.anchor), int(state.current_piece.kind))

    def spawn(self, state: GameState) -> bool:
        """Lock the active piece and promote the next one.

        Returns False (game over) when the locked piece never left the spawn
        row, or when the promoted piece does not fit.
        """
        self.lock(state)
        if state.anchor.row <= 0:
            return False
        promoted = state.next_piece if state.next_piece is not None else self.random_piece()
        state.current_piece = promoted
        state.next_piece = self.random_piece()
        state.anchor = self.spawn_anchor(promoted)
        return self.can_place(state.board, promoted, state.anchor)

    def detect_full_lines(self, board: GameGrid) -> List[int]:
        return board.full_rows()

    def remove_lines(self, rows: Sequence[int], state: GameState) -> int:
        if not rows:
            return 0
        removed = state.board.remove_rows(rows)
        state.lines_cleared += removed
        state.score += self.scoring.score_for_lines(removed, state.level)
        return removed

    def check_level_progression(self, state: GameState) -> bool:
        if state.lines_cleared < state.lines_to_next_level:
            return False
        state.level += 1
        state.lines_to_next_level += self.levels.lines_per_level
        state.game_speed = self.levels.speed_for_level(state.level)
        return True
