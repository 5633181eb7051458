from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .grid import GameGrid
from .pieces import BlockColor, Piece, Position


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None
    spawn_column: int = 4
    spawn_row: int = 0
    # per-shape spawn row; the I piece needs room to stand up when rotated
    spawn_rows: Dict[BlockColor, int] = field(default_factory=lambda: {BlockColor.I: 2})
    line_clear_interval: float = 0.02
    line_clear_step: float = 0.05
    level_transition_delay: float = 1.0
    demo_interval: float = 0.1


@dataclass
class GameState:
    board: GameGrid
    current_piece: Optional[Piece] = None
    next_piece: Optional[Piece] = None
    anchor: Position = Position(0, 4)
    game_speed: float = 1.0
    score: int = 0
    high_score: int = 0
    level: int = 1
    lines_cleared: int = 0
    lines_to_next_level: int = 10
    clearing_lines: List[int] = field(default_factory=list)
    animation_progress: float = 0.0
    is_paused: bool = False
    is_game_over: bool = False
    is_level_transitioning: bool = False
    is_muted: bool = False
    is_demo_mode: bool = False

    @classmethod
    def new(cls, config: Optional[GameConfig] = None, *, game_speed: float = 1.0,
            lines_per_level: int = 10, high_score: int = 0, is_muted: bool = False) -> "GameState":
        config = config or GameConfig()
        return cls(
            board=GameGrid(config.width, config.height),
            anchor=Position(config.spawn_row, config.spawn_column),
            game_speed=game_speed,
            lines_to_next_level=lines_per_level,
            high_score=high_score,
            is_muted=is_muted,
        )
