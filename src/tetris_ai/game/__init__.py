"""Game module for tetris_ai.

Exports the engine and its supporting classes:
- BlockColor / Piece / Position: tetromino model and rotation
- GameGrid: board representation and line removal
- GameRules: placement, spawn, scoring and level rules
- GameState / GameConfig: mutable game state and its configuration
- TetrisGame / Event: the timed game state machine
"""

from .grid import GameGrid
from .pieces import BlockColor, Piece, Position, create_piece, rotate
from .rules import GameRules, LevelRules, ScoringRules
from .state import GameConfig, GameState
from .effects import Event, TimerId
from .core import TetrisGame

__all__ = [
    "GameGrid",
    "BlockColor",
    "Piece",
    "Position",
    "create_piece",
    "rotate",
    "GameRules",
    "LevelRules",
    "ScoringRules",
    "GameConfig",
    "GameState",
    "Event",
    "TimerId",
    "TetrisGame",
]
