from __future__ import annotations

import random
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tetris_ai.ai.features import board_features
from tetris_ai.ai.search import Move, drop_row
from tetris_ai.game.pieces import BlockColor, Piece, Position
from tetris_ai.game.rules import GameRules
from tetris_ai.game.state import GameConfig


NUM_ROTATIONS = 4


class TetrisPlacementEnv(gym.Env):
    """One step places one piece.

    Action `rotation * width + left` turns the current piece `rotation` times
    clockwise, slides it so its leftmost block sits in column `left` and hard
    drops it. Locking, line clears, scoring and levels follow `GameRules`.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -1.0,
                 terminal_penalty: float = -10.0,
                 max_pieces: Optional[int] = None) -> None:
        super().__init__()
        self.rules = GameRules(config or GameConfig())
        self.state = self.rules.new_state()
        self.render_mode = render_mode
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_pieces = max_pieces
        self.reward_weights: Dict[str, float] = {
            "lines": 1.0,
            "holes": 0.1,
            "bumpiness": 0.01,
            "height": 0.02,
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        width = self.rules.config.width
        height = self.rules.config.height
        kinds = len(BlockColor) + 1
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(height, width), dtype=np.int8),
                "piece": spaces.Discrete(kinds),
                "next_piece": spaces.Discrete(kinds),
                "features": spaces.Box(low=0.0, high=np.inf, shape=(4,), dtype=np.float32),
            }
        )
        self.action_space = spaces.Discrete(NUM_ROTATIONS * width)
        self._pieces = 0

    # -- action encoding ---------------------------------------------------

    @property
    def width(self) -> int:
        return self.rules.config.width

    def encode_action(self, rotation: int, column: int) -> int:
        """Action for a search `Move`-style (rotation, anchor column) pair."""
        rotated = self.state.current_piece.rotated(rotation)
        left = column + rotated.column_span()[0]
        return int(rotation) * self.width + int(left)

    def encode_move(self, move: Move) -> int:
        return self.encode_action(move.rotation, move.column)

    def _placement(self, action: int) -> Optional[Tuple[Piece, Position]]:
        if self.state.current_piece is None or not 0 <= action < self.action_space.n:
            return None
        rotation, left = divmod(int(action), self.width)
        rotated = self.state.current_piece.rotated(rotation)
        min_col, max_col = rotated.column_span()
        column = left - min_col
        if column + max_col >= self.width:
            return None
        row = drop_row(self.state.board, rotated, column)
        if row is None:
            return None
        return rotated, Position(row, column)

    def get_action_mask(self) -> np.ndarray:
        mask = np.zeros((self.action_space.n,), dtype=np.bool_)
        for a in range(self.action_space.n):
            mask[a] = self._placement(a) is not None
        return mask

    # -- gym API -----------------------------------------------------------

    def _get_obs(self) -> Dict[str, Any]:
        s = self.state
        return {
            "grid": (s.board.grid != 0).astype(np.int8),
            "piece": int(s.current_piece.kind) if s.current_piece is not None else 0,
            "next_piece": int(s.next_piece.kind) if s.next_piece is not None else 0,
            "features": board_features(s.board).astype(np.float32),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": self.get_action_mask(),
            "score": self.state.score,
            "lines_cleared": self.state.lines_cleared,
            "level": self.state.level,
            "pieces": self._pieces,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        if seed is not None:
            self.rules.rng = random.Random(seed)
        self.state = self.rules.new_state()
        self.rules.deal(self.state)
        self._pieces = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        placement = self._placement(int(action))
        if placement is None:
            info = self._get_info()
            info["reward_components"] = {"invalid": self.invalid_action_penalty}
            terminated = not bool(info["action_mask"].any())
            return self._get_obs(), self.invalid_action_penalty, terminated, False, info

        before = board_features(self.state.board)
        self.state.current_piece, self.state.anchor = placement
        self._pieces += 1
        alive = self.rules.spawn(self.state)
        lines = 0
        if alive:
            lines = self.rules.remove_lines(self.rules.detect_full_lines(self.state.board), self.state)
            self.rules.check_level_progression(self.state)
        after = board_features(self.state.board)

        w = self.reward_weights
        components: Dict[str, float] = {
            "lines": w["lines"] * float(lines),
            "holes": -w["holes"] * float(max(0.0, after[2] - before[2])),
            "bumpiness": -w["bumpiness"] * float(max(0.0, after[3] - before[3])),
            "height": -w["height"] * float(max(0.0, after[0] - before[0])),
        }
        info = self._get_info()
        terminated = not alive or not bool(info["action_mask"].any())
        if terminated:
            components["terminal"] = self.terminal_penalty
        truncated = self.max_pieces is not None and self._pieces >= self.max_pieces
        info["reward_components"] = components
        return self._get_obs(), float(sum(components.values())), terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self.state.board.grid
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                color = (70, 200, 120) if grid[y, x] else (30, 30, 36)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
