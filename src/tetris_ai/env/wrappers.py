from __future__ import annotations

from typing import Optional

import numpy as np
import gymnasium as gym


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Replace an illegal placement with a uniformly drawn legal one.

    For agents that ignore `info["action_mask"]`. When a swap happens the
    placement actually played is reported as `info["resampled_action"]`.
    """

    def step(self, action):  # type: ignore[override]
        chosen = self._legal_substitute(int(action))
        obs, reward, terminated, truncated, info = self.env.step(action if chosen is None else chosen)
        if chosen is not None:
            info["resampled_action"] = chosen
        return obs, reward, terminated, truncated, info

    def _legal_substitute(self, action: int) -> Optional[int]:
        mask = self.get_action_mask()
        if not 0 <= action < mask.shape[0] or mask[action]:
            return None
        legal = np.flatnonzero(mask)
        if legal.size == 0:
            return None
        return int(self.np_random.choice(legal))

    def get_action_mask(self) -> np.ndarray:
        return self.env.unwrapped.get_action_mask()
