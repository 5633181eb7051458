from __future__ import annotations

import json
import logging
import os
import threading
from typing import Optional, Sequence, Tuple

import numpy as np

from .features import NUM_FEATURES

logger = logging.getLogger(__name__)


Weights = Tuple[float, float, float, float]

# aggregate height, lines cleared, holes, bumpiness
DEFAULT_WEIGHTS: Weights = (-0.510066, 0.760666, -0.35663, -0.184483)


class WeightsLoadError(ValueError):
    pass


def _as_weights(values) -> Weights:
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if arr.shape != (NUM_FEATURES,):
        raise WeightsLoadError(f"expected {NUM_FEATURES} weights, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise WeightsLoadError("weights must be finite")
    return tuple(float(v) for v in arr)  # type: ignore[return-value]


def load_weights(path: str) -> Weights:
    """Read a weight vector from a `.npy` or `.json` file."""
    if not os.path.exists(path):
        raise WeightsLoadError(f"no such weights file: {path}")
    try:
        if path.endswith(".json"):
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if isinstance(raw, dict):
                raw = raw.get("weights")
        else:
            raw = np.load(path, allow_pickle=False)
    except (OSError, ValueError) as exc:
        raise WeightsLoadError(f"could not read weights from {path}: {exc}") from exc
    try:
        return _as_weights(raw)
    except WeightsLoadError:
        raise
    except (TypeError, ValueError) as exc:
        raise WeightsLoadError(f"invalid weights in {path}: {exc}") from exc


def save_weights(path: str, weights: Sequence[float]) -> None:
    w = _as_weights(weights)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if path.endswith(".json"):
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"weights": list(w)}, f)
    else:
        np.save(path, np.array(w, dtype=np.float64))


class HeuristicEvaluator:
    """Linear scorer over board features.

    The weight slot is swapped whole under a lock; readers take `weights` once
    and work from that snapshot, so they never see half of an update.
    """

    def __init__(self, weights: Optional[Sequence[float]] = None) -> None:
        self._lock = threading.Lock()
        self._weights: Weights = _as_weights(DEFAULT_WEIGHTS if weights is None else weights)

    @property
    def weights(self) -> Weights:
        with self._lock:
            return self._weights

    def set_weights(self, weights: Sequence[float]) -> None:
        new = _as_weights(weights)
        with self._lock:
            self._weights = new

    def evaluate(self, features: Sequence[float], weights: Optional[Sequence[float]] = None) -> float:
        w = self.weights if weights is None else weights
        return float(np.dot(np.asarray(features, dtype=np.float64), np.asarray(w, dtype=np.float64)))

    def load_pretrained(self, path: str) -> None:
        # load fully before swapping so a bad file leaves the old weights in place
        weights = load_weights(path)
        self.set_weights(weights)
        logger.info("Loaded weights %s from %s", weights, path)

    def save(self, path: str) -> None:
        save_weights(path, self.weights)
