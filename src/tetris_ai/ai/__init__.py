"""Heuristic autoplay: board features, linear evaluator, placement search and
the evolutionary weight trainer."""

from .autoplay import Autopilot, GameResult, simulate_game
from .evaluator import DEFAULT_WEIGHTS, HeuristicEvaluator, WeightsLoadError, load_weights, save_weights
from .features import FEATURE_NAMES, FeatureResult, extract_features
from .search import Move, best_move, enumerate_placements
from .trainer import EvolutionaryTrainer, TrainerConfig, TrainingResult

__all__ = [
    "Autopilot",
    "GameResult",
    "simulate_game",
    "DEFAULT_WEIGHTS",
    "HeuristicEvaluator",
    "WeightsLoadError",
    "load_weights",
    "save_weights",
    "FEATURE_NAMES",
    "FeatureResult",
    "extract_features",
    "Move",
    "best_move",
    "enumerate_placements",
    "EvolutionaryTrainer",
    "TrainerConfig",
    "TrainingResult",
]
