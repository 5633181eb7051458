from __future__ import annotations

import argparse
import logging
import random
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from tetris_ai.game.rules import GameRules
from tetris_ai.game.state import GameConfig

from .autoplay import simulate_game
from .evaluator import HeuristicEvaluator, Weights, save_weights
from .features import NUM_FEATURES

logger = logging.getLogger(__name__)


@dataclass
class TrainerConfig:
    population_size: int = 20
    num_genes: int = NUM_FEATURES
    crossover_rate: float = 0.7
    mutation_rate: float = 0.1
    mutation_scale: float = 0.5
    init_low: float = -1.0
    init_high: float = 1.0
    seed: Optional[int] = None
    # same piece sequence for every fitness game when set
    game_seed: Optional[int] = None
    # cap on one self-play game; strong weights may otherwise never top out
    max_pieces: Optional[int] = 2000
    game: GameConfig = field(default_factory=GameConfig)


@dataclass
class TrainingResult:
    best_weights: Weights
    best_fitness: float
    generation_best: List[float]


def _print_progress(ep_idx: int, total: int, best: float, mean: float) -> None:
    width = 30
    filled = int(width * (ep_idx + 1) / max(1, total))
    bar = "=" * filled + "." * (width - filled)
    msg = f"\r[{bar}] {ep_idx + 1}/{total}  best={best:.0f}  mean={mean:.1f}"
    print(msg, end="", file=sys.stdout, flush=True)


class EvolutionaryTrainer:
    """Evolves evaluator weights by self-play.

    Fitness is the number of lines one game clears. While training runs the
    trainer owns the evaluator's weight slot; do not share the evaluator with
    a live game at the same time.
    """

    def __init__(self, evaluator: Optional[HeuristicEvaluator] = None,
                 config: Optional[TrainerConfig] = None) -> None:
        self.evaluator = evaluator or HeuristicEvaluator()
        self.config = config or TrainerConfig()
        if self.config.population_size < 1:
            raise ValueError("population_size must be at least 1")
        self.rng = np.random.default_rng(self.config.seed)

    def initial_population(self) -> np.ndarray:
        c = self.config
        return self.rng.uniform(c.init_low, c.init_high, size=(c.population_size, c.num_genes))

    def _game_rules(self) -> GameRules:
        if self.config.game_seed is not None:
            seed = self.config.game_seed
        else:
            seed = int(self.rng.integers(0, 2**32))
        return GameRules(config=self.config.game, rng=random.Random(seed))

    def play_game(self, weights) -> float:
        self.evaluator.set_weights(weights)
        result = simulate_game(self._game_rules(), self.evaluator, self.config.max_pieces)
        return float(result.lines_cleared)

    def evaluate_population(self, population: np.ndarray) -> np.ndarray:
        return np.array([self.play_game(w) for w in population], dtype=np.float64)

    def crossover(self, p1: np.ndarray, p2: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        c1, c2 = p1.copy(), p2.copy()
        if self.config.num_genes > 1 and self.rng.random() < self.config.crossover_rate:
            point = int(self.rng.integers(1, self.config.num_genes))
            c1[point:], c2[point:] = p2[point:], p1[point:]
        return c1, c2

    def mutate(self, child: np.ndarray) -> np.ndarray:
        c = self.config
        mask = self.rng.random(child.shape) < c.mutation_rate
        noise = self.rng.uniform(-c.mutation_scale, c.mutation_scale, size=child.shape)
        return child + np.where(mask, noise, 0.0)

    def next_generation(self, population: np.ndarray, fitness: np.ndarray) -> np.ndarray:
        """Pair parents down the fitness ranking and breed exactly N children."""
        n = len(population)
        ranked = np.argsort(-fitness, kind="stable")
        children: List[np.ndarray] = []
        for i in range(0, n, 2):
            p1 = population[ranked[i % n]]
            p2 = population[ranked[(i + 1) % n]]
            c1, c2 = self.crossover(p1, p2)
            children.append(self.mutate(c1))
            if len(children) < n:
                children.append(self.mutate(c2))
        return np.array(children)

    def train_with_self_play(self, episodes: int, progress: bool = False) -> TrainingResult:
        population = self.initial_population()
        generation_best: List[float] = []
        for ep in range(episodes):
            fitness = self.evaluate_population(population)
            generation_best.append(float(fitness.max()))
            logger.debug("generation %d best=%s mean=%.2f", ep, fitness.max(), fitness.mean())
            if progress:
                _print_progress(ep, episodes, float(fitness.max()), float(fitness.mean()))
            population = self.next_generation(population, fitness)
        if progress and episodes:
            print()

        final_fitness = self.evaluate_population(population)
        best = int(np.argmax(final_fitness))
        self.evaluator.set_weights(population[best])
        return TrainingResult(
            best_weights=self.evaluator.weights,
            best_fitness=float(final_fitness[best]),
            generation_best=generation_best,
        )

    def load_pretrained_model(self, path: str) -> None:
        self.evaluator.load_pretrained(path)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Evolve heuristic weights by self-play")
    p.add_argument("--episodes", type=int, default=10)
    p.add_argument("--population", type=int, default=20)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--game-seed", type=int, default=None)
    p.add_argument("--max-pieces", type=int, default=2000)
    p.add_argument("--save_path", type=str, default="models/ga_weights.npy")
    p.add_argument("--no-progress", action="store_true")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    config = TrainerConfig(
        population_size=args.population,
        seed=args.seed,
        game_seed=args.game_seed,
        max_pieces=args.max_pieces,
    )
    trainer = EvolutionaryTrainer(config=config)
    result = trainer.train_with_self_play(args.episodes, progress=not args.no_progress)
    save_weights(args.save_path, result.best_weights)
    print(f"Best fitness {result.best_fitness:.0f} lines, weights {result.best_weights}")
    print(f"Saved weights to {args.save_path}")


if __name__ == "__main__":  # pragma: no cover
    main()
