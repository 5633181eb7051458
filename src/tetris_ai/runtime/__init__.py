"""Runs the game state machine against real or virtual time."""

from .runner import GameRunner
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = ["GameRunner", "AsyncioScheduler", "ManualScheduler", "Scheduler"]
