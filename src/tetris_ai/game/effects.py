"""Commands returned by the state machine.

`TetrisGame.handle` never touches a clock, a speaker or a disk. It returns
these values and `tetris_ai.runtime.runner.GameRunner` carries them out in
order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Union


class Event(Enum):
    APPEAR = auto()
    START_GAME = auto()
    PAUSE = auto()
    RESUME = auto()
    MOVE_LEFT = auto()
    MOVE_RIGHT = auto()
    MOVE_DOWN = auto()
    ROTATE = auto()
    DROP = auto()
    TOGGLE_MUTE = auto()
    TICK = auto()
    SPAWN_NEXT = auto()
    CHECK_LINES = auto()
    ANIMATE_LINE_CLEAR = auto()
    FINISH_LINE_CLEAR = auto()
    CHECK_LEVEL_PROGRESSION = auto()
    LEVEL_UP_COMPLETE = auto()
    CHECK_HIGH_SCORE = auto()
    END_GAME = auto()
    START_DEMO = auto()
    STOP_DEMO = auto()
    DEMO_TICK = auto()


class TimerId(Enum):
    GRAVITY = auto()
    LINE_CLEAR = auto()
    LEVEL_TRANSITION = auto()
    DEMO = auto()


class Sound:
    DROP = "drop"
    LINE_CLEAR = "line_clear"
    LEVEL_UP = "level_up"
    THEME = "theme"


@dataclass(frozen=True)
class StartTimer:
    """Repeating timer; replaces any running timer with the same id."""

    timer: TimerId
    interval: float
    event: Event


@dataclass(frozen=True)
class Delay:
    """One-shot timer; replaces any running timer with the same id."""

    timer: TimerId
    seconds: float
    event: Event


@dataclass(frozen=True)
class CancelTimer:
    timer: TimerId


@dataclass(frozen=True)
class PlaySound:
    sound: str


@dataclass(frozen=True)
class StopAudio:
    pass


@dataclass(frozen=True)
class SetAudioMuted:
    muted: bool


@dataclass(frozen=True)
class PersistMuted:
    muted: bool


@dataclass(frozen=True)
class PersistHighScore:
    score: int


@dataclass(frozen=True)
class Dispatch:
    """Feed `event` back into the machine after the current transition."""

    event: Event


Command = Union[StartTimer, Delay, CancelTimer, PlaySound, StopAudio, SetAudioMuted,
                PersistMuted, PersistHighScore, Dispatch]
