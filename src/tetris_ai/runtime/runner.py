from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from tetris_ai.game.core import TetrisGame
from tetris_ai.game.effects import (
    CancelTimer,
    Command,
    Delay,
    Dispatch,
    Event,
    PersistHighScore,
    PersistMuted,
    PlaySound,
    SetAudioMuted,
    StartTimer,
    StopAudio,
    TimerId,
)
from tetris_ai.game.state import GameState
from tetris_ai.services.audio import AudioSink, NullAudioSink
from tetris_ai.services.settings import SettingsStore

from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class GameRunner:
    """Serial event queue in front of a `TetrisGame`.

    Every event, whether it comes from the player, a timer or a `Dispatch`
    command, goes through `dispatch` and is handled one at a time. At most one
    timer per `TimerId` is alive; a timer that was replaced or cancelled never
    delivers another event, even if its callback was already queued.
    """

    def __init__(self, game: TetrisGame, scheduler: Scheduler, audio: Optional[AudioSink] = None,
                 settings: Optional[SettingsStore] = None) -> None:
        self.game = game
        self.scheduler = scheduler
        self.audio = audio if audio is not None else NullAudioSink()
        self.settings = settings if settings is not None else game.settings
        self._queue: Deque[Event] = deque()
        self._draining = False
        self._timers: Dict[TimerId, Tuple[int, TimerHandle]] = {}
        self._generation = 0
        self.history: List[Event] = []

    @property
    def state(self) -> GameState:
        return self.game.state

    @property
    def active_timers(self) -> set:
        return set(self._timers)

    def dispatch(self, event: Event) -> None:
        self._queue.append(event)
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                current = self._queue.popleft()
                self.history.append(current)
                for command in self.game.handle(current):
                    self._execute(command)
        finally:
            self._draining = False

    # -- command execution -------------------------------------------------

    def _execute(self, command: Command) -> None:
        if isinstance(command, Dispatch):
            self._queue.append(command.event)
        elif isinstance(command, StartTimer):
            self._start(command.timer, command.event, command.interval, repeat=True)
        elif isinstance(command, Delay):
            self._start(command.timer, command.event, command.seconds, repeat=False)
        elif isinstance(command, CancelTimer):
            self._cancel(command.timer)
        elif isinstance(command, PlaySound):
            self._play(command.sound)
        elif isinstance(command, StopAudio):
            self._guarded("stop audio", self.audio.stop)
        elif isinstance(command, SetAudioMuted):
            self._guarded("set audio mute", setattr, self.audio, "muted", command.muted)
        elif isinstance(command, PersistMuted):
            if self.settings is not None:
                self._guarded("persist mute flag", self.settings.set_muted, command.muted)
        elif isinstance(command, PersistHighScore):
            if self.settings is not None:
                self._guarded("persist high score", self.settings.set_high_score, command.score)
        else:
            raise TypeError(f"Unknown command: {command!r}")

    def _start(self, timer: TimerId, event: Event, seconds: float, repeat: bool) -> None:
        self._cancel(timer)
        self._generation += 1
        token = self._generation

        def fire() -> None:
            entry = self._timers.get(timer)
            if entry is None or entry[0] != token:
                return
            if not repeat:
                del self._timers[timer]
            self.dispatch(event)

        if repeat:
            handle = self.scheduler.call_every(seconds, fire)
        else:
            handle = self.scheduler.call_later(seconds, fire)
        self._timers[timer] = (token, handle)

    def _cancel(self, timer: TimerId) -> None:
        entry = self._timers.pop(timer, None)
        if entry is not None:
            entry[1].cancel()

    def _play(self, sound: str) -> None:
        try:
            played = self.audio.play(sound)
        except Exception:
            logger.warning("Sound %r failed", sound, exc_info=True)
            return
        if not played:
            logger.debug("Sound %r was not played", sound)

    def _guarded(self, what: str, func, *args) -> None:
        try:
            func(*args)
        except Exception:
            logger.warning("Could not %s", what, exc_info=True)
