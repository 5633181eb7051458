from __future__ import annotations

from typing import Callable, Dict, List, Optional, Protocol

from tetris_ai.services.settings import SettingsStore

from .effects import (
    CancelTimer,
    Command,
    Delay,
    Dispatch,
    Event,
    PersistHighScore,
    PersistMuted,
    PlaySound,
    SetAudioMuted,
    Sound,
    StartTimer,
    StopAudio,
    TimerId,
)
from .grid import GameGrid
from .pieces import Piece
from .rules import DOWN, LEFT, RIGHT, GameRules
from .state import GameConfig, GameState


ANIMATION_EPSILON = 1e-9


class PlannedMove(Protocol):
    column: int
    rotation: int


class MovePlanner(Protocol):
    def best_move(self, board: GameGrid, piece: Piece,
                  next_piece: Optional[Piece]) -> Optional[PlannedMove]: ...


class TetrisGame:
    """Synchronous game state machine.

    `handle(event)` mutates `state` and returns the commands the caller must
    run (timers, sounds, persistence, follow-up events). Nothing here blocks
    or sleeps, so every transition can be driven directly from tests.
    """

    def __init__(self, rules: Optional[GameRules] = None, settings: Optional[SettingsStore] = None,
                 planner: Optional[MovePlanner] = None) -> None:
        self.rules = rules or GameRules()
        self.settings = settings
        self.planner = planner
        self.state: GameState = self.rules.new_state()
        self._handlers: Dict[Event, Callable[[], List[Command]]] = {
            Event.APPEAR: self._appear,
            Event.START_GAME: self._start_game,
            Event.PAUSE: self._pause,
            Event.RESUME: self._resume,
            Event.MOVE_LEFT: lambda: self._shift(LEFT),
            Event.MOVE_RIGHT: lambda: self._shift(RIGHT),
            Event.MOVE_DOWN: self._move_down,
            Event.ROTATE: self._rotate,
            Event.DROP: self._drop,
            Event.TOGGLE_MUTE: self._toggle_mute,
            Event.TICK: self._tick,
            Event.SPAWN_NEXT: self._spawn_next,
            Event.CHECK_LINES: self._check_lines,
            Event.ANIMATE_LINE_CLEAR: self._animate_line_clear,
            Event.FINISH_LINE_CLEAR: self._finish_line_clear,
            Event.CHECK_LEVEL_PROGRESSION: self._check_level_progression,
            Event.LEVEL_UP_COMPLETE: self._level_up_complete,
            Event.CHECK_HIGH_SCORE: self._check_high_score,
            Event.END_GAME: self._end_game,
            Event.START_DEMO: self._start_demo,
            Event.STOP_DEMO: self._stop_demo,
            Event.DEMO_TICK: self._demo_tick,
        }

    @property
    def config(self) -> GameConfig:
        return self.rules.config

    def handle(self, event: Event) -> List[Command]:
        return self._handlers[event]()

    # -- lifecycle ---------------------------------------------------------

    def _appear(self) -> List[Command]:
        muted = self.settings.get_muted() if self.settings else self.state.is_muted
        high_score = self.settings.get_high_score() if self.settings else self.state.high_score
        self.state = self.rules.new_state(high_score=high_score, is_muted=muted)
        self.state.is_game_over = True
        self.state.is_demo_mode = True
        return [SetAudioMuted(muted), Dispatch(Event.START_DEMO)]

    def _start_game(self) -> List[Command]:
        high_score = self.settings.get_high_score() if self.settings else self.state.high_score
        self.state = self.rules.new_state(high_score=high_score, is_muted=self.state.is_muted)
        self.rules.deal(self.state)
        return [
            CancelTimer(TimerId.DEMO),
            CancelTimer(TimerId.LINE_CLEAR),
            CancelTimer(TimerId.LEVEL_TRANSITION),
            StopAudio(),
            StartTimer(TimerId.GRAVITY, self.state.game_speed, Event.TICK),
        ]

    def _start_demo(self) -> List[Command]:
        self.state = self.rules.new_state(high_score=self.state.high_score, is_muted=self.state.is_muted)
        self.state.is_demo_mode = True
        self.rules.deal(self.state)
        return [
            CancelTimer(TimerId.GRAVITY),
            StartTimer(TimerId.DEMO, self.config.demo_interval, Event.DEMO_TICK),
        ]

    def _stop_demo(self) -> List[Command]:
        return [CancelTimer(TimerId.DEMO), StopAudio()]

    def _end_game(self) -> List[Command]:
        self.state.is_game_over = True
        return [CancelTimer(TimerId.GRAVITY), PlaySound(Sound.THEME)]

    def _pause(self) -> List[Command]:
        if self.state.is_game_over or self.state.is_paused:
            return []
        self.state.is_paused = True
        return [CancelTimer(TimerId.GRAVITY)]

    def _resume(self) -> List[Command]:
        if not self.state.is_paused:
            return []
        self.state.is_paused = False
        return self._restart_gravity()

    def _restart_gravity(self) -> List[Command]:
        s = self.state
        if s.is_paused or s.is_game_over or s.is_level_transitioning or s.is_demo_mode:
            return []
        return [StartTimer(TimerId.GRAVITY, s.game_speed, Event.TICK)]

    def _toggle_mute(self) -> List[Command]:
        self.state.is_muted = not self.state.is_muted
        return [SetAudioMuted(self.state.is_muted), PersistMuted(self.state.is_muted)]

    # -- piece control -----------------------------------------------------

    def _controls_locked(self) -> bool:
        return self.state.is_paused or self.state.is_game_over

    def _shift(self, offset) -> List[Command]:
        if self._controls_locked():
            return []
        if self.rules.can_move(self.state, offset):
            self.state.anchor = self.state.anchor.offset(offset.row, offset.column)
        return []

    def _rotate(self) -> List[Command]:
        if self._controls_locked() or self.state.current_piece is None:
            return []
        rotated = self.state.current_piece.rotated()
        # no wall kicks: a blocked rotation is simply dropped
        if self.rules.can_place(self.state.board, rotated, self.state.anchor):
            self.state.current_piece = rotated
        return []

    def _move_down(self) -> List[Command]:
        if self._controls_locked():
            return []
        if self.rules.can_move(self.state, DOWN):
            self.state.anchor = self.state.anchor.offset(DOWN.row)
            return []
        return [Dispatch(Event.SPAWN_NEXT)]

    def _drop(self) -> List[Command]:
        # Lands only; the lock happens on the next failed move down.
        if self._controls_locked():
            return []
        while self.rules.can_move(self.state, DOWN):
            self.state.anchor = self.state.anchor.offset(DOWN.row)
        return [PlaySound(Sound.DROP)]

    def _tick(self) -> List[Command]:
        if self.state.is_game_over or self.state.is_paused:
            return []
        return self._move_down()

    def _demo_tick(self) -> List[Command]:
        s = self.state
        if not s.is_demo_mode or s.is_game_over or s.is_paused:
            return []
        if self.planner is not None and s.current_piece is not None:
            move = self.planner.best_move(s.board, s.current_piece, s.next_piece)
            if move is not None:
                if move.rotation > 0:
                    self._rotate()
                if move.column > s.anchor.column:
                    self._shift(RIGHT)
                elif move.column < s.anchor.column:
                    self._shift(LEFT)
        return self._move_down()

    # -- locking, lines and levels ----------------------------------------

    def _spawn_next(self) -> List[Command]:
        if self.state.is_game_over:
            return []
        if self.rules.spawn(self.state):
            return [Dispatch(Event.CHECK_LINES)]
        commands: List[Command] = []
        if self.state.is_demo_mode:
            commands.append(Dispatch(Event.STOP_DEMO))
        commands.append(Dispatch(Event.END_GAME))
        return commands

    def _check_lines(self) -> List[Command]:
        rows = self.rules.detect_full_lines(self.state.board)
        if not rows:
            return [Dispatch(Event.CHECK_LEVEL_PROGRESSION)]
        self.state.clearing_lines = rows
        self.state.animation_progress = 0.0
        return [
            PlaySound(Sound.LINE_CLEAR),
            StartTimer(TimerId.LINE_CLEAR, self.config.line_clear_interval, Event.ANIMATE_LINE_CLEAR),
        ]

    def _animate_line_clear(self) -> List[Command]:
        if not self.state.clearing_lines:
            return []
        self.state.animation_progress += self.config.line_clear_step
        if self.state.animation_progress >= 1.0 - ANIMATION_EPSILON:
            return [CancelTimer(TimerId.LINE_CLEAR), Dispatch(Event.FINISH_LINE_CLEAR)]
        return []

    def _finish_line_clear(self) -> List[Command]:
        if not self.state.clearing_lines:
            return []
        self.rules.remove_lines(self.state.clearing_lines, self.state)
        self.state.clearing_lines = []
        self.state.animation_progress = 0.0
        return [
            CancelTimer(TimerId.LINE_CLEAR),
            Dispatch(Event.CHECK_LEVEL_PROGRESSION),
            Dispatch(Event.CHECK_HIGH_SCORE),
        ]

    def _check_level_progression(self) -> List[Command]:
        if not self.rules.check_level_progression(self.state):
            return []
        self.state.is_level_transitioning = True
        return [
            CancelTimer(TimerId.GRAVITY),
            PlaySound(Sound.LEVEL_UP),
            Delay(TimerId.LEVEL_TRANSITION, self.config.level_transition_delay, Event.LEVEL_UP_COMPLETE),
        ]

    def _level_up_complete(self) -> List[Command]:
        if not self.state.is_level_transitioning:
            return []
        self.state.is_level_transitioning = False
        return self._restart_gravity()

    def _check_high_score(self) -> List[Command]:
        if self.state.is_demo_mode or self.state.score <= self.state.high_score:
            return []
        self.state.high_score = self.state.score
        return [PersistHighScore(self.state.high_score)]
