from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class AudioSink(Protocol):
    muted: bool

    def play(self, sound: str) -> bool: ...

    def stop(self) -> None: ...


class NullAudioSink:
    """Silent sink that remembers what it was asked to play."""

    def __init__(self) -> None:
        self.muted = False
        self.played: List[str] = []
        self.stops = 0

    def play(self, sound: str) -> bool:
        self.played.append(sound)
        return not self.muted

    def stop(self) -> None:
        self.stops += 1


DEFAULT_SOUND_FILES: Dict[str, str] = {
    "drop": "drop.wav",
    "line_clear": "line_clear.wav",
    "level_up": "level_up.wav",
    "theme": "theme.ogg",
}


class PygameAudioSink:
    """Plays sound effects through `pygame.mixer`.

    The mixer is initialised lazily on first use. Any failure (no audio device,
    missing file, undecodable file) is logged and reported as `False`.
    """

    def __init__(self, sound_dir: str, files: Optional[Dict[str, str]] = None) -> None:
        self.sound_dir = sound_dir
        self.files = dict(files or DEFAULT_SOUND_FILES)
        self.muted = False
        self._sounds: Dict[str, object] = {}
        self._ready: Optional[bool] = None

    def _mixer(self):
        import pygame

        if self._ready is None:
            try:
                pygame.mixer.init()
                self._ready = True
            except pygame.error as exc:
                logger.warning("Audio disabled, mixer unavailable: %s", exc)
                self._ready = False
        return pygame if self._ready else None

    def _sound(self, pygame, name: str):
        if name in self._sounds:
            return self._sounds[name]
        filename = self.files.get(name)
        if filename is None:
            logger.warning("No sound registered for %r", name)
            return None
        path = os.path.join(self.sound_dir, filename)
        try:
            sound = pygame.mixer.Sound(path)
        except (pygame.error, FileNotFoundError) as exc:
            logger.warning("Could not load sound %s: %s", path, exc)
            return None
        self._sounds[name] = sound
        return sound

    def play(self, sound: str) -> bool:
        if self.muted:
            return False
        pygame = self._mixer()
        if pygame is None:
            return False
        effect = self._sound(pygame, sound)
        if effect is None:
            return False
        effect.play()
        return True

    def stop(self) -> None:
        if self._ready:
            import pygame

            pygame.mixer.stop()
