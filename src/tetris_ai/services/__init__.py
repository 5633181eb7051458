"""Collaborators the game talks to: audio output and persisted settings."""

from .audio import AudioSink, NullAudioSink, PygameAudioSink
from .settings import JsonSettingsStore, MemorySettingsStore, SettingsStore

__all__ = [
    "AudioSink",
    "NullAudioSink",
    "PygameAudioSink",
    "JsonSettingsStore",
    "MemorySettingsStore",
    "SettingsStore",
]
