"""Audio playback package for speakeasy.

This package provides cross-platform audio playback through native player
commands, with pygame as the fallback.
"""

from .player import AudioPlayer, transient_audio_file

__all__ = ["AudioPlayer", "transient_audio_file"]
