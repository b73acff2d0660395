"""Audio player for cross-platform playback of audio files.

Prefers a native command-line player run as a child process so that playback
can be interrupted by terminating it. Falls back to the pygame mixer when no
player command is installed.
"""

# ruff: noqa: E402
import os

# Suppress pygame's annoying welcome message BEFORE any pygame import
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import warnings

# Suppress pygame's pkg_resources deprecation warning spam
warnings.filterwarnings("ignore", category=UserWarning, module="pygame.pkgdata")

import asyncio
import logging
import platform
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import pygame

logger = logging.getLogger(__name__)

# Candidate players on non-macOS platforms, with the formats each can handle
LINUX_PLAYERS: list[tuple[str, tuple[str, ...]]] = [
    ("ffplay", ("mp3", "wav")),
    ("mpg123", ("mp3",)),
    ("paplay", ("wav",)),
    ("aplay", ("wav",)),
]


@contextmanager
def transient_audio_file(
    audio_data: bytes, suffix: str = ".mp3", directory: Path | None = None
) -> Iterator[Path]:
    """Write audio to a temporary file that is removed on every exit path.

    Args:
        audio_data: Audio bytes to write
        suffix: File suffix, including the dot
        directory: Directory for the file (defaults to the system temp dir)

    Yields:
        Path of the temporary file
    """
    if directory is not None:
        directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(suffix=suffix, prefix="speakeasy-", dir=directory)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(audio_data)
        yield path
    finally:
        path.unlink(missing_ok=True)


class AudioPlayer:
    """Cross-platform audio player.

    Plays one file at a time. ``stop()`` interrupts whatever is playing.
    """

    def __init__(self, volume: float = 0.7) -> None:
        """Initialize the audio player.

        Args:
            volume: Playback volume between 0.0 and 1.0
        """
        self.volume = volume
        self.platform = platform.system()
        self._process: asyncio.subprocess.Process | None = None
        self._pygame_active = False
        self._stopped = False

    @property
    def is_playing(self) -> bool:
        return self._pygame_active or (
            self._process is not None and self._process.returncode is None
        )

    def build_command(self, path: Path) -> list[str] | None:
        """Return the player command for a file, or None if no player fits."""
        if self.platform == "Darwin" and shutil.which("afplay"):
            return ["afplay", "-v", str(self.volume), str(path)]

        extension = path.suffix.lstrip(".").lower()
        for command, formats in LINUX_PLAYERS:
            if extension not in formats or shutil.which(command) is None:
                continue
            if command == "ffplay":
                return [command, "-nodisp", "-autoexit", "-loglevel", "quiet", str(path)]
            if command == "mpg123":
                return [command, "-q", str(path)]
            return [command, str(path)]
        return None

    async def play_file(self, path: str | Path) -> None:
        """Play an audio file and wait for it to finish.

        Args:
            path: Audio file in MP3 or WAV format

        Raises:
            FileNotFoundError: If the file does not exist
            RuntimeError: If audio playback fails
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        self._stopped = False
        cmd = self.build_command(path)
        if cmd is None:
            logger.debug("No audio player command found, using pygame")
            await self._play_with_pygame(path)
            return

        logger.debug(f"Playing {path} with {cmd[0]}")
        try:
            self._process = await asyncio.create_subprocess_exec(
                *cmd, stdout=asyncio.subprocess.DEVNULL, stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise RuntimeError(f"Failed to start audio player {cmd[0]}: {e}") from e

        process = self._process
        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                logger.debug(f"Playback cancelled, terminating {cmd[0]}")
                process.terminate()
                await process.wait()
            raise
        finally:
            self._process = None

        if process.returncode != 0 and not self._stopped:
            raise RuntimeError(
                f"Audio playback failed with code {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )

    async def _play_with_pygame(self, path: Path) -> None:
        def _play_audio() -> None:
            """Synchronous audio playback in thread."""
            try:
                if not pygame.mixer.get_init():
                    pygame.mixer.init()
                pygame.mixer.music.load(str(path))
                pygame.mixer.music.set_volume(self.volume)
                pygame.mixer.music.play()

                # Wait for playback to complete
                while pygame.mixer.music.get_busy():
                    pygame.time.Clock().tick(10)

            except pygame.error as e:
                raise RuntimeError(f"Failed to play audio: {e}") from e

        self._pygame_active = True
        try:
            # Run pygame operations in thread to avoid blocking event loop
            await asyncio.to_thread(_play_audio)
        finally:
            self._pygame_active = False

    def stop(self) -> bool:
        """Stop the active playback.

        Returns:
            True if something was playing
        """
        if self._process is not None and self._process.returncode is None:
            self._stopped = True
            try:
                self._process.terminate()
            except ProcessLookupError:
                pass
            logger.debug("Stopped audio player process")
            return True

        if self._pygame_active:
            self._stopped = True
            pygame.mixer.music.stop()
            logger.debug("Stopped pygame playback")
            return True

        return False
