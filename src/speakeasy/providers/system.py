"""System TTS provider using native OS text-to-speech commands.

This module provides text-to-speech functionality using the built-in
TTS capabilities of the operating system (say on macOS, espeak on Linux,
SAPI on Windows).
"""

import asyncio
import logging
import platform
import shutil
import tempfile
from pathlib import Path

from ..tts.errors import ConfigurationError, ProviderError
from .base import ProviderName, TTSProvider

logger = logging.getLogger(__name__)

# Command each platform needs on PATH
PLATFORM_COMMANDS = {"Darwin": "say", "Linux": "espeak", "Windows": "powershell"}


def sapi_rate(rate: int | float) -> int:
    """Map words per minute onto SAPI's -10..10 scale (180 wpm is 0)."""
    return max(-10, min(10, round((rate - 180) / 20)))


class SystemTTSProvider(TTSProvider):
    """System TTS provider using native OS commands.

    Provides text-to-speech functionality without requiring external APIs,
    using the built-in TTS capabilities of the operating system. Output is
    never cached since it costs nothing to regenerate.

    Note: Audio quality will be robotic compared to AI-powered voices.
    """

    name = ProviderName.SYSTEM
    audio_format = "wav"
    cacheable = False

    def __init__(self, voice: str = "Samantha") -> None:
        """Initialize system TTS provider and detect platform."""
        super().__init__(voice)
        self.platform = platform.system()

    def is_configured(self) -> bool:
        command = PLATFORM_COMMANDS.get(self.platform)
        return command is not None and shutil.which(command) is not None

    async def _run(self, cmd: list[str], action: str) -> None:
        # Use async subprocess to avoid blocking event loop
        proc = await asyncio.create_subprocess_exec(
            *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
        )
        _, stderr = await proc.communicate()

        if proc.returncode != 0:
            raise ProviderError(
                f"{action} failed with code {proc.returncode}: "
                f"{stderr.decode(errors='replace').strip()}",
                provider=self.name.value,
            )

    def build_command(
        self, text: str, voice: str, rate: int | float, output_path: str
    ) -> list[str]:
        """Build the synthesis command for the current platform."""
        if self.platform == "Darwin":
            cmd = ["say", "-o", output_path, "-r", str(int(rate))]
            if voice:
                cmd.extend(["-v", voice])
            cmd.append(text)
            return cmd

        if self.platform == "Linux":
            cmd = ["espeak", "-w", output_path, "-s", str(int(rate))]
            if voice:
                cmd.extend(["-v", voice])
            cmd.append(text)
            return cmd

        # Windows: PowerShell with SAPI; single quotes are doubled for escaping
        def quote(value: str) -> str:
            return "'" + value.replace("'", "''") + "'"

        ps_script = (
            "Add-Type -AssemblyName System.Speech\n"
            "$speak = New-Object System.Speech.Synthesis.SpeechSynthesizer\n"
            f"$speak.SetOutputToWaveFile({quote(output_path)})\n"
            f"$speak.Rate = {sapi_rate(rate)}\n"
        )
        if voice:
            ps_script += f"$speak.SelectVoice({quote(voice)})\n"
        ps_script += f"$speak.Speak({quote(text)})\n$speak.Dispose()"
        return ["powershell", "-Command", ps_script]

    async def synthesize(self, text: str, voice: str, rate: int | float) -> bytes:
        """Convert text to speech using native OS commands.

        Args:
            text: Text to convert to speech
            voice: Optional voice ID/name (platform-specific)
            rate: Speech rate in words per minute

        Returns:
            Audio data as bytes in WAV format

        Raises:
            ConfigurationError: If the platform has no usable TTS command
            ProviderError: If TTS command fails
        """
        if not self.is_configured():
            raise ConfigurationError(
                f"System TTS is not available on {self.platform}: "
                f"'{PLATFORM_COMMANDS.get(self.platform, 'say')}' not found"
            )

        with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as tmp:
            output_path = tmp.name
        # macOS writes AIFF first, then converts to WAV for compatibility
        aiff_path = output_path[: -len(".wav")] + ".aiff"

        try:
            if self.platform == "Darwin":
                await self._run(
                    self.build_command(text, voice, rate, aiff_path), "System TTS"
                )
                await self._run(
                    ["afconvert", "-f", "WAVE", "-d", "LEI16", aiff_path, output_path],
                    "Audio conversion",
                )
            else:
                await self._run(
                    self.build_command(text, voice, rate, output_path), "System TTS"
                )

            audio_data = Path(output_path).read_bytes()
            logger.debug(f"System TTS produced {len(audio_data)} bytes")
            return audio_data

        except OSError as e:
            raise ProviderError(
                f"System TTS failed: {e}", provider=self.name.value, original_error=e
            ) from e
        finally:
            # Clean up temporary files
            Path(output_path).unlink(missing_ok=True)
            Path(aiff_path).unlink(missing_ok=True)

    def describe_error(self, error: Exception) -> str:
        return (
            f"System voice failed: {error}. Ensure "
            f"'{PLATFORM_COMMANDS.get(self.platform, 'say')}' command is available."
        )
