"""Unit tests for AudioPlayer and transient audio files."""

import asyncio
import sys
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from speakeasy.audio.player import AudioPlayer, transient_audio_file


def _which(*available: str):
    return lambda command: f"/usr/bin/{command}" if command in available else None


def _player(platform_name: str = "Linux", volume: float = 0.7) -> AudioPlayer:
    player = AudioPlayer(volume=volume)
    player.platform = platform_name
    return player


class TestTransientAudioFile:
    """Test temporary audio file lifecycle."""

    def test_file_written_and_removed(self) -> None:
        with transient_audio_file(b"audio", suffix=".wav") as path:
            assert path.read_bytes() == b"audio"
            assert path.suffix == ".wav"

        assert not path.exists()

    def test_removed_when_body_raises(self) -> None:
        with pytest.raises(RuntimeError):
            with transient_audio_file(b"audio") as path:
                raise RuntimeError("playback failed")

        assert not path.exists()

    def test_custom_directory_created(self) -> None:
        with TemporaryDirectory() as temp_dir:
            directory = Path(temp_dir) / "nested"

            with transient_audio_file(b"audio", directory=directory) as path:
                assert path.parent == directory

            assert list(directory.iterdir()) == []


class TestBuildCommand:
    """Test player command selection."""

    def test_macos_afplay_with_volume(self) -> None:
        with patch("speakeasy.audio.player.shutil.which", _which("afplay")):
            cmd = _player("Darwin", volume=0.5).build_command(Path("/tmp/a.mp3"))

        assert cmd == ["afplay", "-v", "0.5", "/tmp/a.mp3"]

    def test_ffplay_preferred(self) -> None:
        with patch("speakeasy.audio.player.shutil.which", _which("ffplay", "mpg123")):
            cmd = _player().build_command(Path("/tmp/a.mp3"))

        assert cmd[0] == "ffplay"
        assert "-autoexit" in cmd

    def test_mpg123_only_for_mp3(self) -> None:
        with patch("speakeasy.audio.player.shutil.which", _which("mpg123", "aplay")):
            assert _player().build_command(Path("/tmp/a.mp3"))[0] == "mpg123"
            assert _player().build_command(Path("/tmp/a.wav"))[0] == "aplay"

    def test_paplay_before_aplay_for_wav(self) -> None:
        with patch("speakeasy.audio.player.shutil.which", _which("paplay", "aplay")):
            assert _player().build_command(Path("/tmp/a.wav")) == ["paplay", "/tmp/a.wav"]

    def test_no_player_available(self) -> None:
        with patch("speakeasy.audio.player.shutil.which", _which()):
            assert _player().build_command(Path("/tmp/a.mp3")) is None


class TestPlayFile:
    """Test playback through a child process."""

    @pytest.mark.asyncio
    async def test_missing_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            await _player().play_file("/nonexistent/audio.mp3")

    @pytest.mark.asyncio
    async def test_successful_playback(self) -> None:
        process = MagicMock()
        process.returncode = 0
        process.communicate = AsyncMock(return_value=(None, b""))

        with transient_audio_file(b"audio") as path:
            player = _player()
            with (
                patch("speakeasy.audio.player.shutil.which", _which("ffplay")),
                patch(
                    "speakeasy.audio.player.asyncio.create_subprocess_exec",
                    AsyncMock(return_value=process),
                ) as mock_exec,
            ):
                await player.play_file(path)

        assert mock_exec.call_args.args[0] == "ffplay"
        assert not player.is_playing

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self) -> None:
        process = MagicMock()
        process.returncode = 1
        process.communicate = AsyncMock(return_value=(None, b"device busy"))

        with transient_audio_file(b"audio") as path:
            with (
                patch("speakeasy.audio.player.shutil.which", _which("ffplay")),
                patch(
                    "speakeasy.audio.player.asyncio.create_subprocess_exec",
                    AsyncMock(return_value=process),
                ),
            ):
                with pytest.raises(RuntimeError, match="device busy"):
                    await _player().play_file(path)

    @pytest.mark.asyncio
    async def test_stop_terminates_process_without_error(self) -> None:
        finished = asyncio.Event()
        process = MagicMock()
        process.returncode = None

        async def communicate():
            await finished.wait()
            return None, b""

        def terminate():
            process.returncode = -15
            finished.set()

        process.communicate = communicate
        process.terminate = MagicMock(side_effect=terminate)

        with transient_audio_file(b"audio") as path:
            player = _player()
            with (
                patch("speakeasy.audio.player.shutil.which", _which("ffplay")),
                patch(
                    "speakeasy.audio.player.asyncio.create_subprocess_exec",
                    AsyncMock(return_value=process),
                ),
            ):
                task = asyncio.create_task(player.play_file(path))
                await asyncio.sleep(0.01)

                assert player.is_playing
                assert player.stop() is True
                await task

        process.terminate.assert_called_once()
        assert not player.is_playing

    @pytest.mark.asyncio
    async def test_cancel_terminates_player_process(self) -> None:
        finished = asyncio.Event()
        process = MagicMock()
        process.returncode = None

        async def communicate():
            await finished.wait()
            return None, b""

        def terminate():
            process.returncode = -15
            finished.set()

        process.communicate = communicate
        process.terminate = MagicMock(side_effect=terminate)
        process.wait = AsyncMock(return_value=-15)

        with transient_audio_file(b"audio") as path:
            player = _player()
            with (
                patch("speakeasy.audio.player.shutil.which", _which("ffplay")),
                patch(
                    "speakeasy.audio.player.asyncio.create_subprocess_exec",
                    AsyncMock(return_value=process),
                ),
            ):
                task = asyncio.create_task(player.play_file(path))
                await asyncio.sleep(0.01)
                assert player.is_playing

                task.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await task

        process.terminate.assert_called_once()
        process.wait.assert_awaited_once()
        assert not player.is_playing

    def test_stop_when_idle(self) -> None:
        assert _player().stop() is False

    @pytest.mark.asyncio
    async def test_pygame_fallback_when_no_player(self) -> None:
        with transient_audio_file(b"audio") as path:
            player = _player()
            with (
                patch("speakeasy.audio.player.shutil.which", _which()),
                patch("speakeasy.audio.player.pygame") as mock_pygame,
            ):
                mock_pygame.mixer.get_init.return_value = False
                mock_pygame.mixer.music.get_busy.return_value = False

                await player.play_file(path)

                mock_pygame.mixer.init.assert_called_once()
                mock_pygame.mixer.music.load.assert_called_once_with(str(path))
                mock_pygame.mixer.music.set_volume.assert_called_once_with(0.7)
                mock_pygame.mixer.music.play.assert_called_once()
