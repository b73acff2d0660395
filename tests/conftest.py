"""Pytest configuration and fixtures for speakeasy tests."""

import sys
from collections.abc import Generator
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path) -> Generator[None]:
    """Keep tests away from the user's config file, cache and API keys."""
    import speakeasy.config as config_module

    for var in (
        "SPEAKEASY_PROVIDER",
        "SPEAKEASY_CACHE_DIR",
        "OPENAI_API_KEY",
        "ELEVENLABS_API_KEY",
        "GROQ_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))

    config_dir = tmp_path / "config"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_PATH", config_dir / "config.toml")
    config_module.reset_config_cache()

    yield

    config_module.reset_config_cache()


@pytest.fixture
def cache_dir() -> Generator[Path]:
    """Temporary cache directory."""
    with TemporaryDirectory() as temp_dir:
        yield Path(temp_dir) / "cache"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
