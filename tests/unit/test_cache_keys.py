"""Unit tests for cache key generation."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from speakeasy.cache.keys import KEY_LENGTH, generate_cache_key, normalize_text


class TestNormalizeText:
    """Test text normalization before hashing."""

    def test_trims_and_lowercases(self) -> None:
        assert normalize_text("  Hello World \n") == "hello world"

    def test_inner_whitespace_preserved(self) -> None:
        assert normalize_text("a  b") == "a  b"


class TestGenerateCacheKey:
    """Test deterministic key generation."""

    def test_key_is_16_hex_characters(self) -> None:
        key = generate_cache_key("Hello", "openai", "nova", 180)

        assert len(key) == KEY_LENGTH == 16
        int(key, 16)

    def test_same_input_same_key(self) -> None:
        """Test that equal inputs always produce equal keys."""
        keys = {generate_cache_key("Hello", "openai", "nova", 180) for _ in range(5)}
        assert len(keys) == 1

    def test_case_and_surrounding_whitespace_ignored(self) -> None:
        assert generate_cache_key("  HELLO ", "openai", "nova", 180) == (
            generate_cache_key("hello", "openai", "nova", 180)
        )

    def test_known_value(self) -> None:
        """Test the key is the sha256 prefix of the joined tuple."""
        import hashlib

        expected = hashlib.sha256(b"hello|openai|nova|180").hexdigest()[:16]
        assert generate_cache_key("Hello", "openai", "nova", 180) == expected

    @pytest.mark.parametrize(
        "other",
        [
            ("hello!", "openai", "nova", 180),
            ("hello", "groq", "nova", 180),
            ("hello", "openai", "alloy", 180),
            ("hello", "openai", "nova", 200),
        ],
    )
    def test_any_component_changes_key(self, other: tuple) -> None:
        assert generate_cache_key("hello", "openai", "nova", 180) != (
            generate_cache_key(*other)
        )

    @pytest.mark.parametrize("position", range(4))
    def test_none_parameter_rejected(self, position: int) -> None:
        args: list = ["hello", "openai", "nova", 180]
        args[position] = None

        with pytest.raises(ValueError, match="must be non-None"):
            generate_cache_key(*args)

    def test_empty_strings_allowed(self) -> None:
        """Test that empty strings are valid, only None is rejected."""
        key = generate_cache_key("", "", "", 0)
        assert len(key) == 16
