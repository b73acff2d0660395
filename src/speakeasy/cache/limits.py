"""Parsing of declarative TTL and size limits.

TTL values are milliseconds or ``<number><unit>`` strings such as ``"7d"``
or ``"1.5h"``. Size values are bytes or strings such as ``"100mb"``.
"""

import re

from ..tts.errors import InvalidConfigurationError

TTL_UNITS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
    "M": 30 * 24 * 60 * 60 * 1000,
    "y": 365 * 24 * 60 * 60 * 1000,
}

SIZE_UNITS: dict[str, int] = {
    "b": 1,
    "kb": 1024,
    "mb": 1024 * 1024,
    "gb": 1024 * 1024 * 1024,
}

_VALUE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)([a-zA-Z]*)$")


def _split(value: str, kind: str) -> tuple[float, str]:
    match = _VALUE_PATTERN.match(value.strip())
    if not match:
        raise InvalidConfigurationError(f"Invalid {kind} format: {value!r}")
    return float(match.group(1)), match.group(2)


def _check_number(value: object, kind: str) -> float:
    # bool is an int subclass; True is not a duration
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfigurationError(f"Invalid {kind} format: {value!r}")
    if value < 0:
        raise InvalidConfigurationError(f"{kind} cannot be negative: {value!r}")
    return float(value)


def parse_ttl(ttl: str | int | float | None) -> float | None:
    """Parse a TTL value into milliseconds.

    Args:
        ttl: Milliseconds as a number, or a string like "30s", "7d", "1M"

    Returns:
        TTL in milliseconds, or None when no TTL is configured

    Raises:
        InvalidConfigurationError: If the value is malformed or the unit unknown
    """
    if ttl is None:
        return None
    if not isinstance(ttl, str):
        return _check_number(ttl, "TTL")

    amount, unit = _split(ttl, "TTL")
    if not unit:
        return amount
    if unit not in TTL_UNITS:
        raise InvalidConfigurationError(
            f"Invalid TTL unit: {unit}. Use: {', '.join(TTL_UNITS)}"
        )
    return amount * TTL_UNITS[unit]


def parse_size(size: str | int | float | None) -> int | None:
    """Parse a size limit into bytes.

    Args:
        size: Bytes as a number, or a string like "512KB", "100mb", "1GB"

    Returns:
        Size in bytes, or None when no limit is configured

    Raises:
        InvalidConfigurationError: If the value is malformed or the unit unknown
    """
    if size is None:
        return None
    if not isinstance(size, str):
        return int(_check_number(size, "size"))

    amount, unit = _split(size, "size")
    if not unit:
        return int(amount)
    multiplier = SIZE_UNITS.get(unit.lower())
    if multiplier is None:
        raise InvalidConfigurationError(
            f"Invalid size unit: {unit}. Use: B, KB, MB, GB"
        )
    return int(amount * multiplier)
