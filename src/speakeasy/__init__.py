"""speakeasy - text-to-speech with provider fallback and an audio cache."""

__version__ = "0.1.0"
__all__ = ["SpeakEasy", "say", "speak"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name in ("speak", "say"):
        from . import api

        return getattr(api, name)
    if name == "SpeakEasy":
        from .core import SpeakEasy

        return SpeakEasy
    raise AttributeError(f"module 'speakeasy' has no attribute {name!r}")
