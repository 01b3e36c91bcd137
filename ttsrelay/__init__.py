"""Top-level package for ttsrelay.

This package relays chat text from many independent rooms to a VOICEVOX
engine and plays the synthesized speech back per room, in submission order.
The main entry point for adapters is `SpeechRelay`.
"""

from .relay import SpeechRelay

__all__ = ["SpeechRelay", "__version__"]

__version__ = "0.1.0"
