"""Text-to-speech engine access and voice configuration.

This package contains the per-room voice profile store and the synthesis
gateway used by room drain loops.
"""

from .synthesizer import SpeechSynthesizer, VoicevoxSynthesizer
from .voicevox_client import VoicevoxClient
from .voices import RoomVoiceProfile, VoiceProfileStore

__all__ = [
    "RoomVoiceProfile",
    "SpeechSynthesizer",
    "VoiceProfileStore",
    "VoicevoxClient",
    "VoicevoxSynthesizer",
]
