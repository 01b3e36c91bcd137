"""Playback sink and output handles."""

from .outputs import NullOutput, WaveDirectoryOutput
from .sink import PlaybackSink

__all__ = ["NullOutput", "PlaybackSink", "WaveDirectoryOutput"]
