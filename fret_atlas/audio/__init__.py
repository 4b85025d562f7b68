"""Synthesis: the audio graph, voices and the monophonic engine.

The sounddevice backend lives in ``audio_output`` and is imported on demand,
so this package works without an audio device.
"""

from .context import AudioContext, OfflineOutput
from .voice import SynthSettings, Voice
from .voice_engine import Idle, Ready, Sounding, VoiceEngine

__all__ = [
    "AudioContext",
    "OfflineOutput",
    "SynthSettings",
    "Voice",
    "VoiceEngine",
    "Idle",
    "Ready",
    "Sounding",
]
