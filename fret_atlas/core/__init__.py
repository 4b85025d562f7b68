"""Core components for the Fret Atlas application."""

# Import interfaces for easier access
from .interfaces import (
    IAudioOutput,
    IVoiceEngine,
)

__all__ = ["IAudioOutput", "IVoiceEngine"]
