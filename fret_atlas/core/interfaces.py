"""Defines the core interfaces for the Fret Atlas application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from ..errors import UnsupportedPitch
from ..note_types import Timbre

if TYPE_CHECKING:
    from ..audio.voice import Voice


class IAudioOutput(ABC):
    """Interface for audio output backends.

    A backend pulls stereo blocks from a render callback, either from a
    device callback thread or on demand.
    """

    @abstractmethod
    def start(self, render: Callable[[int], np.ndarray]) -> None:
        """Start pulling (frames, 2) float32 blocks from render."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop pulling audio and release the device."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if output is running."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The negotiated sample rate of the output."""
        pass


class IVoiceEngine(ABC):
    """Interface for the monophonic note player."""

    @abstractmethod
    def play(self, pitch_class: str, octave: int, timbre: Timbre) -> Optional[UnsupportedPitch]:
        """Replace whatever is sounding with a new note."""
        pass

    @abstractmethod
    def stop_current(self) -> None:
        """Fade out the sounding note, if any."""
        pass

    @property
    @abstractmethod
    def current_voice(self) -> Optional["Voice"]:
        """The sounding voice, or None."""
        pass
