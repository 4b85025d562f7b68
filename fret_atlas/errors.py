"""Error kinds raised or returned by the Fret Atlas core."""

from typing import Optional


class FretAtlasError(Exception):
    """Base class for all Fret Atlas errors."""


class OutOfRange(FretAtlasError, ValueError):
    """Octave outside the frequency table's supported range."""

    def __init__(self, octave: int, low: int, high: int):
        self.octave = octave
        self.low = low
        self.high = high
        super().__init__(f"Octave {octave} outside supported range {low}-{high}")


class InvalidFret(FretAtlasError, ValueError):
    """Fret index outside 0..max_fret."""

    def __init__(self, fret: int, max_fret: int):
        self.fret = fret
        self.max_fret = max_fret
        super().__init__(f"Fret {fret} outside 0-{max_fret}")


class UnsupportedPitch(FretAtlasError):
    """A play request for a pitch with no frequency table entry.

    Returned as a value by ``VoiceEngine.play`` rather than raised.
    """

    def __init__(self, pitch_class: str, octave: int, reason: Optional[str] = None):
        self.pitch_class = pitch_class
        self.octave = octave
        self.reason = reason
        message = f"Unsupported pitch {pitch_class}{octave}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AudioDeviceError(FretAtlasError):
    """The audio output device could not be opened."""
