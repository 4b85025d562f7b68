"""Type definitions for the Fret Atlas project."""

from dataclasses import dataclass, replace
from enum import Enum
from functools import total_ordering
from typing import List, Optional, Tuple

# Canonical (sharp) spelling, in chromatic order from C
SHARP_NOTES: List[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]


def chromatic_index(pitch_class: str) -> int:
    """Return the 0-11 chromatic position of a canonical pitch class name.

    Raises:
        ValueError: If the name is not one of the 12 canonical sharp spellings
    """
    try:
        return SHARP_NOTES.index(pitch_class)
    except ValueError:
        raise ValueError(f"Unknown pitch class: {pitch_class!r}") from None


@total_ordering
@dataclass(frozen=True)
class Pitch:
    """A pitch class in a given octave (scientific pitch notation)."""

    pitch_class: str  # Canonical sharp spelling (e.g., 'C#')
    octave: int  # e.g. 4 for middle C

    def __str__(self):
        return f"{self.pitch_class}{self.octave}"

    def __lt__(self, other):
        if not isinstance(other, Pitch):
            return NotImplemented
        return self.semitone < other.semitone

    @property
    def semitone(self) -> int:
        """Absolute semitone number, C0 = 0."""
        return chromatic_index(self.pitch_class) + 12 * self.octave


@dataclass(frozen=True)
class StringTuning:
    """An open string: its label and the pitch it sounds unfretted."""

    label: str  # 'e' for the high E string, 'E' for the low one
    open_pitch_class: str
    open_octave: int

    @property
    def open_pitch(self) -> Pitch:
        return Pitch(self.open_pitch_class, self.open_octave)


@dataclass(frozen=True)
class FretPosition:
    """Represents a position on the guitar fretboard."""

    string_label: str
    fret: int  # Fret number (0 for open string)

    def __str__(self):
        return f"{self.string_label} string, fret {self.fret}"


@dataclass(frozen=True)
class DisplayMode:
    """How note names are spelled for display. Passed in, never global."""

    show_octave_numbers: bool = False
    show_flats: bool = False

    def toggled_octave_numbers(self) -> "DisplayMode":
        return replace(self, show_octave_numbers=not self.show_octave_numbers)

    def toggled_flats(self) -> "DisplayMode":
        return replace(self, show_flats=not self.show_flats)


class Timbre(Enum):
    """Rendering preset for the two playable surfaces.

    Only the stereo pan direction differs between them.
    """

    PRIMARY = "piano"
    SECONDARY = "guitar"

    @property
    def pan_direction(self) -> float:
        return -1.0 if self is Timbre.PRIMARY else 1.0

    @classmethod
    def parse(cls, value) -> "Timbre":
        """Accept a Timbre, its value ('piano'/'guitar') or its name."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for timbre in cls:
            if text in (timbre.value, timbre.name.lower()):
                return timbre
        raise ValueError(f"Unknown timbre: {value!r}")


@dataclass(frozen=True)
class NoteSelection:
    """Everything the UI needs after a key or fret is activated."""

    pitch: Pitch
    title: str  # e.g. 'Selected Note: E4'
    info: str  # positions text or the out-of-range message
    positions: Tuple[FretPosition, ...]
    frequency: Optional[float] = None  # Hz, None if the pitch has no table entry
    error: Optional[Exception] = None  # UnsupportedPitch when nothing was played
