"""Fretboard position mapping for a six-string guitar."""

from typing import List, Optional, Sequence

import numpy as np

from .errors import InvalidFret
from .logger import get_logger
from .note_types import SHARP_NOTES, FretPosition, Pitch, StringTuning, chromatic_index

logger = get_logger(__name__)

NUM_FRETS = 24

# Standard tuning, ordered from high E (top) to low E (bottom)
STANDARD_TUNING: List[StringTuning] = [
    StringTuning("e", "E", 4),  # High E (1st string)
    StringTuning("B", "B", 3),
    StringTuning("G", "G", 3),
    StringTuning("D", "D", 3),
    StringTuning("A", "A", 2),
    StringTuning("E", "E", 2),  # Low E (6th string)
]

KEYBOARD_LOW_OCTAVE = 2
KEYBOARD_HIGH_OCTAVE = 6


def note_at_fret(
    string: StringTuning, fret: int, max_fret: int = NUM_FRETS
) -> Pitch:
    """Pitch sounded by a string stopped at a fret.

    Each fret raises the pitch by one semitone; the octave number goes up
    every time the count passes B.

    Args:
        string: The open string
        fret: Fret number, 0 for the open string
        max_fret: Highest valid fret (default 24)

    Raises:
        InvalidFret: If fret is outside 0..max_fret
    """
    if isinstance(fret, bool) or not isinstance(fret, (int, np.integer)) or not 0 <= fret <= max_fret:
        raise InvalidFret(fret, max_fret)

    base = chromatic_index(string.open_pitch_class)
    total = base + int(fret)
    return Pitch(SHARP_NOTES[total % 12], string.open_octave + total // 12)


def positions_of(
    pitch_class: str,
    octave: int,
    strings: Sequence[StringTuning] = STANDARD_TUNING,
    max_fret: int = NUM_FRETS,
) -> List[FretPosition]:
    """Every (string, fret) that sounds exactly the given pitch.

    Strings are visited in their declared order and frets ascend within each
    string. An empty list means the pitch is not on the instrument.
    """
    target = Pitch(pitch_class, octave)
    positions = [
        FretPosition(string.label, fret)
        for string in strings
        for fret in range(max_fret + 1)
        if note_at_fret(string, fret, max_fret) == target
    ]
    logger.debug(f"{target}: {len(positions)} fretboard position(s)")
    return positions


def keyboard_notes(
    low_octave: int = KEYBOARD_LOW_OCTAVE, high_octave: int = KEYBOARD_HIGH_OCTAVE
) -> List[Pitch]:
    """Piano keys from C of low_octave to B of high_octave, ascending."""
    return [
        Pitch(name, octave)
        for octave in range(low_octave, high_octave + 1)
        for name in SHARP_NOTES
    ]


def fretboard_grid(
    strings: Sequence[StringTuning] = STANDARD_TUNING, num_frets: int = NUM_FRETS
) -> List[List[Pitch]]:
    """The pitch of every cell: one row per string, frets 0..num_frets."""
    return [
        [note_at_fret(string, fret, num_frets) for fret in range(num_frets + 1)]
        for string in strings
    ]


class PositionMapper:
    """Binds a tuning and fret count for callers that don't want to pass them around."""

    def __init__(
        self,
        strings: Optional[Sequence[StringTuning]] = None,
        num_frets: int = NUM_FRETS,
    ) -> None:
        if num_frets < 0:
            raise ValueError(f"num_frets must be non-negative, got {num_frets}")
        self.strings: List[StringTuning] = list(strings or STANDARD_TUNING)
        self.num_frets = int(num_frets)

    def string(self, label: str) -> StringTuning:
        for string in self.strings:
            if string.label == label:
                return string
        raise KeyError(f"No string labelled {label!r}")

    def note_at_fret(self, string: StringTuning, fret: int) -> Pitch:
        return note_at_fret(string, fret, self.num_frets)

    def positions_of(self, pitch_class: str, octave: int) -> List[FretPosition]:
        return positions_of(pitch_class, octave, self.strings, self.num_frets)

    def grid(self) -> List[List[Pitch]]:
        return fretboard_grid(self.strings, self.num_frets)

    def lowest(self) -> Pitch:
        return min(s.open_pitch for s in self.strings)

    def highest(self) -> Pitch:
        return max(self.note_at_fret(s, self.num_frets) for s in self.strings)
