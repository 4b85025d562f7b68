"""Utility functions for spelling and describing notes for display."""

import re
from typing import Dict, Sequence

from .logger import get_logger
from .note_types import SHARP_NOTES, DisplayMode, FretPosition, Pitch

# Get logger for this module
logger = get_logger(__name__)

# Mapping between sharp and flat note names
SHARP_TO_FLAT: Dict[str, str] = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
}

NATURAL_INDEX: Dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
ACCIDENTAL_OFFSET: Dict[str, int] = {"": 0, "#": 1, "b": -1}

# Compile regex to extract note name and octave
# This pattern matches:
# - Note name (A-G, case insensitive)
# - Optional accidental (# or b)
# - Octave number, possibly negative
NOTE_PATTERN = re.compile(r"^([A-Ga-g])([#b]?)(-?[0-9]+)$")

NOT_ON_GUITAR = "Note is outside standard guitar range"
POSITION_SEPARATOR = " • "


def display_name(pitch_class: str, mode: DisplayMode) -> str:
    """Spell a canonical pitch class for display.

    Args:
        pitch_class: Canonical sharp name (e.g., 'C#')
        mode: Current display settings

    Returns:
        str: The flat spelling (e.g., 'Db') when mode.show_flats is set and
        the pitch class is one of the five sharps, otherwise pitch_class
        unchanged

    Examples:
        >>> display_name('C#', DisplayMode(show_flats=True))  # Returns 'Db'
        >>> display_name('E', DisplayMode(show_flats=True))  # Returns 'E'
    """
    if mode.show_flats:
        return SHARP_TO_FLAT.get(pitch_class, pitch_class)
    return pitch_class


def note_label(pitch_class: str, octave: int, mode: DisplayMode) -> str:
    """Key or fret label text: display name, plus octave if enabled."""
    name = display_name(pitch_class, mode)
    return f"{name}{octave}" if mode.show_octave_numbers else name


def selection_title(pitch: Pitch) -> str:
    return f"Selected Note: {pitch}"


def describe_positions(positions: Sequence[FretPosition]) -> str:
    """Human-readable list of fretboard positions, or the not-found message."""
    if not positions:
        return NOT_ON_GUITAR
    return "Found on guitar: " + POSITION_SEPARATOR.join(str(p) for p in positions)


def parse_note(text: str) -> Pitch:
    """Parse note text such as 'A4', 'c#3' or 'Db5' into a canonical Pitch.

    Flat spellings are normalized to sharps. Accidentals that cross the B-C
    boundary move the octave (Cb4 -> B3, B#3 -> C4).

    Raises:
        ValueError: If the text is not a note name followed by an octave
    """
    match = NOTE_PATTERN.match(str(text).strip())
    if not match:
        raise ValueError(f"Invalid note format: {text!r} (expected e.g. 'A4' or 'Db3')")

    letter, accidental, octave = match.groups()
    total = NATURAL_INDEX[letter.upper()] + ACCIDENTAL_OFFSET[accidental] + 12 * int(octave)
    pitch = Pitch(SHARP_NOTES[total % 12], total // 12)

    logger.debug(f"Parsed {text!r} as {pitch}")
    return pitch
