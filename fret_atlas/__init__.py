"""Fret Atlas - a piano and guitar fretboard note reference with a monophonic synth."""

from .note_types import DisplayMode, FretPosition, Pitch, StringTuning, Timbre
from .pitch_table import PitchTable, frequency_of
from .fretboard import NUM_FRETS, STANDARD_TUNING, PositionMapper, note_at_fret, positions_of
from .note_utils import display_name
from .errors import FretAtlasError, InvalidFret, OutOfRange, UnsupportedPitch

__version__ = "0.1.0"

__all__ = [
    "DisplayMode",
    "FretPosition",
    "Pitch",
    "StringTuning",
    "Timbre",
    "PitchTable",
    "frequency_of",
    "NUM_FRETS",
    "STANDARD_TUNING",
    "PositionMapper",
    "note_at_fret",
    "positions_of",
    "display_name",
    "FretAtlasError",
    "InvalidFret",
    "OutOfRange",
    "UnsupportedPitch",
]
