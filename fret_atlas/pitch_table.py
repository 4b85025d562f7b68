"""Equal-temperament frequency lookup for pitch classes and octaves."""

from typing import ClassVar, Dict, List, TypeAlias

import numpy as np

from .errors import OutOfRange
from .logger import get_logger
from .note_types import SHARP_NOTES, chromatic_index

logger = get_logger(__name__)


class PitchTable:
    """Precomputed frequencies for every pitch class over octaves 2-7."""

    Frequency: TypeAlias = float

    LOW_OCTAVE: ClassVar[int] = 2
    HIGH_OCTAVE: ClassVar[int] = 7  # One above the keyboard, for high frets
    A4_FREQ: ClassVar[Frequency] = 440.0
    A4_INDEX: ClassVar[int] = 9  # Chromatic position of A

    def __init__(self, reference_hz: float = A4_FREQ) -> None:
        """Build the table.

        Args:
            reference_hz: Frequency of A4 in Hz (default 440.0)
        """
        if not np.isfinite(reference_hz) or reference_hz <= 0:
            raise ValueError(f"Invalid reference frequency: {reference_hz}")
        self._reference_hz = float(reference_hz)

        # rows: pitch classes in chromatic order, columns: octaves LOW..HIGH
        octaves = np.arange(self.LOW_OCTAVE, self.HIGH_OCTAVE + 1)
        indices = np.arange(len(SHARP_NOTES))
        semitones_from_a4 = (indices[:, None] - self.A4_INDEX) + 12 * (
            octaves[None, :] - 4
        )
        self._table = self._reference_hz * np.power(2.0, semitones_from_a4 / 12.0)
        self._table.setflags(write=False)
        logger.debug(
            f"Pitch table built: A4={self._reference_hz}Hz, "
            f"octaves {self.LOW_OCTAVE}-{self.HIGH_OCTAVE}"
        )

    @property
    def reference_hz(self) -> float:
        return self._reference_hz

    def supports(self, octave: int) -> bool:
        return self.LOW_OCTAVE <= octave <= self.HIGH_OCTAVE

    def frequency_of(self, pitch_class: str, octave: int) -> Frequency:
        """Look up the frequency of a pitch.

        Raises:
            OutOfRange: If the octave is outside LOW_OCTAVE..HIGH_OCTAVE
            ValueError: If the pitch class is not a canonical sharp name
        """
        row = chromatic_index(pitch_class)
        if isinstance(octave, bool) or not isinstance(octave, (int, np.integer)):
            raise TypeError(f"Octave must be an integer, got {octave!r}")
        if not self.supports(octave):
            raise OutOfRange(int(octave), self.LOW_OCTAVE, self.HIGH_OCTAVE)
        return float(self._table[row, octave - self.LOW_OCTAVE])

    def as_dict(self) -> Dict[str, List[Frequency]]:
        """Per pitch class, the frequencies for octaves LOW..HIGH rounded to 0.01 Hz."""
        return {
            name: [round(float(f), 2) for f in self._table[i]]
            for i, name in enumerate(SHARP_NOTES)
        }


DEFAULT_TABLE = PitchTable()


def frequency_of(pitch_class: str, octave: int) -> float:
    """Frequency of a pitch in the default (A4 = 440 Hz) table."""
    return DEFAULT_TABLE.frequency_of(pitch_class, octave)
