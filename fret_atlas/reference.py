"""The note reference: what a keyboard/fretboard UI talks to.

A click on a key or fret becomes ``select_note``; clicking elsewhere
becomes ``clear_selection``; the two toggles change how labels are spelled.
The UI listens on ``events`` and redraws from what it receives.
"""

from typing import List, NamedTuple, Optional, Union

from .audio.voice_engine import VoiceEngine
from .core.events import ReferenceEvents
from .fretboard import KEYBOARD_HIGH_OCTAVE, KEYBOARD_LOW_OCTAVE, PositionMapper, keyboard_notes
from .logger import get_logger
from .note_types import DisplayMode, NoteSelection, Pitch, Timbre
from .note_utils import describe_positions, note_label, selection_title
from .pitch_table import DEFAULT_TABLE, PitchTable

logger = get_logger(__name__)

DEFAULT_TITLE = "Play a note"
DEFAULT_TEXT = "Click a note to hear and see where it appears."


class LabelledNote(NamedTuple):
    pitch: Pitch
    label: str
    active: bool = False  # Same pitch as the current selection


class NoteReference:
    """Connects selections to the voice engine and the position mapper."""

    def __init__(
        self,
        engine: VoiceEngine,
        mapper: Optional[PositionMapper] = None,
        pitch_table: Optional[PitchTable] = None,
        display_mode: Optional[DisplayMode] = None,
    ) -> None:
        self.engine = engine
        self.mapper = mapper or PositionMapper()
        self.pitch_table = pitch_table or DEFAULT_TABLE
        self.events = ReferenceEvents()
        self._display_mode = display_mode or DisplayMode()
        self._selected: Optional[Pitch] = None

    @property
    def display_mode(self) -> DisplayMode:
        return self._display_mode

    @property
    def selected(self) -> Optional[Pitch]:
        return self._selected

    def select_note(
        self, pitch_class: str, octave: int, timbre: Union[Timbre, str] = Timbre.PRIMARY
    ) -> NoteSelection:
        """Play a note and report where else it sits on the fretboard."""
        pitch = Pitch(pitch_class, octave)

        self.engine.stop_current()
        error = self.engine.play(pitch_class, octave, timbre)
        frequency = None
        if error is None:
            frequency = self.pitch_table.frequency_of(pitch_class, octave)

        positions = tuple(self.mapper.positions_of(pitch_class, octave))
        selection = NoteSelection(
            pitch=pitch,
            title=selection_title(pitch),
            info=describe_positions(positions),
            positions=positions,
            frequency=frequency,
            error=error,
        )
        self._selected = pitch
        logger.info(f"{selection.title}: {selection.info}")
        self.events.emit_note_selected(selection)
        return selection

    def clear_selection(self) -> None:
        """Silence the current note and reset the info panel."""
        self.engine.stop_current()
        self._selected = None
        self.events.emit_selection_cleared(DEFAULT_TITLE, DEFAULT_TEXT)

    def toggle_octave_numbers(self) -> DisplayMode:
        return self._set_display_mode(self._display_mode.toggled_octave_numbers())

    def toggle_flats(self) -> DisplayMode:
        return self._set_display_mode(self._display_mode.toggled_flats())

    def _set_display_mode(self, mode: DisplayMode) -> DisplayMode:
        self._display_mode = mode
        logger.debug(f"Display mode: {mode}")
        self.events.emit_display_mode_changed(mode)
        return mode

    def label(self, pitch: Pitch) -> str:
        return note_label(pitch.pitch_class, pitch.octave, self._display_mode)

    def _labelled(self, pitch: Pitch) -> LabelledNote:
        return LabelledNote(pitch, self.label(pitch), pitch == self._selected)

    def keyboard(self) -> List[LabelledNote]:
        """Every piano key from C2 to B6 with its current label and highlight."""
        return [
            self._labelled(pitch)
            for pitch in keyboard_notes(KEYBOARD_LOW_OCTAVE, KEYBOARD_HIGH_OCTAVE)
        ]

    def fretboard(self) -> List[List[LabelledNote]]:
        """One row per string, high to low, frets 0 and up.

        Every cell sounding the selected pitch is active, so a selection made
        on the keyboard lights up all of its fretboard positions.
        """
        return [
            [self._labelled(pitch) for pitch in row]
            for row in self.mapper.grid()
        ]

    def close(self) -> None:
        self.events.clear()
        self.engine.close()
