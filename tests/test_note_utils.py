import unittest

from fret_atlas.note_types import SHARP_NOTES, DisplayMode, FretPosition, Pitch
from fret_atlas.note_utils import (
    NOT_ON_GUITAR,
    describe_positions,
    display_name,
    note_label,
    parse_note,
    selection_title,
)


class TestDisplayName(unittest.TestCase):
    def test_sharps_by_default(self):
        mode = DisplayMode()
        for name in SHARP_NOTES:
            self.assertEqual(display_name(name, mode), name)

    def test_flats(self):
        mode = DisplayMode(show_flats=True)
        self.assertEqual(display_name("C#", mode), "Db")
        self.assertEqual(display_name("D#", mode), "Eb")
        self.assertEqual(display_name("F#", mode), "Gb")
        self.assertEqual(display_name("G#", mode), "Ab")
        self.assertEqual(display_name("A#", mode), "Bb")

    def test_naturals_never_change(self):
        mode = DisplayMode(show_flats=True)
        for name in "CDEFGAB":
            self.assertEqual(display_name(name, mode), name)

    def test_octave_setting_does_not_affect_name(self):
        self.assertEqual(display_name("A#", DisplayMode(show_octave_numbers=True)), "A#")


class TestNoteLabel(unittest.TestCase):
    def test_label_variants(self):
        self.assertEqual(note_label("C#", 4, DisplayMode()), "C#")
        self.assertEqual(note_label("C#", 4, DisplayMode(show_octave_numbers=True)), "C#4")
        self.assertEqual(note_label("C#", 4, DisplayMode(show_flats=True)), "Db")
        self.assertEqual(note_label("C#", 4, DisplayMode(True, True)), "Db4")


class TestDescriptions(unittest.TestCase):
    def test_selection_title(self):
        # Titles always use the canonical sharp spelling
        self.assertEqual(selection_title(Pitch("E", 4)), "Selected Note: E4")
        self.assertEqual(selection_title(Pitch("A#", 3)), "Selected Note: A#3")

    def test_describe_positions(self):
        text = describe_positions([FretPosition("e", 0), FretPosition("B", 5)])
        self.assertEqual(text, "Found on guitar: e string, fret 0 • B string, fret 5")

    def test_describe_no_positions(self):
        self.assertEqual(describe_positions([]), NOT_ON_GUITAR)
        self.assertEqual(NOT_ON_GUITAR, "Note is outside standard guitar range")


class TestParseNote(unittest.TestCase):
    def test_plain_notes(self):
        self.assertEqual(parse_note("A4"), Pitch("A", 4))
        self.assertEqual(parse_note("c#3"), Pitch("C#", 3))
        self.assertEqual(parse_note(" E2 "), Pitch("E", 2))

    def test_flats_become_sharps(self):
        self.assertEqual(parse_note("Db5"), Pitch("C#", 5))
        self.assertEqual(parse_note("Bb2"), Pitch("A#", 2))
        self.assertEqual(parse_note("Fb4"), Pitch("E", 4))

    def test_accidentals_across_octave_boundary(self):
        self.assertEqual(parse_note("Cb4"), Pitch("B", 3))
        self.assertEqual(parse_note("B#3"), Pitch("C", 4))

    def test_invalid(self):
        for text in ("", "H4", "A", "4A", "A##4", "Ab", "A4.5"):
            with self.assertRaises(ValueError, msg=text):
                parse_note(text)


if __name__ == "__main__":
    unittest.main()
