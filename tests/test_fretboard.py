import unittest

import numpy as np

from fret_atlas.errors import InvalidFret
from fret_atlas.fretboard import (
    NUM_FRETS,
    STANDARD_TUNING,
    PositionMapper,
    fretboard_grid,
    keyboard_notes,
    note_at_fret,
    positions_of,
)
from fret_atlas.note_types import FretPosition, Pitch, StringTuning
from fret_atlas.pitch_table import PitchTable


class TestNoteAtFret(unittest.TestCase):
    def test_open_strings(self):
        expected = ["E4", "B3", "G3", "D3", "A2", "E2"]
        self.assertEqual([str(note_at_fret(s, 0)) for s in STANDARD_TUNING], expected)

    def test_twelfth_fret_is_an_octave_up(self):
        for string in STANDARD_TUNING:
            open_note = note_at_fret(string, 0)
            octave_up = note_at_fret(string, 12)
            self.assertEqual(octave_up.pitch_class, open_note.pitch_class)
            self.assertEqual(octave_up.octave, open_note.octave + 1)

    def test_octave_rolls_over_at_c(self):
        b_string = STANDARD_TUNING[1]
        self.assertEqual(note_at_fret(b_string, 0), Pitch("B", 3))
        self.assertEqual(note_at_fret(b_string, 1), Pitch("C", 4))

    def test_each_fret_is_a_semitone(self):
        for string in STANDARD_TUNING:
            semitones = [note_at_fret(string, f).semitone for f in range(NUM_FRETS + 1)]
            self.assertEqual(semitones, list(range(semitones[0], semitones[0] + NUM_FRETS + 1)))

    def test_highest_fret(self):
        self.assertEqual(note_at_fret(STANDARD_TUNING[0], 24), Pitch("E", 6))

    def test_invalid_fret(self):
        string = STANDARD_TUNING[0]
        for fret in (-1, 25, 100):
            with self.assertRaises(InvalidFret) as ctx:
                note_at_fret(string, fret)
            self.assertEqual(ctx.exception.fret, fret)
            self.assertEqual(ctx.exception.max_fret, 24)

    def test_non_integer_fret(self):
        for fret in (1.5, "3", True):
            with self.assertRaises(InvalidFret):
                note_at_fret(STANDARD_TUNING[0], fret)

    def test_numpy_integer_fret(self):
        e_string = STANDARD_TUNING[0]
        note = note_at_fret(e_string, np.int64(5))
        self.assertEqual(note, Pitch("A", 4))
        self.assertIs(type(note.octave), int)
        with self.assertRaises(InvalidFret):
            note_at_fret(e_string, np.int64(25))

    def test_custom_max_fret(self):
        with self.assertRaises(InvalidFret):
            note_at_fret(STANDARD_TUNING[0], 20, max_fret=19)


class TestPositionsOf(unittest.TestCase):
    def test_e4_positions(self):
        positions = positions_of("E", 4)
        self.assertEqual(
            positions,
            [
                FretPosition("e", 0),
                FretPosition("B", 5),
                FretPosition("G", 9),
                FretPosition("D", 14),
                FretPosition("A", 19),
                FretPosition("E", 24),
            ],
        )

    def test_positions_round_trip(self):
        strings = {s.label: s for s in STANDARD_TUNING}
        for octave in range(2, 7):
            for position in positions_of("G#", octave):
                note = note_at_fret(strings[position.string_label], position.fret)
                self.assertEqual(note, Pitch("G#", octave))

    def test_every_fretted_note_is_found(self):
        for string in STANDARD_TUNING:
            for fret in range(NUM_FRETS + 1):
                note = note_at_fret(string, fret)
                self.assertIn(
                    FretPosition(string.label, fret),
                    positions_of(note.pitch_class, note.octave),
                )

    def test_order_follows_strings_high_to_low(self):
        labels = [p.string_label for p in positions_of("A", 3)]
        order = [s.label for s in STANDARD_TUNING]
        self.assertEqual(labels, sorted(labels, key=order.index))

    def test_outside_guitar_range(self):
        self.assertEqual(positions_of("C", 2), [])
        self.assertEqual(positions_of("D#", 2), [])
        self.assertEqual(positions_of("F", 6), [])
        self.assertEqual(positions_of("A", 8), [])

    def test_lowest_note(self):
        self.assertEqual(positions_of("E", 2), [FretPosition("E", 0)])

    def test_unknown_pitch_class_has_no_positions(self):
        self.assertEqual(positions_of("Db", 4), [])


class TestKeyboardAndGrid(unittest.TestCase):
    def test_keyboard_range(self):
        keys = keyboard_notes()
        self.assertEqual(len(keys), 60)
        self.assertEqual(keys[0], Pitch("C", 2))
        self.assertEqual(keys[-1], Pitch("B", 6))
        self.assertEqual(keys, sorted(keys))

    def test_keyboard_is_inside_pitch_table(self):
        table = PitchTable()
        for key in keyboard_notes():
            self.assertGreater(table.frequency_of(key.pitch_class, key.octave), 0)

    def test_grid_shape(self):
        grid = fretboard_grid()
        self.assertEqual(len(grid), 6)
        self.assertTrue(all(len(row) == NUM_FRETS + 1 for row in grid))
        self.assertEqual(grid[5][5], Pitch("A", 2))


class TestPositionMapper(unittest.TestCase):
    def test_defaults(self):
        mapper = PositionMapper()
        self.assertEqual(mapper.num_frets, 24)
        self.assertEqual([s.label for s in mapper.strings], ["e", "B", "G", "D", "A", "E"])

    def test_lowest_and_highest(self):
        mapper = PositionMapper()
        self.assertEqual(mapper.lowest(), Pitch("E", 2))
        self.assertEqual(mapper.highest(), Pitch("E", 6))

    def test_fewer_frets(self):
        mapper = PositionMapper(num_frets=12)
        self.assertEqual(
            mapper.positions_of("E", 4),
            [FretPosition("e", 0), FretPosition("B", 5), FretPosition("G", 9)],
        )
        with self.assertRaises(InvalidFret):
            mapper.note_at_fret(mapper.string("e"), 13)

    def test_custom_tuning(self):
        drop_d = list(STANDARD_TUNING[:5]) + [StringTuning("D", "D", 2)]
        mapper = PositionMapper(strings=drop_d)
        self.assertEqual(mapper.lowest(), Pitch("D", 2))

    def test_unknown_string(self):
        with self.assertRaises(KeyError):
            PositionMapper().string("X")

    def test_negative_fret_count(self):
        with self.assertRaises(ValueError):
            PositionMapper(num_frets=-1)


if __name__ == "__main__":
    unittest.main()
