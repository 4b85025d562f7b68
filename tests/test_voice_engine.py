import random
import unittest

import numpy as np

from fret_atlas.audio.context import AudioContext, OfflineOutput
from fret_atlas.audio.voice import SynthSettings
from fret_atlas.audio.voice_engine import Idle, Ready, Sounding, VoiceEngine
from fret_atlas.errors import UnsupportedPitch
from fret_atlas.note_types import Timbre

SAMPLE_RATE = 8000


class VoiceEngineTestCase(unittest.TestCase):
    def setUp(self):
        self.output = OfflineOutput(sample_rate=SAMPLE_RATE, blocksize=64)
        self.contexts_created = 0
        self.engine = VoiceEngine(self._context_factory, rng=random.Random(7))
        self.settings = self.engine.settings

    def _context_factory(self):
        self.contexts_created += 1
        return AudioContext(self.output)

    def tearDown(self):
        self.engine.close()


class TestLifecycle(VoiceEngineTestCase):
    def test_starts_idle_without_a_context(self):
        self.assertIsInstance(self.engine.state, Idle)
        self.assertIsNone(self.engine.context)
        self.assertEqual(self.contexts_created, 0)

    def test_init_is_idempotent(self):
        context = self.engine.init()
        self.assertIs(self.engine.init(), context)
        self.assertEqual(self.contexts_created, 1)
        self.assertIsInstance(self.engine.state, Ready)

    def test_play_opens_context(self):
        self.assertIsNone(self.engine.play("A", 4))
        self.assertEqual(self.contexts_created, 1)
        self.assertIsInstance(self.engine.state, Sounding)
        self.assertAlmostEqual(self.engine.current_voice.frequency, 440.0)

    def test_close_and_reopen(self):
        self.engine.play("A", 4)
        self.engine.close()
        self.assertIsInstance(self.engine.state, Idle)
        self.assertIsNone(self.engine.context)

        self.assertIsNone(self.engine.play("C", 4))
        self.assertEqual(self.contexts_created, 2)
        self.assertIsInstance(self.engine.state, Sounding)

    def test_invalid_timbre(self):
        with self.assertRaises(ValueError):
            self.engine.play("A", 4, "harpsichord")


class TestUnsupportedPitch(VoiceEngineTestCase):
    def test_out_of_range_octave_is_returned(self):
        result = self.engine.play("A", 8)
        self.assertIsInstance(result, UnsupportedPitch)
        self.assertEqual((result.pitch_class, result.octave), ("A", 8))

    def test_unsupported_pitch_leaves_idle_engine_alone(self):
        self.engine.play("C", 1)
        self.assertIsInstance(self.engine.state, Idle)
        self.assertEqual(self.contexts_created, 0)

    def test_unknown_pitch_class(self):
        self.assertIsInstance(self.engine.play("H", 4), UnsupportedPitch)

    def test_current_voice_keeps_sounding(self):
        self.engine.play("A", 4)
        voice = self.engine.current_voice
        self.assertIsInstance(self.engine.play("A", 9), UnsupportedPitch)
        self.assertIs(self.engine.current_voice, voice)
        self.assertFalse(voice.is_fading)


class TestMonophony(VoiceEngineTestCase):
    def test_second_play_replaces_first(self):
        self.engine.play("A", 4)
        first = self.engine.current_voice
        self.output.advance(0.1)
        self.engine.play("C", 4, Timbre.SECONDARY)
        second = self.engine.current_voice

        self.assertIsNot(first, second)
        self.assertGreater(second.generation, first.generation)
        self.assertTrue(first.is_fading)
        self.assertFalse(second.is_fading)
        self.assertIs(second.timbre, Timbre.SECONDARY)

    def test_replaced_voice_fades_monotonically(self):
        self.engine.play("A", 4)
        first = self.engine.current_voice
        self.output.advance(0.1)
        now = self.engine.context.current_time
        held = first.gain_at(now)

        self.engine.play("E", 4)
        self.assertAlmostEqual(first.gain_at(now), held)
        gains = first.envelope.values(np.linspace(now, now + 0.2, 800))
        self.assertTrue(np.all(np.diff(gains) <= 0))
        self.assertLessEqual(first.gain_at(now + self.settings.stop_fade_time), self.settings.fade_floor)
        self.assertAlmostEqual(first.end_time, now + self.settings.stop_fade_time)

    def test_replaced_voice_is_torn_down(self):
        self.engine.play("A", 4)
        first = self.engine.current_voice
        self.output.advance(0.1)
        self.engine.play("E", 4)
        second = self.engine.current_voice

        self.output.advance(self.settings.stop_fade_time + self.settings.cleanup_delay + 0.02)
        self.assertFalse(first.is_connected)
        self.assertTrue(second.is_connected)
        self.assertIs(self.engine.current_voice, second)

    def test_at_most_one_voice_audible(self):
        for name in ("C", "D", "E", "F"):
            self.engine.play(name, 4)
            self.output.advance(0.05)
        self.output.advance(0.2)
        connected = self.engine.context.destination.inputs
        self.assertEqual(len(connected), 1)
        self.assertIs(connected[0], self.engine.current_voice.panner)

    def test_stale_cleanup_does_not_end_new_voice(self):
        self.engine.play("A", 4)
        self.output.advance(0.5)
        self.engine.play("C", 4)
        second = self.engine.current_voice

        # Past the first voice's natural cleanup time, inside the second's
        self.output.advance(0.6)
        self.assertIsInstance(self.engine.state, Sounding)
        self.assertIs(self.engine.current_voice, second)
        self.assertTrue(second.is_connected)


class TestStopping(VoiceEngineTestCase):
    def test_stop_when_idle(self):
        self.engine.stop_current()
        self.assertIsInstance(self.engine.state, Idle)
        self.assertEqual(self.contexts_created, 0)

    def test_stop_when_ready(self):
        self.engine.init()
        self.engine.stop_current()
        self.assertIsInstance(self.engine.state, Ready)

    def test_stop_fades_and_silences(self):
        self.engine.play("A", 4)
        voice = self.engine.current_voice
        self.output.advance(0.3)
        self.engine.stop_current()

        self.assertIsInstance(self.engine.state, Ready)
        self.assertIsNone(self.engine.current_voice)
        self.assertTrue(voice.is_fading)

        audio = self.output.advance(0.3)
        tail = audio[int(0.05 * SAMPLE_RATE) :]
        self.assertLess(np.abs(tail).max(), 1e-3)
        self.assertFalse(voice.is_connected)

    def test_stop_twice(self):
        self.engine.play("A", 4)
        self.engine.stop_current()
        self.engine.stop_current()
        self.assertIsInstance(self.engine.state, Ready)


class TestNaturalRelease(VoiceEngineTestCase):
    def test_voice_finishes_on_its_own(self):
        self.engine.play("G", 3)
        voice = self.engine.current_voice
        self.output.advance(self.settings.duration + self.settings.cleanup_delay + 0.05)

        self.assertIsInstance(self.engine.state, Ready)
        self.assertFalse(voice.is_connected)
        self.assertEqual(self.engine.context.pending_timers, 0)

    def test_still_sounding_before_cleanup(self):
        self.engine.play("G", 3)
        self.output.advance(self.settings.duration - 0.1)
        self.assertIsInstance(self.engine.state, Sounding)

    def test_audio_is_bounded(self):
        self.engine.play("E", 2)
        audio = self.output.advance(1.0)
        self.assertEqual(audio.shape, (SAMPLE_RATE, 2))
        self.assertLessEqual(np.abs(audio).max(), 1.0)
        self.assertGreater(np.abs(audio).max(), 0.05)


class TestPanning(unittest.TestCase):
    def render(self, timbre):
        output = OfflineOutput(sample_rate=SAMPLE_RATE)
        engine = VoiceEngine(lambda: AudioContext(output), rng=random.Random(0))
        engine.play("A", 3, timbre)
        audio = output.advance(0.5)
        engine.close()
        return np.sqrt(np.mean(audio ** 2, axis=0))

    def test_primary_leans_left(self):
        left, right = self.render(Timbre.PRIMARY)
        self.assertGreater(left, right)

    def test_secondary_leans_right(self):
        left, right = self.render(Timbre.SECONDARY)
        self.assertLess(left, right)


class TestCustomSettings(unittest.TestCase):
    def test_shorter_duration(self):
        settings = SynthSettings(duration=0.3, cleanup_delay=0.05)
        output = OfflineOutput(sample_rate=SAMPLE_RATE)
        engine = VoiceEngine(lambda: AudioContext(output), settings=settings)
        engine.play("A", 4)
        self.assertAlmostEqual(engine.current_voice.end_time, 0.3)
        output.advance(0.4)
        self.assertIsInstance(engine.state, Ready)
        engine.close()


if __name__ == "__main__":
    unittest.main()
