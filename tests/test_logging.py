import logging
import unittest

from fret_atlas.logger import PACKAGE, get_logger, logger_name
from fret_atlas.logging_config import setup_logging


class TestLoggerName(unittest.TestCase):
    def test_package_modules_keep_their_name(self):
        self.assertEqual(logger_name("fret_atlas"), "fret_atlas")
        self.assertEqual(logger_name("fret_atlas.fretboard"), "fret_atlas.fretboard")
        self.assertEqual(logger_name("fret_atlas.audio.voice"), "fret_atlas.audio.voice")

    def test_main_module_maps_to_package(self):
        self.assertEqual(logger_name("__main__"), PACKAGE)
        self.assertEqual(logger_name(""), PACKAGE)

    def test_outside_names_are_nested(self):
        self.assertEqual(logger_name("tools.dump_grid"), "fret_atlas.tools.dump_grid")
        # Only a real package prefix counts
        self.assertEqual(logger_name("fret_atlas_extra"), "fret_atlas.fret_atlas_extra")


class TestGetLogger(unittest.TestCase):
    def test_cached(self):
        self.assertIs(get_logger("fret_atlas.reference"), get_logger("fret_atlas.reference"))

    def test_outside_logger_reaches_package(self):
        log = get_logger("tools.dump_grid")
        self.assertEqual(log.name, "fret_atlas.tools.dump_grid")
        with self.assertLogs(PACKAGE, level="INFO") as captured:
            log.info("grid dumped")
        self.assertEqual(captured.records[0].name, "fret_atlas.tools.dump_grid")


class TestSetupLogging(unittest.TestCase):
    def tearDown(self):
        setup_logging("WARNING")

    def test_level_override_applies_to_package_only(self):
        setup_logging("DEBUG")
        self.assertEqual(logging.getLogger("fret_atlas").level, logging.DEBUG)
        self.assertEqual(logging.getLogger("fret_atlas.audio").level, logging.DEBUG)
        self.assertEqual(logging.getLogger("sounddevice").level, logging.ERROR)

    def test_module_logger_follows_package_level(self):
        setup_logging("WARNING")
        log = get_logger("__main__")
        self.assertFalse(log.isEnabledFor(logging.INFO))
        self.assertTrue(log.isEnabledFor(logging.WARNING))


if __name__ == "__main__":
    unittest.main()
