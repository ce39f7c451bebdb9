import os
import tempfile
import unittest
from pathlib import Path

from config import Config
from languages import LanguageTable


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        config = Config(env={})
        self.assertEqual(config.NUM_GAMES, 1)
        self.assertEqual(config.GAME_MODE, "spectator")
        self.assertTrue(config.VERBOSE)
        self.assertEqual(config.LANGUAGE, "English")
        self.assertEqual(config.BANK_MODE, "scored")
        self.assertEqual(config.SAVE_INTERVAL, 300)
        self.assertFalse(config.HEADLESS)
        self.assertTrue(config.is_valid)

    def test_overrides(self):
        config = Config(env={
            "NUM_GAMES": "3",
            "GAME_MODE": "SelfPlay",
            "VERBOSE": "no",
            "BANK_MODE": "simple",
            "HEADLESS": "1",
            "SAVE_INTERVAL": "60",
        })
        self.assertEqual(config.NUM_GAMES, 3)
        self.assertEqual(config.GAME_MODE, "selfplay")
        self.assertFalse(config.VERBOSE)
        self.assertEqual(config.BANK_MODE, "simple")
        self.assertTrue(config.HEADLESS)
        self.assertEqual(config.SAVE_INTERVAL, 60)

    def test_language_table_found_from_any_directory(self):
        with tempfile.TemporaryDirectory() as elsewhere:
            previous = os.getcwd()
            os.chdir(elsewhere)
            try:
                config = Config(env={})
                table = LanguageTable.from_file(config.LANGUAGES_PATH)
            finally:
                os.chdir(previous)

            self.assertTrue(Path(config.LANGUAGES_PATH).is_absolute())
            self.assertEqual(table.code_for(config.LANGUAGE), 0)

    def test_language_table_override(self):
        config = Config(env={"LANGUAGES_PATH": "/srv/harvester/languages.json"})
        self.assertEqual(config.LANGUAGES_PATH, "/srv/harvester/languages.json")

    def test_invalid_values(self):
        for env in ({"NUM_GAMES": "0"}, {"GAME_MODE": "chaos"}, {"BANK_MODE": "fancy"}, {"SAVE_INTERVAL": "-1"}):
            with self.subTest(env=env):
                with self.assertRaises(ValueError):
                    Config(env=env)


if __name__ == "__main__":
    unittest.main()
