"""
Configuration settings for the word harvester.
Handles environment variables and file locations.
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()

GAME_MODES = ("spectator", "selfplay")
BANK_MODES = ("simple", "scored")
TRUE_VALUES = ("1", "true", "yes", "on")

BASE_DIR = Path(__file__).resolve().parent
# Where a regular install puts the bundled language table
SHARED_DIR = Path(sys.prefix) / "share" / "word-harvester"


def default_languages_path() -> str:
    """The bundled language table, found next to this module or in the install prefix."""
    for directory in (BASE_DIR, SHARED_DIR):
        candidate = directory / "languages.json"
        if candidate.exists():
            return str(candidate)
    return str(BASE_DIR / "languages.json")


class Config:
    """Configuration class for harvester settings."""

    def __init__(self, env=None):
        env = os.environ if env is None else env

        # How many games to run at once, all sharing one browser
        self.NUM_GAMES = int(env.get('NUM_GAMES', '1'))
        self.GAME_MODE = env.get('GAME_MODE', 'spectator').strip().lower()
        self.VERBOSE = env.get('VERBOSE', 'true').strip().lower() in TRUE_VALUES

        # Language display name, resolved through the language table
        self.LANGUAGE = env.get('LANGUAGE', 'English')
        self.LANGUAGES_PATH = env.get('LANGUAGES_PATH') or default_languages_path()

        # Precomputed dictionary index and the collected words
        self.WORDS_PATH = env.get('WORDS_PATH', 'words.json')
        self.BANK_PATH = env.get('BANK_PATH', 'words_picked.json')
        self.BANK_MODE = env.get('BANK_MODE', 'scored').strip().lower()
        self.SAVE_INTERVAL = float(env.get('SAVE_INTERVAL', '300'))

        self.HEADLESS = env.get('HEADLESS', 'false').strip().lower() in TRUE_VALUES
        self.GAME_URL = env.get('GAME_URL', 'https://skribbl.io')
        self.PORT = int(env.get('PORT', '5000'))

        # Validate settings
        self._validate_config()

    def _validate_config(self):
        """Validate that all settings are usable."""
        if self.NUM_GAMES < 1:
            raise ValueError("NUM_GAMES must be at least 1")
        if self.GAME_MODE not in GAME_MODES:
            raise ValueError(f"GAME_MODE must be one of {GAME_MODES}")
        if self.BANK_MODE not in BANK_MODES:
            raise ValueError(f"BANK_MODE must be one of {BANK_MODES}")
        if self.SAVE_INTERVAL <= 0:
            raise ValueError("SAVE_INTERVAL must be positive")

    @property
    def is_valid(self) -> bool:
        """Check if configuration is valid."""
        try:
            self._validate_config()
            return True
        except ValueError:
            return False
