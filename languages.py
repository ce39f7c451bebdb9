"""
Language table lookups.

The game identifies languages by a numeric code. The mapping from display name
to code is kept in a versioned JSON file rather than in code so that it can be
updated when the game changes its numbering::

    {"version": 1, "languages": {"English": 0, "German": 1, ...}}
"""

import json
import logging
from pathlib import Path
from typing import Dict

from errors import UnknownLanguage

logger = logging.getLogger(__name__)


class LanguageTable:
    def __init__(self, codes: Dict[str, int], version: int = 1):
        self.version = version
        self._codes = {name.strip().lower(): int(code) for name, code in codes.items()}

    @classmethod
    def from_file(cls, path) -> "LanguageTable":
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise UnknownLanguage(f"language table not found: {path}")

        if "languages" not in data or "version" not in data:
            raise ValueError(f"{path} must contain 'version' and 'languages'")
        table = cls(data["languages"], version=int(data["version"]))
        logger.debug("Loaded language table v%d with %d entries", table.version, len(table))
        return table

    def code_for(self, name: str) -> int:
        """Numeric code for a display name, case-insensitive. Unknown names raise."""
        try:
            return self._codes[name.strip().lower()]
        except KeyError:
            raise UnknownLanguage(
                f"unknown language {name!r} (language table v{self.version})"
            ) from None

    def __contains__(self, name: str) -> bool:
        return name.strip().lower() in self._codes

    def __len__(self):
        return len(self._codes)
