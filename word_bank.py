"""
Word bank: every word the bots have seen, with how often it came up.

Two record shapes are supported. In ``simple`` mode each word maps to an
occurrence count. In ``scored`` mode each word maps to a record of how many
rounds it was played in, how many players were in those rounds and how many of
them guessed it, which gives a rough difficulty estimate.
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from errors import PersistenceFailure

logger = logging.getLogger(__name__)

SIMPLE = "simple"
SCORED = "scored"
MODES = (SIMPLE, SCORED)

# Older snapshots were written with these misspelled keys.
LEGACY_KEYS = {"playersEncounterd": "playersEncountered", "correctGusses": "correctGuesses"}


@dataclass
class WordStats:
    appearance: int = 0
    players_encountered: int = 0
    correct_guesses: int = 0

    @classmethod
    def from_record(cls, record: Union[dict, int]) -> "WordStats":
        if isinstance(record, int):
            return cls(appearance=record)
        record = {LEGACY_KEYS.get(key, key): value for key, value in record.items()}
        return cls(
            appearance=int(record.get("appearance", 0)),
            players_encountered=int(record.get("playersEncountered", 0)),
            correct_guesses=int(record.get("correctGuesses", 0)),
        )

    def to_record(self) -> dict:
        return {
            "appearance": self.appearance,
            "playersEncountered": self.players_encountered,
            "correctGuesses": self.correct_guesses,
        }


class WordBank:
    """
    Shared sink for discovered words.

    All mutation happens in plain synchronous methods, so concurrent games on
    the same event loop can never interleave inside an update.
    """

    def __init__(self, path=None, mode: str = SCORED):
        if mode not in MODES:
            raise ValueError(f"word bank mode must be one of {MODES}, got {mode!r}")
        self.path = Path(path) if path else None
        self.mode = mode
        self._words: Dict[str, Union[int, WordStats]] = {}
        self._write_lock = threading.Lock()
        self._generation = 0
        self._saved_generation = 0
        if self.path:
            self.load_state()

    def load_state(self):
        """Load the last snapshot. A missing or empty file means an empty bank."""
        try:
            with self.path.open("r", encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            logger.info("No word bank at %s, starting empty", self.path)
            return

        data = json.loads(content) if content.strip() else {}
        # An empty JSON array was used as the initial "no words" file.
        if not data:
            data = {}
        for word, record in data.items():
            if self.mode == SCORED:
                self._words[word] = WordStats.from_record(record)
            else:
                self._words[word] = record if isinstance(record, int) else WordStats.from_record(record).appearance
        logger.info("Loaded %d words from %s", len(self._words), self.path)

    def add_word(self, word: str, num_players: Optional[int] = None, correct_guesses: Optional[int] = None):
        """
        Record one appearance of ``word``.

        In scored mode ``num_players`` and ``correct_guesses`` describe the round
        the word was played in; they are required and validated before anything
        is changed. Words that were only offered as a choice are recorded with
        :meth:`add_choice`.
        """
        word = word.strip()
        if not word:
            raise ValueError("cannot record an empty word")

        if self.mode == SIMPLE:
            self._words[word] = self._words.get(word, 0) + 1
            return

        if num_players is None or correct_guesses is None:
            raise ValueError("scored word bank needs num_players and correct_guesses")
        if num_players <= 0:
            raise ValueError(f"num_players must be positive, got {num_players}")
        if correct_guesses < 0:
            raise ValueError(f"correct_guesses cannot be negative, got {correct_guesses}")
        if correct_guesses > num_players:
            raise ValueError(f"correct_guesses ({correct_guesses}) exceeds num_players ({num_players})")

        stats = self._words.setdefault(word, WordStats())
        stats.appearance += 1
        stats.players_encountered += num_players
        stats.correct_guesses += correct_guesses

    def add_choice(self, word: str):
        """
        Record a word that was offered as a choice but not necessarily played.

        Scored records only count rounds a word was actually played in, so in
        scored mode this just makes sure the word is known.
        """
        word = word.strip()
        if not word:
            return
        if self.mode == SIMPLE:
            self._words[word] = self._words.get(word, 0) + 1
        else:
            self._words.setdefault(word, WordStats())

    def get(self, word: str):
        return self._words.get(word)

    def snapshot(self) -> dict:
        """A JSON-ready copy of the whole bank."""
        if self.mode == SIMPLE:
            return dict(self._words)
        return {word: stats.to_record() for word, stats in self._words.items()}

    def save_state(self, path=None):
        """Write a full snapshot, replacing the previous file atomically."""
        self._write(*self._stamped_snapshot(), path)

    def _stamped_snapshot(self):
        self._generation += 1
        return self._generation, self.snapshot()

    def _write(self, generation: int, data: dict, path=None):
        target = Path(path) if path else self.path
        if target is None:
            raise PersistenceFailure("word bank has no file to save to")

        with self._write_lock:
            # An autosave thread can finish after a newer snapshot was saved.
            if target == self.path and generation < self._saved_generation:
                logger.debug("Dropping stale snapshot %d of %s", generation, target)
                return

            tmp_name = None
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=target.name, suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, target)
            except OSError as e:
                if tmp_name and os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise PersistenceFailure(f"could not save word bank to {target}: {e}") from e
            if target == self.path:
                self._saved_generation = generation
        logger.debug("Saved %d words to %s", len(data), target)

    async def autosave(self, interval: float):
        """Save every ``interval`` seconds until cancelled. Failed writes are logged and retried next time."""
        while True:
            await asyncio.sleep(interval)
            try:
                # Snapshot on the loop, write off it.
                await asyncio.to_thread(self._write, *self._stamped_snapshot())
            except PersistenceFailure as e:
                logger.error("Word bank save failed: %s", e)

    def format(self) -> str:
        """
        The bank as a comma-separated custom word list, most frequent first,
        ready to paste into a private room's custom words box.
        """
        def count(word):
            value = self._words[word]
            return value if isinstance(value, int) else value.appearance

        return ",".join(sorted(self._words, key=lambda word: (-count(word), word)))

    @property
    def words(self) -> dict:
        return self.snapshot()

    def __contains__(self, word: str) -> bool:
        return word in self._words

    def __len__(self):
        return len(self._words)

    def __str__(self):
        return json.dumps(self.snapshot())
