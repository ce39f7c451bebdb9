"""
Dictionary index used by the clue solver.

Words are partitioned by how many sub-words they contain and by their total
letter count, so a clue only ever has to be compared against words of the same
shape. The serialized form (``words.json``) is a nested mapping::

    {"<word count>": {"<letter count>": [{"word": ..., "lens": [...], "letters": ...}]}}
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

SEPARATORS = re.compile(r"[ \-]")


@dataclass(frozen=True)
class WordEntry:
    """A single indexed word."""
    word: str
    lens: Tuple[int, ...]
    letters: str

    @classmethod
    def from_word(cls, word: str) -> "WordEntry":
        parts = SEPARATORS.split(word.strip())
        return cls(
            word=word.strip(),
            lens=tuple(len(part) for part in parts),
            letters="".join(parts).lower(),
        )

    @classmethod
    def from_record(cls, record: dict) -> "WordEntry":
        return cls(
            word=record["word"],
            lens=tuple(int(n) for n in record["lens"]),
            letters=record["letters"].lower(),
        )

    @property
    def shape(self) -> Tuple[int, int]:
        """The ``(word count, letter count)`` bucket key of this entry."""
        return len(self.lens), len(self.letters)

    def to_record(self) -> dict:
        return {"word": self.word, "lens": list(self.lens), "letters": self.letters}


class DictionaryIndex:
    """
    Read-only index of known words keyed by ``(word count, letter count)``.

    Build it once at startup and share the same instance between every player.
    """

    def __init__(self, buckets: Dict[int, Dict[int, List[WordEntry]]]):
        self._buckets = {
            word_count: {letter_count: tuple(entries) for letter_count, entries in by_length.items()}
            for word_count, by_length in buckets.items()
        }

    @classmethod
    def build(cls, corpus: Iterable[str]) -> "DictionaryIndex":
        """Index a sequence of raw words. Blank and duplicate words are skipped."""
        buckets: Dict[int, Dict[int, List[WordEntry]]] = {}
        seen = set()
        for raw in corpus:
            if not raw or not raw.strip() or raw.strip() in seen:
                continue
            seen.add(raw.strip())
            entry = WordEntry.from_word(raw)
            word_count, letter_count = entry.shape
            buckets.setdefault(word_count, {}).setdefault(letter_count, []).append(entry)
        return cls(buckets)

    @classmethod
    def from_file(cls, path) -> "DictionaryIndex":
        """Load the precomputed index written by ``to_file`` / ``precompute.py``."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        buckets: Dict[int, Dict[int, List[WordEntry]]] = {}
        for word_count, by_length in data.items():
            for letter_count, records in by_length.items():
                buckets.setdefault(int(word_count), {})[int(letter_count)] = [
                    WordEntry.from_record(record) for record in records
                ]
        index = cls(buckets)
        logger.info("Loaded %d words from %s", len(index), path)
        return index

    def to_file(self, path):
        data = {
            str(word_count): {
                str(letter_count): [entry.to_record() for entry in entries]
                for letter_count, entries in sorted(by_length.items())
            }
            for word_count, by_length in sorted(self._buckets.items())
        }
        with Path(path).open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)

    def bucket(self, word_count: int, letter_count: int) -> Tuple[WordEntry, ...]:
        """Entries with the given shape. Empty when no such bucket exists."""
        return self._buckets.get(word_count, {}).get(letter_count, ())

    def shapes(self) -> List[Tuple[int, int]]:
        return [
            (word_count, letter_count)
            for word_count, by_length in sorted(self._buckets.items())
            for letter_count in sorted(by_length)
        ]

    def __len__(self):
        return sum(len(entries) for by_length in self._buckets.values() for entries in by_length.values())

    def __iter__(self):
        for word_count, letter_count in self.shapes():
            yield from self._buckets[word_count][letter_count]
