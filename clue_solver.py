from typing import List, Tuple

from dictionary_index import SEPARATORS, DictionaryIndex, WordEntry

PLACEHOLDER = "_"

# Only auto-answer when the candidate list is this small.
MIN_CANDIDATES = 1
MAX_CANDIDATES = 7


def tokenize_clue(clue: str) -> Tuple[Tuple[int, ...], str]:
    """
    Splits a clue such as ``"a__ _e"`` into its sub-word lengths and the
    flattened, lowercase letter string: ``((3, 2), "a___e")``.
    """
    parts = SEPARATORS.split(clue.strip())
    return tuple(len(part) for part in parts), "".join(parts).lower()


def should_submit(candidates) -> bool:
    """True when a candidate list is small enough to be worth guessing."""
    return MIN_CANDIDATES <= len(candidates) <= MAX_CANDIDATES


class ClueSolver:
    def __init__(self, index: DictionaryIndex):
        self.index = index

    def solve(self, clue: str) -> List[WordEntry]:
        """
        Returns the indexed words consistent with the given clue, in index order.
        An empty list means the clue does not narrow anything down (yet).
        """
        lens, letters = tokenize_clue(clue)
        if not letters:
            return []

        candidates = list(self.index.bucket(len(lens), len(letters)))
        if len(lens) > 1:
            candidates = [entry for entry in candidates if entry.lens == lens]

        for position, letter in enumerate(letters):
            if letter == PLACEHOLDER:
                continue
            candidates = [entry for entry in candidates if self._matches_letter(entry, position, letter)]

            # If no words remain, stop early
            if not candidates:
                break

        return candidates

    def _matches_letter(self, entry: WordEntry, position: int, letter: str) -> bool:
        return position < len(entry.letters) and entry.letters[position] == letter
