"""
Lifecycle of a single round.

A round moves through ``AWAITING_CHOICES -> WORD_CHOSEN -> GUESSING ->
RESOLVED``. In self-play the drawing player picks a word and the guessing
player answers it; when only watching a public room the round starts in
``GUESSING`` and the clue solver tries to answer it.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from clue_solver import ClueSolver, should_submit
from player import CHOICE_TIMEOUT, ROUND_TIMEOUT, Player
from word_bank import WordBank

logger = logging.getLogger(__name__)

SUBMIT_PACING = 1.0


class RoundState(Enum):
    awaiting_choices = "awaiting_choices"
    word_chosen = "word_chosen"
    guessing = "guessing"
    resolved = "resolved"


class InvalidTransition(RuntimeError):
    pass


@dataclass
class RoundRecord:
    index: int
    turn_holder: str = ""
    chosen_word: Optional[str] = None
    choices: List[str] = field(default_factory=list)
    revealed_word: Optional[str] = None
    players: int = 0
    correct_guesses: int = 0
    submitted: bool = False


class Round:
    def __init__(
        self,
        index: int,
        solver: ClueSolver,
        word_bank: WordBank,
        turn_holder: str = "",
        pacing: float = SUBMIT_PACING,
        choice_timeout: float = CHOICE_TIMEOUT,
        resolution_timeout: float = ROUND_TIMEOUT,
    ):
        self.solver = solver
        self.word_bank = word_bank
        self.pacing = pacing
        self.choice_timeout = choice_timeout
        self.resolution_timeout = resolution_timeout

        self.state = RoundState.awaiting_choices
        self.record = RoundRecord(index=index, turn_holder=turn_holder)
        self.submission: Optional[asyncio.Task] = None

    @classmethod
    def observed(cls, index: int, solver: ClueSolver, word_bank: WordBank, **kwargs) -> "Round":
        """A round joined while already underway, where only guessing is left."""
        round_ = cls(index, solver, word_bank, **kwargs)
        round_.state = RoundState.guessing
        return round_

    def _expect(self, state: RoundState):
        if self.state != state:
            raise InvalidTransition(f"round {self.record.index} is {self.state.value}, expected {state.value}")

    async def choose(self, drawer: Player) -> str:
        """The drawer picks a word. Every offered word goes into the word bank."""
        self._expect(RoundState.awaiting_choices)
        await drawer.await_choice_presentation(self.choice_timeout)
        word, choices = await drawer.pick_word()
        for choice in choices:
            self.word_bank.add_choice(choice)

        self.record.chosen_word = word
        self.record.choices = list(choices)
        self.state = RoundState.word_chosen
        logger.debug("Round %d: %s picked %r from %s", self.record.index, drawer.name, word, choices)
        return word

    async def commit(self, guesser: Player):
        """Waits until the guesser can see the chosen word is in play."""
        self._expect(RoundState.word_chosen)
        await guesser.await_word_committed(self.choice_timeout)
        self.state = RoundState.guessing

    async def guess(self, guesser: Player, answer: Optional[str] = None) -> str:
        """
        Waits for the round to end and returns the revealed word.

        With a known ``answer`` it is sent straight away. Otherwise each new
        clue is run through the solver and, the first time the candidate list
        is small enough, every candidate is sent in the background.
        """
        self._expect(RoundState.guessing)
        if answer is not None:
            await guesser.submit_guess(answer)
            self.record.submitted = True
            on_clue = None
        else:
            on_clue = self._clue_handler(guesser)

        word = await guesser.await_round_resolution(self.resolution_timeout, on_clue=on_clue)

        correct = guesser.correct_guesses
        if self.record.submitted:
            # Assumes exactly one of our guesses was right.
            correct = max(correct - 1, 0)
        self.record.revealed_word = word
        self.record.players = guesser.player_count
        self.record.correct_guesses = correct
        self.state = RoundState.resolved
        return word

    def _clue_handler(self, guesser: Player):
        async def on_clue(clue: str):
            if self.record.submitted:
                return
            candidates = self.solver.solve(clue)
            logger.debug("Round %d: clue %r has %d candidates", self.record.index, clue, len(candidates))
            if not should_submit(candidates):
                return
            self.record.submitted = True
            words = [entry.word for entry in candidates]
            self.submission = asyncio.create_task(self._submit_all(guesser, words))
            self.submission.add_done_callback(self._submission_done)

        return on_clue

    async def _submit_all(self, guesser: Player, words: List[str]):
        for word in words:
            await guesser.submit_guess(word)
            await asyncio.sleep(self.pacing)

    def _submission_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.warning("Round %d: submitting guesses failed: %s", self.record.index, task.exception())

    async def settle(self):
        """Stops a guess batch that is still running once the round is over."""
        if self.submission is None or self.submission.done():
            return
        self.submission.cancel()
        # Unlike awaiting the task, wait() only raises if this caller is cancelled.
        await asyncio.wait([self.submission])
