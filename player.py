"""
A single bot participant controlling one browser page.
"""

import asyncio
import logging
import random
from collections import deque
from typing import Awaitable, Callable, List, Optional, Tuple

from clue_solver import PLACEHOLDER
from errors import DriverFailure, RoundTimeout
from page_driver import PageDriver

logger = logging.getLogger(__name__)

GAME_URL = "https://skribbl.io"
DEFAULT_ROUNDS = 10
CHOICE_TIMEOUT = 30.0
ROUND_TIMEOUT = 85.0
CHOICE_HISTORY = 3


class Player:
    def __init__(
        self,
        name: str,
        driver: PageDriver,
        language_code: int = 0,
        url: str = GAME_URL,
        tick: float = 0.5,
        clue_interval: float = 2.0,
        settle_delay: float = 2.0,
    ):
        self.name = name
        self.driver = driver
        self.language_code = language_code
        self.url = url
        self.tick = tick
        self.clue_interval = clue_interval
        self.settle_delay = settle_delay

        self.is_leader = False
        self.last_word = ""
        self.choice_history = deque(maxlen=CHOICE_HISTORY)
        self.player_count = 0
        self.correct_guesses = 0

    async def create_room(self, rounds: int = DEFAULT_ROUNDS) -> str:
        """Opens a private room, configures it and returns its invite link."""
        await self.driver.goto(self.url)
        await self.driver.set_name(self.name)
        await self.driver.create_private_room()
        await self.driver.configure_room(rounds, self.language_code)
        self.is_leader = True
        invite = await self.driver.invite_link()
        logger.debug("%s created room %s", self.name, invite)
        return invite

    async def join_room(self, invite: str):
        """Joins an existing private room."""
        await self.driver.goto(invite)
        await self.driver.set_name(self.name)
        await self.driver.click_play()
        self.is_leader = False
        await asyncio.sleep(self.settle_delay)

    async def join_game(self):
        """Joins a public game through matchmaking."""
        await self.driver.goto(self.url)
        await self.driver.set_name(self.name)
        await self.driver.click_play()
        self.is_leader = False
        await asyncio.sleep(self.settle_delay)

    async def start_round(self):
        """Starts the game. Only the room leader can; anyone else is ignored."""
        if not self.is_leader:
            logger.debug("%s is not the leader, not starting", self.name)
            return
        await self.driver.start_game()

    async def await_choice_presentation(self, timeout: float = CHOICE_TIMEOUT) -> List[str]:
        """Waits for a set of words to choose from that has not been seen recently."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            choices = await self.driver.choice_words()
            if choices and choices not in self.choice_history:
                return choices
            if loop.time() >= deadline:
                raise RoundTimeout("word choices", timeout)
            await asyncio.sleep(self.tick)

    async def pick_word(self) -> Tuple[str, List[str]]:
        """
        Picks one of the offered words at random.

        Returns the picked word and every word that was offered, since all of
        them are real words worth keeping.
        """
        choices = await self.driver.choice_words()
        if not choices:
            raise DriverFailure(f"{self.name} has no words to choose from")
        index = random.randrange(len(choices))
        await self.driver.pick_choice(index)
        self.choice_history.append(choices)
        return choices[index], choices

    async def await_word_committed(self, timeout: float = CHOICE_TIMEOUT) -> str:
        """Waits until the other player's word is in play, returning its clue."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            clue = await self.driver.clue()
            if PLACEHOLDER in clue:
                return clue
            if loop.time() >= deadline:
                raise RoundTimeout("word to be chosen", timeout)
            await asyncio.sleep(self.tick)

    async def submit_guess(self, text: str):
        await self.driver.send_chat(text)

    async def await_round_resolution(
        self,
        timeout: float = ROUND_TIMEOUT,
        on_clue: Optional[Callable[[str], Awaitable[None]]] = None,
    ) -> str:
        """
        Idles until the round is over and its answer is shown.

        While waiting, the clue is checked every ``clue_interval`` seconds and
        ``on_clue`` is called whenever it changed. The answer counts as shown
        once the reveal text is non-empty and differs from the last answer.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        next_clue_check = loop.time() + self.clue_interval
        last_clue = ""
        self.correct_guesses = 0

        while True:
            word = await self.driver.reveal_text()
            if word and word != self.last_word:
                break
            # Guessed markers are cleared once the answer is shown, so keep the last value seen.
            self.correct_guesses = await self.driver.guessed_count()

            now = loop.time()
            if now >= deadline:
                raise RoundTimeout("round to finish", timeout)
            if on_clue is not None and now >= next_clue_check:
                next_clue_check = now + self.clue_interval
                clue = await self.driver.clue()
                if clue != last_clue:
                    last_clue = clue
                    await on_clue(clue)
            await asyncio.sleep(self.tick)

        self.player_count = await self.driver.player_count()
        self.last_word = word
        return word

    def mark_resolved(self, word: str):
        """Records an answer this player saw revealed without waiting for it."""
        self.last_word = word

    async def print_page(self, path: str = "page.pdf"):
        """Saves the page as a pdf. For debugging only."""
        await self.driver.print_page(path)

    async def close(self):
        await self.driver.close()

    def __repr__(self):
        return f"Player({self.name!r}, leader={self.is_leader})"
