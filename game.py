"""
Game orchestrators.

``SpectatorGame`` keeps one player cycling through public games and records
each revealed word. ``SelfPlayGame`` pairs two players in a private room who
take turns drawing and guessing, which harvests the words offered to the
drawer. Both restart their players whenever a round fails.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from clue_solver import ClueSolver
from page_driver import PageDriver
from player import GAME_URL, Player
from round_machine import Round, RoundRecord
from word_bank import WordBank

logger = logging.getLogger(__name__)

DriverFactory = Callable[[], Awaitable[PageDriver]]

ROUNDS = 10
RESTART_TIMER = 15.0
RETRY_DELAY = 5.0


class GameLogger(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        return f"[{self.extra['game']}] {msg}", kwargs


class Game:
    mode = "base"

    def __init__(
        self,
        name: str,
        word_bank: WordBank,
        solver: ClueSolver,
        driver_factory: DriverFactory,
        language_code: int = 0,
        url: str = GAME_URL,
        retry_delay: float = RETRY_DELAY,
        player_options: Optional[dict] = None,
        round_options: Optional[dict] = None,
    ):
        self.name = name
        self.word_bank = word_bank
        self.solver = solver
        self.driver_factory = driver_factory
        self.language_code = language_code
        self.url = url
        self.retry_delay = retry_delay
        self.player_options = player_options or {}
        self.round_options = round_options or {}
        self.log = GameLogger(logger, {"game": name})

        self.players: List[Player] = []
        self.round = 1
        self.turn = 0
        self.rounds_played = 0
        self.restarts = 0
        self.last_word = ""
        self.current_round: Optional[Round] = None

    async def new_player(self, name: str) -> Player:
        driver = await self.driver_factory()
        return Player(name, driver, language_code=self.language_code, url=self.url, **self.player_options)

    def new_round(self, turn_holder: str = "") -> Round:
        return Round(self.round, self.solver, self.word_bank, turn_holder=turn_holder, **self.round_options)

    async def setup(self):
        raise NotImplementedError

    async def play(self):
        raise NotImplementedError

    async def teardown(self):
        """Closes every page of this game so it can be rebuilt from scratch."""
        if self.current_round is not None:
            await self.current_round.settle()
            self.current_round = None
        for player in self.players:
            await player.close()
        self.players = []

    async def run(self, max_failures: Optional[int] = None):
        """
        Plays until ``play`` returns. A failing session is logged, torn down and
        rebuilt without stopping the other games.

        When ``max_failures`` sessions fail in a row without finishing a round,
        the last error is raised instead so the caller can replace whatever the
        sessions share, such as the browser.
        """
        failures = 0
        while True:
            rounds_before = self.rounds_played
            try:
                await self.setup()
                await self.play()
                await self.teardown()
                return
            except asyncio.CancelledError:
                await self.teardown()
                raise
            except Exception:
                self.restarts += 1
                failures = 1 if self.rounds_played > rounds_before else failures + 1
                await self.teardown()
                if max_failures is not None and failures >= max_failures:
                    self.log.exception("Session failed %d times in a row, giving up", failures)
                    raise
                self.log.exception("Session failed, restarting (restart #%d)", self.restarts)
                await asyncio.sleep(self.retry_delay)

    def record(self, round_record: RoundRecord):
        self.rounds_played += 1
        self.last_word = round_record.revealed_word or ""

    def status(self) -> dict:
        players = list(self.players)
        return {
            "name": self.name,
            "mode": self.mode,
            "round": self.round,
            "turn": players[self.turn].name if self.turn < len(players) else None,
            "rounds_played": self.rounds_played,
            "restarts": self.restarts,
            "last_word": self.last_word,
        }


class SpectatorGame(Game):
    """One player joining public games and recording the answer of each round."""

    mode = "spectator"

    async def setup(self):
        self.players = []
        self.players.append(await self.new_player(self.name))
        self.turn = 0

    async def play(self, max_rounds: Optional[int] = None):
        player = self.players[0]
        while max_rounds is None or self.rounds_played < max_rounds:
            self.log.info("Joining a new game...")
            await player.join_game()

            self.current_round = Round.observed(self.round, self.solver, self.word_bank, **self.round_options)
            self.log.info("Waiting for the round to end")
            word = await self.current_round.guess(player)
            await self.current_round.settle()

            record = self.current_round.record
            self.current_round = None
            try:
                self.word_bank.add_word(word, record.players, record.correct_guesses)
            except ValueError as e:
                self.log.warning("Not recording %r: %s", word, e)
            else:
                self.log.info("Added %r (%d players, %d correct)", word, record.players, record.correct_guesses)
            self.record(record)
            self.round += 1


class SelfPlayGame(Game):
    """
    Two players in a private room taking turns. The drawer picks a word, the
    guesser answers it right away, and every offered word is kept.
    """

    mode = "selfplay"

    def __init__(self, *args, rounds: int = ROUNDS, restart_timer: float = RESTART_TIMER, **kwargs):
        super().__init__(*args, **kwargs)
        self.rounds = rounds
        self.restart_timer = restart_timer

    @property
    def turns_per_match(self) -> int:
        return self.rounds * 2

    async def setup(self):
        # teardown must see every page opened so far
        self.players = []
        for number in (1, 2):
            self.players.append(await self.new_player(f"{self.name} {number}"))

    async def start_match(self):
        leader, guest = self.players
        invite = await leader.create_room(self.rounds)
        self.log.info("Created room %s", invite)
        await guest.join_room(invite)
        await leader.start_round()
        self.round = 1
        self.turn = 0

    async def play_turn(self) -> RoundRecord:
        drawer = self.players[self.turn]
        guesser = self.players[1 - self.turn]
        self.current_round = self.new_round(turn_holder=drawer.name)

        chosen = await self.current_round.choose(drawer)
        await self.current_round.commit(guesser)
        word = await self.current_round.guess(guesser, answer=chosen)
        await self.current_round.settle()
        drawer.mark_resolved(word)

        record = self.current_round.record
        self.current_round = None
        # The drawn word was already kept with the other choices.
        if word != chosen:
            self.word_bank.add_choice(word)
        self.log.info("Round %d: %s drew %r", self.round, drawer.name, word)
        self.record(record)
        return record

    async def play(self, max_matches: Optional[int] = None):
        matches = 0
        while max_matches is None or matches < max_matches:
            self.log.info("Starting a new match")
            await self.start_match()
            for turn in range(self.turns_per_match):
                await self.play_turn()
                self.turn = 1 - self.turn
                if turn % 2 == 1:
                    self.round += 1
            matches += 1
            self.log.info("Match over, waiting %gs", self.restart_timer)
            await asyncio.sleep(self.restart_timer)
