import asyncio
import unittest

from clue_solver import ClueSolver
from dictionary_index import DictionaryIndex
from errors import RoundTimeout
from fake_driver import FakeDriver
from player import Player
from round_machine import InvalidTransition, Round, RoundState
from word_bank import SCORED, SIMPLE, WordBank

FAST = {"tick": 0.005, "clue_interval": 0.01, "settle_delay": 0}
THREE_LETTER_WORDS = ["cat", "car", "dog", "cow", "pig", "bee", "ant", "owl", "fox", "hen"]


class RoundTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.solver = ClueSolver(DictionaryIndex.build(THREE_LETTER_WORDS))
        self.bank = WordBank(mode=SCORED)

    def observed(self, **kwargs):
        options = {"pacing": 0.001, "choice_timeout": 0.5, "resolution_timeout": 2}
        options.update(kwargs)
        return Round.observed(1, self.solver, self.bank, **options)


class TestAutoAnswer(RoundTestCase):
    async def test_submits_small_candidate_list_once(self):
        driver = FakeDriver(
            clues=["___", "c__", "ca_", "cat"],
            reveals=[""] * 80 + ["cat"],
            guessed=[3],
            players=6,
        )
        player = Player("Player 1", driver, **FAST)
        round_ = self.observed()

        word = await round_.guess(player)
        await round_.settle()

        self.assertEqual(word, "cat")
        self.assertEqual(driver.sent, ["cat", "car", "cow"])
        self.assertEqual(round_.state, RoundState.resolved)
        self.assertTrue(round_.record.submitted)
        self.assertEqual(round_.record.players, 6)
        # One correct guess is assumed to be ours
        self.assertEqual(round_.record.correct_guesses, 2)

    async def test_large_candidate_list_not_submitted(self):
        driver = FakeDriver(clues=["___"], reveals=[""] * 20 + ["cat"], guessed=[3])
        player = Player("Player 1", driver, **FAST)
        round_ = self.observed()

        await round_.guess(player)

        self.assertEqual(driver.sent, [])
        self.assertFalse(round_.record.submitted)
        self.assertIsNone(round_.submission)
        self.assertEqual(round_.record.correct_guesses, 3)

    async def test_no_candidates_not_submitted(self):
        driver = FakeDriver(clues=["z__", "zz_"], reveals=[""] * 20 + ["zzz"])
        player = Player("Player 1", driver, **FAST)
        round_ = self.observed()

        await round_.guess(player)
        self.assertEqual(driver.sent, [])

    async def test_correct_count_never_negative(self):
        driver = FakeDriver(clues=["c__"], reveals=[""] * 20 + ["cat"], guessed=[0])
        player = Player("Player 1", driver, **FAST)
        round_ = self.observed()

        await round_.guess(player)
        self.assertEqual(round_.record.correct_guesses, 0)

    async def test_timeout_leaves_bank_alone(self):
        driver = FakeDriver(clues=["c__"], reveals=[""])
        player = Player("Player 1", driver, **FAST)
        round_ = self.observed(resolution_timeout=0.05)

        with self.assertRaises(RoundTimeout):
            await round_.guess(player)
        await round_.settle()

        self.assertEqual(len(self.bank), 0)
        self.assertEqual(round_.state, RoundState.guessing)

    async def test_settle_stops_running_batch(self):
        driver = FakeDriver(clues=["c__"], reveals=[""] * 10 + ["cat"])
        player = Player("Player 1", driver, **FAST)
        round_ = self.observed(pacing=10)

        await round_.guess(player)
        self.assertFalse(round_.submission.done())

        await round_.settle()
        self.assertTrue(round_.submission.cancelled())
        self.assertEqual(driver.sent, ["cat"])

    async def test_settle_can_itself_be_cancelled(self):
        stopping = asyncio.Event()

        async def slow_to_stop():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                stopping.set()
                await asyncio.sleep(10)
                raise

        round_ = self.observed()
        round_.submission = asyncio.create_task(slow_to_stop())
        await asyncio.sleep(0)

        settling = asyncio.create_task(round_.settle())
        await stopping.wait()
        settling.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await settling

        round_.submission.cancel()
        await asyncio.wait([round_.submission])
        self.assertTrue(round_.submission.cancelled())


class TestSelfPlayRound(RoundTestCase):
    def setUp(self):
        super().setUp()
        self.bank = WordBank(mode=SIMPLE)

    def new_round(self):
        return Round(3, self.solver, self.bank, turn_holder="Player 1", choice_timeout=0.5, resolution_timeout=1)

    async def test_full_round(self):
        drawer = Player("Player 1", FakeDriver(choices=[["apple", "pear", "plum"]]), **FAST)
        guesser_driver = FakeDriver(clues=["", "_____"], reveal_last_chat=True, guessed=[1], players=2)
        guesser = Player("Player 2", guesser_driver, **FAST)
        round_ = self.new_round()

        chosen = await round_.choose(drawer)
        self.assertEqual(round_.state, RoundState.word_chosen)
        self.assertEqual(self.bank.words, {"apple": 1, "pear": 1, "plum": 1})

        await round_.commit(guesser)
        self.assertEqual(round_.state, RoundState.guessing)

        word = await round_.guess(guesser, answer=chosen)
        self.assertEqual(word, chosen)
        self.assertEqual(guesser_driver.sent, [chosen])
        self.assertEqual(round_.record.chosen_word, chosen)
        self.assertEqual(round_.record.choices, ["apple", "pear", "plum"])
        self.assertEqual(round_.record.turn_holder, "Player 1")
        self.assertEqual(round_.record.correct_guesses, 0)
        self.assertEqual(round_.state, RoundState.resolved)

    async def test_choice_timeout(self):
        drawer = Player("Player 1", FakeDriver(choices=[[]]), **FAST)
        round_ = self.new_round()
        with self.assertRaises(RoundTimeout):
            await round_.choose(drawer)
        self.assertEqual(len(self.bank), 0)
        self.assertEqual(round_.state, RoundState.awaiting_choices)

    async def test_out_of_order_transition(self):
        guesser = Player("Player 2", FakeDriver(clues=["_____"]), **FAST)
        round_ = self.new_round()
        with self.assertRaises(InvalidTransition):
            await round_.commit(guesser)
        with self.assertRaises(InvalidTransition):
            await round_.guess(guesser, answer="apple")


if __name__ == "__main__":
    unittest.main()
