import unittest
from unittest import mock

from playwright.async_api import Error as PlaywrightError

import main
from clue_solver import ClueSolver
from config import Config
from dictionary_index import DictionaryIndex
from game import SelfPlayGame
from word_bank import WordBank


async def no_driver():
    raise AssertionError("no driver expected")


class TestStatusServer(unittest.TestCase):
    def setUp(self):
        self.client = main.app.test_client()
        self.addCleanup(main.harvester.update, {"games": [], "word_bank": None})

    def test_health_check(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["status"], "running")

    def test_status_lists_games(self):
        bank = WordBank(mode="simple")
        bank.add_word("apple")
        solver = ClueSolver(DictionaryIndex.build(["apple"]))
        config = Config(env={"NUM_GAMES": "2", "GAME_MODE": "selfplay"})
        games = main.make_games(config, bank, solver, 0, no_driver)
        main.harvester.update({"games": games, "word_bank": bank})

        data = self.client.get("/status").get_json()
        self.assertEqual(data["words"], 1)
        self.assertEqual([game["name"] for game in data["games"]], ["Game 1", "Game 2"])
        self.assertTrue(all(isinstance(game, SelfPlayGame) for game in games))


class TestRunGames(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.addCleanup(main.harvester.update, {"games": [], "word_bank": None})
        self.browsers = []
        playwright = mock.Mock()
        playwright.chromium.launch = self.launch
        context = mock.MagicMock()
        context.__aenter__.return_value = playwright

        for patcher in (
            mock.patch.object(main, "async_playwright", return_value=context),
            mock.patch.object(main, "RESTART_DELAY", 0),
            mock.patch.object(main, "GAME_RETRY_DELAY", 0),
            mock.patch.object(main, "MAX_FAILURES", 2),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)

    async def launch(self, headless):
        # A browser that has crashed: every new page fails
        browser = mock.Mock()
        browser.new_page = mock.AsyncMock(side_effect=PlaywrightError("Target page, context or browser has been closed"))
        browser.close = mock.AsyncMock()
        self.browsers.append(browser)
        return browser

    async def test_dead_browser_is_replaced(self):
        config = Config(env={"NUM_GAMES": "2"})
        solver = ClueSolver(DictionaryIndex.build(["apple"]))

        await main.run_games(config, WordBank(mode="simple"), solver, 0, max_launches=2)

        self.assertEqual(len(self.browsers), 2)
        for browser in self.browsers:
            browser.close.assert_awaited_once()
            # Two games, each giving up after two failed sessions
            self.assertEqual(browser.new_page.await_count, 4)
        self.assertEqual([game.restarts for game in main.harvester["games"]], [2, 2])


if __name__ == "__main__":
    unittest.main()
