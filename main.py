"""
Main entry point for the word harvester with a Flask status server.
This file starts both the Flask web server and the browser games.
"""

import asyncio
import logging
import threading
from typing import Optional

from flask import Flask, jsonify
from playwright.async_api import Error as PlaywrightError, async_playwright

from clue_solver import ClueSolver
from config import Config
from dictionary_index import DictionaryIndex
from errors import PersistenceFailure
from game import SelfPlayGame, SpectatorGame
from languages import LanguageTable
from page_driver import PlaywrightDriver
from word_bank import WordBank

logger = logging.getLogger(__name__)

# Initialize Flask app for the status endpoints
app = Flask(__name__)

# Shared state, set once the games are running
harvester = {"games": [], "word_bank": None}

GAME_CLASSES = {"spectator": SpectatorGame, "selfplay": SelfPlayGame}
RESTART_DELAY = 5.0
# Sessions a game may fail in a row before the browser is replaced
MAX_FAILURES = 5
GAME_RETRY_DELAY = 5.0


@app.route('/')
def health_check():
    """Health check endpoint."""
    return jsonify({
        "status": "running",
        "service": "word_harvester",
        "games": len(harvester["games"]),
    })


@app.route('/status')
def status():
    """Status endpoint showing every game and the word bank size."""
    word_bank = harvester["word_bank"]
    return jsonify({
        "games": [game.status() for game in harvester["games"]],
        "words": len(word_bank) if word_bank is not None else 0,
    })


def run_flask(port: int):
    """Run Flask server in a separate thread."""
    app.run(host='0.0.0.0', port=port, debug=False, use_reloader=False)


def make_games(config: Config, word_bank: WordBank, solver: ClueSolver, language_code: int, driver_factory):
    game_class = GAME_CLASSES[config.GAME_MODE]
    return [
        game_class(
            f"Game {i + 1}",
            word_bank,
            solver,
            driver_factory,
            language_code=language_code,
            url=config.GAME_URL,
            retry_delay=GAME_RETRY_DELAY,
        )
        for i in range(config.NUM_GAMES)
    ]


async def run_games(config: Config, word_bank: WordBank, solver: ClueSolver, language_code: int,
                    max_launches: Optional[int] = None):
    """
    Runs every game in one browser. Once every game has given up, the pages
    are closed and a fresh browser is launched.
    """
    launches = 0
    async with async_playwright() as playwright:
        while max_launches is None or launches < max_launches:
            launches += 1
            browser = await playwright.chromium.launch(headless=config.HEADLESS)

            async def driver_factory():
                return await PlaywrightDriver.open(browser)

            games = make_games(config, word_bank, solver, language_code, driver_factory)
            harvester["games"] = games
            try:
                logger.info("Starting %d %s game(s)...", len(games), config.GAME_MODE)
                results = await asyncio.gather(
                    *(game.run(max_failures=MAX_FAILURES) for game in games),
                    return_exceptions=True,
                )
                for game, result in zip(games, results):
                    if isinstance(result, Exception):
                        logger.error("%s gave up: %s", game.name, result)
            finally:
                try:
                    await browser.close()
                except PlaywrightError as e:
                    logger.warning("Could not close the browser: %s", e.message)
            logger.warning("All games stopped, launching a new browser in %gs", RESTART_DELAY)
            await asyncio.sleep(RESTART_DELAY)


async def run_harvester(config: Config):
    languages = LanguageTable.from_file(config.LANGUAGES_PATH)
    language_code = languages.code_for(config.LANGUAGE)

    index = DictionaryIndex.from_file(config.WORDS_PATH)
    solver = ClueSolver(index)
    word_bank = WordBank(config.BANK_PATH, mode=config.BANK_MODE)
    harvester["word_bank"] = word_bank

    autosave = asyncio.create_task(word_bank.autosave(config.SAVE_INTERVAL))
    try:
        await run_games(config, word_bank, solver, language_code)
    finally:
        autosave.cancel()
        await asyncio.gather(autosave, return_exceptions=True)
        try:
            word_bank.save_state()
        except PersistenceFailure as e:
            logger.error("Final word bank save failed: %s", e)


def main():
    """Main function to start both Flask and the games."""
    config = Config()
    logging.basicConfig(
        level=logging.DEBUG if config.VERBOSE else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Start Flask server in a separate thread
    flask_thread = threading.Thread(target=run_flask, args=(config.PORT,), daemon=True)
    flask_thread.start()

    # Run the games in the main thread
    asyncio.run(run_harvester(config))


if __name__ == "__main__":
    main()
