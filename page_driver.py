"""
Browser side of the bot.

``PageDriver`` is the only thing the players talk to. It answers semantic
questions ("what is the current clue?", "how many players guessed it?") and
performs semantic actions ("send this chat message"). ``PlaywrightDriver``
implements it on top of a Playwright page and is the only place that knows
about selectors.
"""

import functools
import logging
from abc import ABC, abstractmethod
from typing import List

from playwright.async_api import Browser, Error as PlaywrightError, Page

from errors import DriverFailure

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1280, "height": 720}

# Entries in the player list that are not other players.
LIST_OVERHEAD = 2


class PageDriver(ABC):
    """Semantic operations a player needs from its browser page."""

    @abstractmethod
    async def goto(self, url: str): ...

    @abstractmethod
    async def set_name(self, name: str): ...

    @abstractmethod
    async def click_play(self): ...

    @abstractmethod
    async def create_private_room(self): ...

    @abstractmethod
    async def configure_room(self, rounds: int, language_code: int): ...

    @abstractmethod
    async def invite_link(self) -> str: ...

    @abstractmethod
    async def start_game(self): ...

    @abstractmethod
    async def choice_words(self) -> List[str]:
        """Words currently offered to choose from, empty when none are shown."""

    @abstractmethod
    async def pick_choice(self, index: int): ...

    @abstractmethod
    async def clue(self) -> str:
        """Current hint text, underscores for hidden letters."""

    @abstractmethod
    async def reveal_text(self) -> str:
        """The answer shown at the end of the last round."""

    @abstractmethod
    async def guessed_count(self) -> int:
        """Players marked as having guessed correctly."""

    @abstractmethod
    async def player_count(self) -> int:
        """Active players, not counting the bot."""

    @abstractmethod
    async def send_chat(self, text: str): ...

    @abstractmethod
    async def print_page(self, path: str): ...

    @abstractmethod
    async def close(self): ...


def driver_call(method):
    """Turns Playwright errors into DriverFailure."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except PlaywrightError as e:
            raise DriverFailure(f"{method.__name__} failed: {e.message}") from e

    return wrapper


class PlaywrightDriver(PageDriver):
    NAME_SEL = ".input-name"
    PLAY_BTN_SEL = ".button-play"
    CREATE_BTN_SEL = ".button-create"
    INV_URL_SEL = "#input-invite"
    ROUNDS_SEL = "#item-settings-rounds"
    LANGUAGE_SEL = "#item-settings-language"
    START_BTN_SEL = "#start-game"
    WORDS_SEL = ".words > .word"
    CHAT_SEL = ".chat-container > form > input"
    HINT_SEL = ".hints > div > .hint"
    REVEAL_SEL = ".reveal > p > span:last-child"
    PLAYER_SEL = ".players-list > .player"
    GUESSED_SEL = ".players-list > .guessed"

    def __init__(self, page: Page, timeout: float = 15.0):
        self.page = page
        self.timeout_ms = timeout * 1000

    @classmethod
    async def open(cls, browser: Browser, timeout: float = 15.0) -> "PlaywrightDriver":
        try:
            page = await browser.new_page(viewport=VIEWPORT)
        except PlaywrightError as e:
            raise DriverFailure(f"could not open a page: {e.message}") from e
        return cls(page, timeout=timeout)

    # Generic page capabilities

    async def _wait_for(self, selector: str):
        return await self.page.wait_for_selector(selector, timeout=self.timeout_ms)

    async def _text(self, selector: str) -> str:
        element = await self.page.query_selector(selector)
        if element is None:
            return ""
        return (await element.text_content()) or ""

    async def _click(self, selector: str):
        await self._wait_for(selector)
        await self.page.click(selector)

    async def _set_value(self, selector: str, value: str):
        await self._wait_for(selector)
        await self.page.fill(selector, value)

    async def _all_texts(self, selector: str) -> List[str]:
        return [(await element.text_content()) or "" for element in await self.page.query_selector_all(selector)]

    async def _count(self, selector: str) -> int:
        return await self.page.locator(selector).count()

    # Semantic operations

    @driver_call
    async def goto(self, url: str):
        await self.page.goto(url, wait_until="networkidle")

    @driver_call
    async def set_name(self, name: str):
        await self._set_value(self.NAME_SEL, name)

    @driver_call
    async def click_play(self):
        await self._click(self.PLAY_BTN_SEL)

    @driver_call
    async def create_private_room(self):
        await self._click(self.CREATE_BTN_SEL)
        await self._wait_for(self.INV_URL_SEL)

    @driver_call
    async def configure_room(self, rounds: int, language_code: int):
        await self._wait_for(self.ROUNDS_SEL)
        await self.page.select_option(self.ROUNDS_SEL, str(rounds))
        await self.page.select_option(self.LANGUAGE_SEL, str(language_code))

    @driver_call
    async def invite_link(self) -> str:
        element = await self._wait_for(self.INV_URL_SEL)
        return await element.input_value()

    @driver_call
    async def start_game(self):
        await self._click(self.START_BTN_SEL)

    @driver_call
    async def choice_words(self) -> List[str]:
        return [text.strip() for text in await self._all_texts(self.WORDS_SEL) if text.strip()]

    @driver_call
    async def pick_choice(self, index: int):
        await self.page.locator(self.WORDS_SEL).nth(index).click(timeout=self.timeout_ms)

    @driver_call
    async def clue(self) -> str:
        return "".join(await self._all_texts(self.HINT_SEL))

    @driver_call
    async def reveal_text(self) -> str:
        return (await self._text(self.REVEAL_SEL)).strip()

    @driver_call
    async def guessed_count(self) -> int:
        return await self._count(self.GUESSED_SEL)

    @driver_call
    async def player_count(self) -> int:
        return max(await self._count(self.PLAYER_SEL) - LIST_OVERHEAD, 0)

    @driver_call
    async def send_chat(self, text: str):
        await self._set_value(self.CHAT_SEL, text)
        await self.page.press(self.CHAT_SEL, "Enter")

    @driver_call
    async def print_page(self, path: str = "page.pdf"):
        await self.page.pdf(path=path, format="A4")

    async def close(self):
        try:
            if not self.page.is_closed():
                await self.page.close()
        except PlaywrightError as e:
            logger.warning("Could not close page: %s", e.message)
