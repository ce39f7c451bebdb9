"""
Scripted in-memory page driver for the tests.
"""

from typing import List

from errors import DriverFailure
from page_driver import PageDriver


class Script:
    """Returns its values one call at a time, repeating the last one forever."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def next(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


class FakeDriver(PageDriver):
    def __init__(
        self,
        choices=None,
        clues=None,
        reveals=None,
        guessed=None,
        players: int = 5,
        invite: str = "https://skribbl.io/?room",
        reveal_last_chat: bool = False,
        fail_on=(),
    ):
        self.choices = Script(*(choices or [[]]))
        self.clues = Script(*(clues or [""]))
        self.reveals = Script(*(reveals or [""]))
        self.guessed = Script(*(guessed or [0]))
        self.players = players
        self.invite = invite
        self.reveal_last_chat = reveal_last_chat
        self.fail_on = set(fail_on)

        self.calls: List[tuple] = []
        self.sent: List[str] = []
        self.picked: List[int] = []
        self.closed = False

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise DriverFailure(f"{name} failed")

    def called(self, name) -> bool:
        return any(call[0] == name for call in self.calls)

    async def goto(self, url):
        self._call("goto", url)

    async def set_name(self, name):
        self._call("set_name", name)

    async def click_play(self):
        self._call("click_play")

    async def create_private_room(self):
        self._call("create_private_room")

    async def configure_room(self, rounds, language_code):
        self._call("configure_room", rounds, language_code)

    async def invite_link(self):
        self._call("invite_link")
        return self.invite

    async def start_game(self):
        self._call("start_game")

    async def choice_words(self):
        self._call("choice_words")
        return list(self.choices.next())

    async def pick_choice(self, index):
        self._call("pick_choice", index)
        self.picked.append(index)

    async def clue(self):
        self._call("clue")
        return self.clues.next()

    async def reveal_text(self):
        self._call("reveal_text")
        if self.reveal_last_chat:
            return self.sent[-1] if self.sent else ""
        return self.reveals.next()

    async def guessed_count(self):
        self._call("guessed_count")
        return self.guessed.next()

    async def player_count(self):
        self._call("player_count")
        return self.players

    async def send_chat(self, text):
        self._call("send_chat", text)
        self.sent.append(text)

    async def print_page(self, path):
        self._call("print_page", path)

    async def close(self):
        self.closed = True
