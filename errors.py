"""
Exception types shared by the harvester components.
"""


class BotError(Exception):
    """Base class for every error raised by the harvester."""


class RoundTimeout(BotError, TimeoutError):
    """A bounded wait (choices, committed word, round reveal) ran out of time."""

    def __init__(self, what: str, timeout: float):
        super().__init__(f"timed out after {timeout:g}s waiting for {what}")
        self.what = what
        self.timeout = timeout


class DriverFailure(BotError):
    """A page-driver call failed. Fatal to the session that made it."""


class PersistenceFailure(BotError):
    """Writing the word bank snapshot failed."""


class UnknownLanguage(BotError, KeyError):
    """The requested language is not in the language table."""

    def __str__(self):
        return str(self.args[0]) if self.args else "unknown language"
