"""Single keypress confirmation."""

from typing import Callable

import click
from rich.text import Text

from ..constants import CANCEL_KEY, SolarizedColors
from .utils import console, print_warning


def read_key() -> str:
    return click.getchar(echo=False)


class Prompt:
    """Block until the user presses one of two keys."""

    def __init__(self, getchar: Callable[[], str] = read_key):
        self._getchar = getchar

    def confirm(self, message: str, proceed_key: str, proceed_label: str) -> bool:
        """Return True for proceed_key, False for the cancel key, ask again otherwise.

        Ctrl-C and Ctrl-D count as cancel.
        """
        t = Text(message + "\n", SolarizedColors.Cyan)
        t.append(Text(f"  [{proceed_key}] {proceed_label}", f"bold {SolarizedColors.Green}"))
        t.append(Text(f"  [{CANCEL_KEY}] cancel and restore everything", SolarizedColors.Red))
        console.print(t)
        while True:
            try:
                key = self._getchar()
            except (KeyboardInterrupt, EOFError):
                return False
            key = key.lower()
            if key == proceed_key:
                return True
            if key == CANCEL_KEY:
                return False
            print_warning(f"Unrecognized key {key!r}, press {proceed_key} or {CANCEL_KEY}")
