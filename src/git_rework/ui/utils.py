"""Console output helpers."""

from rich.console import Console
from rich.text import Text

from ..constants import SolarizedColors

console = Console(highlight=False)
error_console = Console(stderr=True, highlight=False)


def configure(color: bool = True) -> None:
    """Disable colors when asked, NO_COLOR is honored by rich itself."""
    if not color:
        console.no_color = True
        error_console.no_color = True


def commit_label(short_id: str, title: str) -> Text:
    t = Text(short_id, SolarizedColors.Yellow)
    t.append(Text(" " + title))
    return t


def print_command(cmd: list[str]) -> None:
    console.print(Text("$ " + " ".join(cmd), SolarizedColors.Base01))


def print_step(message: str | Text) -> None:
    t = Text("==> ", SolarizedColors.Blue)
    t.append(message if isinstance(message, Text) else Text(message))
    console.print(t)


def print_warning(message: str) -> None:
    console.print(Text(message, SolarizedColors.Orange))


def print_success(message: str) -> None:
    console.print(Text("✔ " + message, f"bold {SolarizedColors.Green}"))


def print_failure(message: str) -> None:
    error_console.print(Text("✗ " + message, f"bold {SolarizedColors.Red}"))
