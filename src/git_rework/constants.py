"""Constants, enums, and color definitions for git-rework."""

from enum import Enum, StrEnum, auto


class SolarizedColors(StrEnum):
    # Darker to Lighter
    Base03 = "#002b36"
    Base02 = "#073642"
    Base01 = "#586e75"
    Base00 = "#657b83"
    Base0 = "#839496"
    Base1 = "#93a1a1"
    Base2 = "#eee8d5"
    Base3 = "#fdf6e3"
    Yellow = "#b58900"
    Orange = "#cb4b16"
    Red = "#dc322f"
    Magenta = "#d33682"
    Violet = "#6c71c4"
    Blue = "#268bd2"
    Cyan = "#2aa198"
    Green = "#859900"


class Action(StrEnum):
    """What to do with the selected commit."""

    Edit = "edit"
    Drop = "drop"
    Squash = "squash"


class TodoAction(StrEnum):
    """Rebase todo words used by the tool."""

    Pick = "pick"
    Edit = "edit"
    Drop = "drop"
    Squash = "squash"
    Fixup = "fixup"


# Single letter forms git writes when rebase.abbreviateCommands is set
TODO_ABBREVIATIONS = {
    "p": "pick",
    "r": "reword",
    "e": "edit",
    "s": "squash",
    "f": "fixup",
    "x": "exec",
    "b": "break",
    "d": "drop",
    "l": "label",
    "t": "reset",
    "m": "merge",
    "u": "update-ref",
}

# Todo words followed by a commit id
COMMIT_TODO_ACTIONS = frozenset({"pick", "reword", "edit", "squash", "fixup", "drop"})


class Phase(Enum):
    NotStarted = auto()
    PausedForEdit = auto()
    PausedForConflict = auto()
    PausedForEmpty = auto()
    Resuming = auto()
    Finished = auto()
    Aborted = auto()


class Outcome(Enum):
    Done = auto()
    Paused = auto()
    Conflict = auto()
    Empty = auto()
    Failed = auto()


# Substrings of git's rebase output, only consulted when the index does not
# already report conflicts.
CONFLICT_MARKERS = (
    "CONFLICT (",
    "Resolve all conflicts manually",
    "fix conflicts and then run",
)

EMPTY_COMMIT_MARKERS = (
    "The previous cherry-pick is now empty",
    "nothing to commit",
    "--allow-empty",
    "No changes - did you forget to use 'git add'?",
    "You asked to amend the most recent commit",
)

# Directories git keeps in $GIT_DIR while a rebase is in progress
REBASE_STATE_DIRS = ("rebase-merge", "rebase-apply")

CONTINUE_KEY = "c"
SKIP_KEY = "s"
CANCEL_KEY = "q"

PLAN_ENV = "GIT_REWORK_PLAN"
STASH_MESSAGE = "git-rework: saved local changes"
