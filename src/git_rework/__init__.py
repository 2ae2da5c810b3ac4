"""git-rework: edit, drop or squash a past commit without writing a rebase todo list."""

__version__ = "0.1.0"

from .cli import parse_args, resolve_invocation
from .sequencer import Sequencer
from .session import Session

__all__ = ["Sequencer", "Session", "parse_args", "resolve_invocation"]
