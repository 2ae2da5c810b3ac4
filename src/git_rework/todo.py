"""Rebase todo list model and the rewrites git-rework applies to it.

Everything here is pure: it works on lists of :class:`Instruction` and never
touches a repository. The sequence editor reads git's todo file, calls
:func:`apply_plan` and writes the result back.
"""

import json
from typing import NamedTuple

from .constants import COMMIT_TODO_ACTIONS, TODO_ABBREVIATIONS, TodoAction
from .errors import InstructionNotFoundError

# Shortest id git ever abbreviates to
MIN_ABBREV = 4


class Instruction(NamedTuple):
    """One line of the todo list.

    Lines which do not name a commit (comments, blank lines, exec, label,
    update-ref...) have ``commit`` set to None and are written back verbatim.
    """

    action: None | str
    commit: None | str
    rest: str
    raw: str

    @classmethod
    def parse(cls, line: str) -> "Instruction":
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return cls(None, None, "", line)
        words = stripped.split(maxsplit=2)
        action = TODO_ABBREVIATIONS.get(words[0], words[0])
        if action not in COMMIT_TODO_ACTIONS or len(words) < 2 or words[1].startswith("-"):
            return cls(action, None, "", line)
        return cls(action, words[1], words[2] if len(words) > 2 else "", line)

    def matches(self, commit: str) -> bool:
        """Compare against a possibly abbreviated commit id."""
        if self.commit is None or min(len(self.commit), len(commit)) < MIN_ABBREV:
            return False
        return self.commit.startswith(commit) or commit.startswith(self.commit)

    def with_action(self, action: str) -> "Instruction":
        instruction = self._replace(action=action)
        return instruction._replace(raw=str(instruction))

    def __str__(self) -> str:
        if self.commit is None:
            return self.raw
        return " ".join(part for part in (self.action, self.commit, self.rest) if part)


class Plan(NamedTuple):
    """Rewrite handed to the sequence editor."""

    action: TodoAction
    commit: str
    anchor: None | str = None

    def to_json(self) -> str:
        return json.dumps(
            {"action": str(self.action), "commit": self.commit, "anchor": self.anchor}
        )

    @classmethod
    def from_json(cls, data: str) -> "Plan":
        d = json.loads(data)
        return cls(TodoAction(d["action"]), d["commit"], d.get("anchor"))


def parse_todo(text: str) -> list[Instruction]:
    return [Instruction.parse(line) for line in text.splitlines()]


def format_todo(instructions: list[Instruction]) -> str:
    return "".join(f"{instruction}\n" for instruction in instructions)


def find(instructions: list[Instruction], commit: str) -> int:
    """Return the index of the line picking ``commit``."""
    for i, instruction in enumerate(instructions):
        if instruction.matches(commit):
            return i
    raise InstructionNotFoundError(commit)


def set_action(instructions: list[Instruction], commit: str, action: str) -> list[Instruction]:
    """Return a copy of ``instructions`` where ``commit`` uses ``action``."""
    i = find(instructions, commit)
    result = list(instructions)
    result[i] = result[i].with_action(action)
    return result


def move_after(
    instructions: list[Instruction], commit: str, anchor: str, action: str
) -> list[Instruction]:
    """Move the line of ``commit`` right after the one of ``anchor``, using ``action``."""
    result = list(instructions)
    moved = result.pop(find(result, commit)).with_action(action)
    result.insert(find(result, anchor) + 1, moved)
    return result


def apply_plan(instructions: list[Instruction], plan: Plan) -> list[Instruction]:
    if plan.anchor is None:
        return set_action(instructions, plan.commit, plan.action)
    return move_after(instructions, plan.commit, plan.anchor, plan.action)
