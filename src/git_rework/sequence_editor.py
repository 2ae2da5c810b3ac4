"""Program run by git as GIT_SEQUENCE_EDITOR.

git calls it with the path of the todo file as its only argument. The rewrite
to apply comes from the environment, set by the sequencer.
"""

import logging
import os
import sys

from .constants import PLAN_ENV
from .errors import ReworkError
from .todo import Plan, apply_plan, format_todo, parse_todo


def edit_todo(path: str, plan: Plan) -> None:
    with open(path) as f:
        instructions = parse_todo(f.read())
    instructions = apply_plan(instructions, plan)
    with open(path, "w") as f:
        f.write(format_todo(instructions))


def main(argv: None | list[str] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(format="[%(levelname)s] %(message)s", level=logging.WARNING)
    if len(argv) != 1:
        logging.error("usage: python -m git_rework.sequence_editor <todo-file>")
        return 1
    data = os.environ.get(PLAN_ENV)
    if not data:
        logging.error("%s is not set", PLAN_ENV)
        return 1
    try:
        plan = Plan.from_json(data)
        edit_todo(argv[0], plan)
    except (ValueError, KeyError) as e:
        logging.error("invalid rewrite plan %r: %s", data, e)
        return 1
    except ReworkError as e:
        logging.error("%s", e)
        return 1
    logging.debug("applied %s to %s", plan, argv[0])
    return 0


if __name__ == "__main__":
    sys.exit(main())
