"""Entry point for git-rework."""

import logging
import sys

from .cli import help_text, parse_args, resolve_invocation, usage
from .errors import ReworkError, UsageError
from .git_utils import Git
from .sequencer import Sequencer
from .session import Session
from .ui.utils import configure, print_failure, print_success


def main(argv: None | list[str] = None) -> int:
    """Main entry point, returns the exit status."""
    argv = sys.argv[1:] if argv is None else argv
    try:
        arguments = parse_args(argv)
    except UsageError as e:
        sys.stderr.write(usage())
        print_failure(f"error: {e}")
        return 1
    if arguments.help:
        sys.stdout.write(help_text())
        return 0

    configure(color=arguments.color)
    loglevel = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}.get(
        arguments.verbose, logging.DEBUG
    )
    logging.basicConfig(format="[%(levelname)s] %(message)s", level=loglevel)

    try:
        git = Git(arguments.repository)
        invocation = resolve_invocation(git, arguments)
    except ReworkError as e:
        print_failure(f"error: {e}")
        return 1

    try:
        with Session(git) as session:
            Sequencer(session, invocation).run()
    except ReworkError as e:
        print_failure(f"Failed: {e}")
        return 1
    except KeyboardInterrupt:
        print_failure("Interrupted")
        return 1
    print_success("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
