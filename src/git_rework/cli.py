"""Command-line argument parsing."""

import argparse
import os
from typing import NamedTuple

import pygit2

from . import __version__
from .constants import Action
from .errors import (
    AmbiguousCommitsError,
    MergeInHistoryError,
    NoParentError,
    NotDescendantError,
    NotInHistoryError,
    UsageError,
)
from .git_utils import Git, abbrev

SQUASH_OPTIONS = ("-s", "--squash")

DESCRIPTION = "Edit, drop or squash a past commit through an interactive rebase"

EPILOG = """\
Local changes are stashed before the rebase and restored afterwards.
Giving two commits squashes the newer one into the older one, whatever their order.
"""


class ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


class Arguments(NamedTuple):
    """What the user asked for, before looking at the repository."""

    action: Action
    commits: tuple[str, ...]
    squash_target: None | str = None
    message: bool = False
    repository: str = "."
    verbose: int = 0
    color: bool = True
    help: bool = False


class Invocation(NamedTuple):
    """Arguments resolved against the repository."""

    action: Action
    commit: pygit2.Commit
    target: None | pygit2.Commit = None
    message: bool = False


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="git-rework",
        description=DESCRIPTION,
        epilog=EPILOG,
        add_help=False,
        usage="%(prog)s [-m] [-d] [-s[=<target>]] [-h] <commit> [<target>]",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-m",
        "--message",
        action="store_true",
        help="edit the commit message too (squash instead of fixup when merging)",
    )
    parser.add_argument("-d", "--drop", action="store_true", help="delete the commit")
    parser.add_argument(
        "-s",
        "--squash",
        action="store_true",
        help="merge <commit> into <target> (default: the parent of <commit>), "
        "the target can be given as -s=<target>",
    )
    parser.add_argument(
        "-C",
        "--repository",
        type=str,
        default=".",
        help="Path to git repository (default: current directory)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="show more details")
    parser.add_argument(
        "--no-color", action="store_false", default=True, dest="color", help="disable colors"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-h", "--help", action="store_true", help="show this help and exit")
    parser.add_argument("commits", nargs="*", metavar="<commit>", help="commit(s) to rework")
    return parser


def split_squash_target(argv: list[str]) -> tuple[list[str], None | str]:
    """Take the target out of -s=<target> and --squash=<target>.

    The option is left bare in the returned arguments. A bare -s never takes a
    value so that ``-s <commit>`` keeps working.
    """
    result = []
    squash_target = None
    for i, arg in enumerate(argv):
        if arg == "--":
            result.extend(argv[i:])
            break
        for option in SQUASH_OPTIONS:
            if arg.startswith(option + "="):
                target = arg[len(option) + 1 :]
                if not target:
                    raise UsageError(f"{option}= needs a target commit")
                if squash_target is not None:
                    raise UsageError("the squash target is given twice")
                squash_target = target
                result.append(option)
                break
        else:
            result.append(arg)
    return result, squash_target


def parse_args(argv: list[str]) -> Arguments:
    """Parse the arguments and check they make sense together."""
    argv, squash_target = split_squash_target(argv)
    args = build_parser().parse_args(argv)
    commits = tuple(args.commits)
    repository = os.path.expanduser(args.repository)

    if args.help or commits == ("help",):
        return Arguments(Action.Edit, (), repository=repository, help=True)
    if not commits:
        raise UsageError("missing <commit>")
    if len(commits) > 2:
        raise UsageError(f"too many commits: {' '.join(commits)}")
    if args.drop and args.message:
        raise UsageError("--drop cannot be used with --message")
    if args.drop and args.squash:
        raise UsageError("--drop cannot be used with --squash")
    if args.drop and len(commits) == 2:
        raise UsageError("--drop takes a single commit")
    if squash_target is not None and len(commits) == 2:
        raise UsageError("the squash target is given twice")

    if args.drop:
        action = Action.Drop
    elif args.squash or len(commits) == 2:
        action = Action.Squash
    else:
        action = Action.Edit
    return Arguments(
        action,
        commits,
        squash_target=squash_target,
        message=args.message,
        repository=repository,
        verbose=args.verbose,
        color=args.color,
    )


def usage() -> str:
    return build_parser().format_usage()


def help_text() -> str:
    return build_parser().format_help()


def _squash_pair(git: Git, arguments: Arguments) -> tuple[pygit2.Commit, pygit2.Commit]:
    """Return (source, target) for a squash."""
    commit = git.resolve(arguments.commits[0])

    if len(arguments.commits) == 2:
        other = git.resolve(arguments.commits[1])
        if other.id == commit.id:
            raise UsageError("cannot squash a commit into itself")
        if git.is_ancestor(other, commit):
            return commit, other
        if git.is_ancestor(commit, other):
            return other, commit
        raise AmbiguousCommitsError(*arguments.commits)

    if arguments.squash_target is None:
        parent = git.parent(commit)
        if parent is None:
            raise NoParentError(arguments.commits[0])
        return commit, parent

    target = git.resolve(arguments.squash_target)
    if target.id == commit.id:
        raise UsageError("cannot squash a commit into itself")
    if not git.is_ancestor(target, commit):
        raise NotDescendantError(arguments.commits[0], arguments.squash_target)
    return commit, target


def resolve_invocation(git: Git, arguments: Arguments) -> Invocation:
    """Resolve the commits and check the history can be rewritten.

    Nothing is changed in the repository.
    """
    if arguments.action == Action.Squash:
        commit, target = _squash_pair(git, arguments)
    else:
        commit, target = git.resolve(arguments.commits[0]), None

    head = git.head()
    for c in (commit, target):
        if c is not None and not git.is_ancestor(c, head):
            raise NotInHistoryError(abbrev(c.id))

    oldest = commit if target is None else target
    merge = git.first_merge(git.parent(oldest))
    if merge is not None:
        raise MergeInHistoryError(abbrev(merge.id))

    return Invocation(arguments.action, commit, target, arguments.message)
