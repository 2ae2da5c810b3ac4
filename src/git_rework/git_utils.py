"""Git utility functions for repository operations.

Queries go through pygit2, anything that changes the repository runs the git
executable so the user sees what happens.
"""

import logging
import os
import shlex
import subprocess
import sys
from typing import NamedTuple

import pygit2
from pygit2.enums import FileStatus

from .constants import REBASE_STATE_DIRS
from .errors import NotARepositoryError, UnknownReferenceError, UsageError
from .ui.utils import print_command


def is_ancestor(
    repo: pygit2.Repository, potential_ancestor: pygit2.Commit, of_commit: pygit2.Commit
) -> bool:
    return repo.merge_base(potential_ancestor.id, of_commit.id) == potential_ancestor.id


def range_log(repo: pygit2.Repository, start: None | pygit2.Oid, end: pygit2.Oid):
    """Return a walker for the range start..end, or every ancestor of end."""
    walker = repo.walk(end)
    if start is not None:
        walker.hide(start)
    return walker


def commit_title(commit: pygit2.Commit) -> str:
    """Given a Commit object, return the commit title."""
    lines = commit.message.splitlines()
    return lines[0] if lines else ""


def abbrev(oid: pygit2.Oid) -> str:
    return str(oid)[:12]


class CommandResult(NamedTuple):
    returncode: int
    output: str


def run_command(
    cmd: list[str],
    cwd: None | str = None,
    env: None | dict[str, str] = None,
    interactive: bool = False,
) -> CommandResult:
    """Run cmd, copying its output to the terminal while collecting it.

    Interactive commands may start an editor, so their stdout is left on the
    terminal and only stderr is collected.
    """
    logging.debug("$ %s", shlex.join(cmd))
    if interactive:
        stdout, stderr, sink = None, subprocess.PIPE, sys.stderr
    else:
        stdout, stderr, sink = subprocess.PIPE, subprocess.STDOUT, sys.stdout
    lines = []
    try:
        with subprocess.Popen(
            cmd, cwd=cwd, env=env, stdout=stdout, stderr=stderr, text=True, errors="replace"
        ) as proc:
            stream = proc.stderr if interactive else proc.stdout
            assert stream is not None
            for line in stream:
                sink.write(line)
                sink.flush()
                lines.append(line)
            returncode = proc.wait()
    except FileNotFoundError as e:
        raise UsageError(f"cannot run {cmd[0]}: {e}") from e
    output = "".join(lines)
    logging.debug("> %s", output.strip())
    return CommandResult(returncode, output)


class Git:
    """A non bare repository and its working tree."""

    def __init__(self, path: str = "."):
        discovered = pygit2.discover_repository(path)
        if discovered is None:
            raise NotARepositoryError(f"not a git repository: {path}")
        try:
            self.repo = pygit2.Repository(discovered)
        except pygit2.GitError as e:
            raise NotARepositoryError(f"cannot open repository {discovered}: {e}") from e
        if self.repo.is_bare or self.repo.workdir is None:
            raise NotARepositoryError(f"{discovered} has no working tree")

    @property
    def workdir(self) -> str:
        return self.repo.workdir

    @property
    def gitdir(self) -> str:
        return self.repo.path

    def resolve(self, revision: str) -> pygit2.Commit:
        """Return the commit a human parsable revision points to: HEAD, <sha1>, <branch>."""
        try:
            return self.repo.revparse_single(revision).peel(pygit2.Commit)
        except (KeyError, ValueError, pygit2.GitError) as e:
            raise UnknownReferenceError(revision) from e

    def head(self) -> pygit2.Commit:
        try:
            return self.repo.head.peel(pygit2.Commit)
        except pygit2.GitError as e:
            raise UsageError("the current branch has no commits yet") from e

    def is_ancestor(self, potential_ancestor: pygit2.Commit, of_commit: pygit2.Commit) -> bool:
        return is_ancestor(self.repo, potential_ancestor, of_commit)

    def parent(self, commit: pygit2.Commit) -> None | pygit2.Commit:
        return commit.parents[0] if commit.parents else None

    def first_merge(self, base: None | pygit2.Commit) -> None | pygit2.Commit:
        """Return a merge commit between base (excluded) and HEAD if there is one."""
        for commit in range_log(self.repo, None if base is None else base.id, self.head().id):
            if len(commit.parent_ids) > 1:
                return commit
        return None

    def has_local_changes(self) -> bool:
        """Tracked or untracked changes, ignored files do not count."""
        return any(
            flags not in (FileStatus.CURRENT, FileStatus.IGNORED)
            for flags in self.repo.status().values()
        )

    def has_conflicts(self) -> bool:
        index = self.repo.index
        index.read()
        return index.conflicts is not None

    def conflicted_paths(self) -> list[str]:
        index = self.repo.index
        index.read()
        if index.conflicts is None:
            return []
        return sorted(
            next(entry.path for entry in sides if entry is not None) for sides in index.conflicts
        )

    def rebase_in_progress(self) -> bool:
        return any(os.path.isdir(os.path.join(self.gitdir, d)) for d in REBASE_STATE_DIRS)

    def stash_ids(self) -> list[str]:
        """Commit ids of the stash entries, stash@{0} first."""
        return [str(stash.commit_id) for stash in self.repo.listall_stashes()]

    def run(
        self, *args: str, env: None | dict[str, str] = None, interactive: bool = False
    ) -> CommandResult:
        cmd = ["git", *args]
        print_command(cmd)
        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)
        return run_command(cmd, cwd=self.workdir, env=full_env, interactive=interactive)
