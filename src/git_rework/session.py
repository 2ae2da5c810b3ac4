"""Ownership of the stash and of the rebase for one invocation."""

import logging
from typing import NamedTuple

from .constants import STASH_MESSAGE, Phase
from .errors import RewriteInProgressError, StashRestoreError, UnknownRewriteError
from .git_utils import Git
from .ui.utils import print_failure, print_step


class StashHandle(NamedTuple):
    oid: str
    message: str


class Session:
    """Context manager guaranteeing the rebase is finished or aborted and the
    saved local changes are restored, whatever way the block is left.

    Usage::

        with Session(git) as session:
            session.preflight()
            ...
    """

    def __init__(self, git: Git):
        self.git = git
        self.stash: None | StashHandle = None
        self.phase = Phase.NotStarted

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        started = self.phase is not Phase.NotStarted
        leftover = exc_type is None and started and self.git.rebase_in_progress()
        failing = exc_type is not None or leftover
        if failing and started:
            self.abort()
        try:
            self.restore_stash()
        except StashRestoreError as e:
            if not failing:
                raise
            # do not hide the error which got us here
            print_failure(str(e))
        if leftover:
            raise UnknownRewriteError("the rebase was left unfinished and has been aborted")
        return False

    def preflight(self) -> None:
        """Refuse to run during another rebase and save local changes."""
        if self.git.rebase_in_progress():
            raise RewriteInProgressError()
        if not self.git.has_local_changes():
            logging.info("working tree is clean, nothing to stash")
            return
        print_step("Saving local changes")
        before = set(self.git.stash_ids())
        result = self.git.run("stash", "push", "--include-untracked", "--message", STASH_MESSAGE)
        if result.returncode != 0:
            raise UnknownRewriteError("could not save local changes")
        stash_ids = self.git.stash_ids()
        # git exits 0 without stashing when only submodule contents changed
        if not stash_ids or stash_ids[0] in before:
            logging.info("nothing stashed")
            return
        self.stash = StashHandle(stash_ids[0], STASH_MESSAGE)
        logging.debug("local changes saved in %s", self.stash.oid)

    def restore_stash(self) -> None:
        if self.stash is None:
            return
        handle, self.stash = self.stash, None
        stash_ids = self.git.stash_ids()
        if handle.oid not in stash_ids:
            raise StashRestoreError(handle.oid)
        ref = f"stash@{{{stash_ids.index(handle.oid)}}}"
        print_step("Restoring local changes")
        result = self.git.run("stash", "pop", ref)
        if result.returncode != 0:
            raise StashRestoreError(ref)

    def abort(self) -> None:
        if not self.git.rebase_in_progress():
            return
        print_step("Aborting the rebase")
        result = self.git.run("rebase", "--abort")
        if result.returncode != 0:
            logging.error("'git rebase --abort' failed, run it by hand")
        self.phase = Phase.Aborted
