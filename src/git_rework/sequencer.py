"""Drive git rebase to edit, drop or squash a commit."""

import logging
import shlex
import sys

import pygit2
from rich.text import Text

from .cli import Invocation
from .constants import (
    CONFLICT_MARKERS,
    CONTINUE_KEY,
    EMPTY_COMMIT_MARKERS,
    PLAN_ENV,
    SKIP_KEY,
    Action,
    Outcome,
    Phase,
    TodoAction,
)
from .errors import CancelledError, EmptyCommitError, RewriteConflictError, UnknownRewriteError
from .git_utils import CommandResult, abbrev, commit_title
from .session import Session
from .todo import Plan
from .ui.prompt import Prompt
from .ui.utils import commit_label, print_step, print_warning

# Lines of git output repeated in an unknown failure
ERROR_TAIL = 5


def classify(returncode: int, output: str, conflicted: bool, in_progress: bool) -> Outcome:
    """Tell what a rebase step led to.

    The index is the reliable source for conflicts, git's messages are only
    matched when it has nothing to say.
    """
    if returncode == 0:
        return Outcome.Paused if in_progress else Outcome.Done
    if not in_progress:
        return Outcome.Failed
    if conflicted:
        return Outcome.Conflict
    if any(marker in output for marker in EMPTY_COMMIT_MARKERS):
        return Outcome.Empty
    if any(marker in output for marker in CONFLICT_MARKERS):
        return Outcome.Conflict
    return Outcome.Failed


def sequence_editor_command() -> str:
    return f"{shlex.quote(sys.executable)} -m git_rework.sequence_editor"


def failure_details(output: str) -> str:
    lines = [line for line in output.strip().splitlines() if line.strip()]
    return "\n".join(lines[-ERROR_TAIL:])


class Sequencer:
    def __init__(self, session: Session, invocation: Invocation, prompt: None | Prompt = None):
        self.session = session
        self.git = session.git
        self.invocation = invocation
        self.prompt = prompt or Prompt()

    @property
    def editor_env(self) -> dict[str, str]:
        """Keep the recorded messages unless the user wants to edit them."""
        return {} if self.invocation.message else {"GIT_EDITOR": "true"}

    def label(self, commit: pygit2.Commit):
        return commit_label(abbrev(commit.id), commit_title(commit))

    def run(self) -> None:
        self.session.preflight()
        {
            Action.Drop: self.drop,
            Action.Squash: self.squash,
            Action.Edit: self.edit,
        }[self.invocation.action]()

    def outcome(self, result: CommandResult) -> Outcome:
        outcome = classify(
            result.returncode,
            result.output,
            self.git.has_conflicts(),
            self.git.rebase_in_progress(),
        )
        logging.debug("rebase step outcome: %s", outcome.name)
        return outcome

    def start(self, plan: Plan, base: None | pygit2.Commit) -> CommandResult:
        """Start the rebase onto base, or from the root commit when there is none."""
        env = dict(self.editor_env)
        env[PLAN_ENV] = plan.to_json()
        env["GIT_SEQUENCE_EDITOR"] = sequence_editor_command()
        args = ["rebase", "--interactive", "--no-autosquash"]
        args.append("--root" if base is None else str(base.id))
        self.session.phase = Phase.Resuming
        return self.git.run(*args, env=env, interactive=self.invocation.message)

    def resume(self) -> CommandResult:
        self.session.phase = Phase.Resuming
        return self.git.run(
            "rebase", "--continue", env=self.editor_env, interactive=self.invocation.message
        )

    def skip(self) -> CommandResult:
        self.session.phase = Phase.Resuming
        return self.git.run("rebase", "--skip", env=self.editor_env)

    def stage_all(self) -> None:
        result = self.git.run("add", "--all")
        if result.returncode != 0:
            raise UnknownRewriteError(f"could not stage changes\n{failure_details(result.output)}")

    def pause_for_conflict(self) -> None:
        self.session.phase = Phase.PausedForConflict
        paths = self.git.conflicted_paths()
        if paths:
            print_warning("Conflicting files:\n" + "\n".join(f"  {p}" for p in paths))
        if not self.prompt.confirm(
            "The rebase stopped on a conflict. Resolve it from another terminal.",
            CONTINUE_KEY,
            "stage everything and continue",
        ):
            raise CancelledError() from RewriteConflictError("conflict left unresolved")
        self.stage_all()

    def pause_for_empty(self) -> None:
        self.session.phase = Phase.PausedForEmpty
        if not self.prompt.confirm(
            "This commit would become empty.",
            SKIP_KEY,
            "skip it",
        ):
            raise CancelledError() from EmptyCommitError("empty commit kept")

    def drive(self, result: CommandResult) -> None:
        """Keep the rebase going until it finishes, asking the user on conflicts."""
        while True:
            outcome = self.outcome(result)
            if outcome is Outcome.Done:
                self.session.phase = Phase.Finished
                return
            if outcome is Outcome.Conflict:
                self.pause_for_conflict()
                result = self.resume()
            elif outcome is Outcome.Empty:
                self.pause_for_empty()
                result = self.skip()
            elif outcome is Outcome.Paused:
                raise UnknownRewriteError("the rebase stopped unexpectedly")
            else:
                raise UnknownRewriteError(f"git rebase failed\n{failure_details(result.output)}")

    def drop(self) -> None:
        commit = self.invocation.commit
        print_step(Text.assemble("Dropping ", self.label(commit)))
        self.drive(self.start(Plan(TodoAction.Drop, str(commit.id)), self.git.parent(commit)))

    def squash(self) -> None:
        commit, target = self.invocation.commit, self.invocation.target
        assert target is not None
        action = TodoAction.Squash if self.invocation.message else TodoAction.Fixup
        print_step(Text.assemble("Merging ", self.label(commit), " into ", self.label(target)))
        plan = Plan(action, str(commit.id), anchor=str(target.id))
        self.drive(self.start(plan, self.git.parent(target)))

    def edit(self) -> None:
        commit = self.invocation.commit
        print_step(Text.assemble("Editing ", self.label(commit)))
        result = self.start(Plan(TodoAction.Edit, str(commit.id)), self.git.parent(commit))
        if self.outcome(result) is not Outcome.Paused:
            raise UnknownRewriteError(
                f"the rebase did not stop on {abbrev(commit.id)}\n{failure_details(result.output)}"
            )

        self.session.phase = Phase.PausedForEdit
        if not self.prompt.confirm(
            f"{abbrev(commit.id)} is checked out in {self.git.workdir}, make your changes.",
            CONTINUE_KEY,
            "amend the commit and continue",
        ):
            raise CancelledError()
        self.stage_all()

        args = ["commit", "--amend"]
        if not self.invocation.message:
            args.append("--no-edit")
        result = self.git.run(*args, interactive=self.invocation.message)
        if result.returncode != 0:
            if not any(marker in result.output for marker in EMPTY_COMMIT_MARKERS):
                raise UnknownRewriteError(
                    f"could not amend the commit\n{failure_details(result.output)}"
                )
            self.pause_for_empty()
            self.drive(self.drop_stopped_commit())
        else:
            self.drive(self.resume())

    def drop_stopped_commit(self) -> CommandResult:
        """Remove the commit the rebase stopped on, the index already matches its parent."""
        commit = self.invocation.commit
        if self.git.parent(commit) is None:
            # A root commit cannot be reset away, emptying it amounts to dropping it
            result = self.git.run("rebase", "--abort")
            if result.returncode != 0:
                raise UnknownRewriteError(
                    f"could not restart the rebase\n{failure_details(result.output)}"
                )
            return self.start(Plan(TodoAction.Drop, str(commit.id)), None)
        result = self.git.run("reset", "--soft", "HEAD^")
        if result.returncode != 0:
            raise UnknownRewriteError(
                f"could not drop the commit\n{failure_details(result.output)}"
            )
        return self.resume()
