"""Errors raised by git-rework."""


class ReworkError(Exception):
    """Base class, the message is shown to the user as is."""


class UsageError(ReworkError):
    pass


class NotARepositoryError(UsageError):
    pass


class UnknownReferenceError(ReworkError):
    def __init__(self, reference: str):
        super().__init__(f"unknown commit: {reference}")
        self.reference = reference


class AmbiguousCommitsError(ReworkError):
    def __init__(self, first: str, second: str):
        super().__init__(f"neither {first} nor {second} is an ancestor of the other")
        self.first = first
        self.second = second


class NoParentError(ReworkError):
    def __init__(self, commit: str):
        super().__init__(f"{commit} has no parent to be merged into")
        self.commit = commit


class NotDescendantError(ReworkError):
    def __init__(self, source: str, target: str):
        super().__init__(f"{target} is not an ancestor of {source}")
        self.source = source
        self.target = target


class NotInHistoryError(ReworkError):
    def __init__(self, commit: str):
        super().__init__(f"{commit} is not in the history of HEAD")
        self.commit = commit


class MergeInHistoryError(ReworkError):
    def __init__(self, merge: str):
        super().__init__(f"cannot rewrite history containing the merge commit {merge}")
        self.merge = merge


class RewriteInProgressError(ReworkError):
    def __init__(self):
        super().__init__(
            "a rebase is already in progress, finish it or run 'git rebase --abort' first"
        )


class RewriteConflictError(ReworkError):
    pass


class EmptyCommitError(ReworkError):
    pass


class UnknownRewriteError(ReworkError):
    pass


class InstructionNotFoundError(ReworkError):
    def __init__(self, commit: str):
        super().__init__(f"{commit} is not in the rebase todo list")
        self.commit = commit


class CancelledError(ReworkError):
    def __init__(self, message: str = "cancelled by user"):
        super().__init__(message)


class StashRestoreError(ReworkError):
    def __init__(self, ref: str):
        super().__init__(
            f"could not restore your local changes, they are kept in {ref} "
            f"(run 'git stash pop' once the conflicts are resolved)"
        )
        self.ref = ref
