import pytest

from git_rework.__main__ import main
from git_rework.cli import parse_args, resolve_invocation, split_squash_target
from git_rework.constants import Action
from git_rework.errors import (
    AmbiguousCommitsError,
    MergeInHistoryError,
    NoParentError,
    NotARepositoryError,
    NotDescendantError,
    NotInHistoryError,
    UnknownReferenceError,
    UsageError,
)
from git_rework.git_utils import Git


def test_single_commit_is_edit():
    args = parse_args(["abc1234"])
    assert args.action == Action.Edit
    assert args.commits == ("abc1234",)
    assert not args.message


def test_drop():
    args = parse_args(["-d", "abc1234"])
    assert args.action == Action.Drop


def test_squash_without_target():
    args = parse_args(["-s", "abc1234"])
    assert args.action == Action.Squash
    assert args.squash_target is None
    assert args.commits == ("abc1234",)


@pytest.mark.parametrize("option", ["-s=def5678", "--squash=def5678"])
def test_squash_with_target(option):
    args = parse_args([option, "abc1234"])
    assert args.action == Action.Squash
    assert args.squash_target == "def5678"
    assert args.commits == ("abc1234",)


def test_two_commits_imply_squash():
    args = parse_args(["abc1234", "def5678"])
    assert args.action == Action.Squash
    assert args.commits == ("abc1234", "def5678")


def test_combined_short_flags():
    args = parse_args(["-ms", "abc1234"])
    assert args.action == Action.Squash
    assert args.message


def test_options():
    args = parse_args(["-C", "~/src/project", "-vv", "--no-color", "abc1234"])
    assert not args.repository.startswith("~")
    assert args.verbose == 2
    assert not args.color


@pytest.mark.parametrize("argv", [["help"], ["-h"], ["--help"], ["-h", "abc1234"]])
def test_help(argv):
    assert parse_args(argv).help


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["-d", "-m", "abc1234"],
        ["-d", "-s", "abc1234"],
        ["-d", "--squash=def5678", "abc1234"],
        ["-d", "abc1234", "def5678"],
        ["-s=def5678", "abc1234", "0123456"],
        ["abc1234", "def5678", "0123456"],
        ["--unknown", "abc1234"],
        ["-s=", "abc1234"],
    ],
)
def test_usage_errors(argv):
    with pytest.raises(UsageError):
        parse_args(argv)


def test_split_squash_target_stops_at_double_dash():
    assert split_squash_target(["-s=abc", "--", "-s=def"]) == (["-s", "--", "-s=def"], "abc")


@pytest.mark.parametrize(
    "argv",
    [
        ["--squash-into", "def5678", "abc1234"],
        ["--squash-into=def5678", "abc1234"],
        ["-s=def5678", "--squash=0123456", "abc1234"],
    ],
)
def test_squash_target_only_from_squash_option(argv):
    with pytest.raises(UsageError):
        parse_args(argv)


def test_main_help_exits_zero_without_repository(capsys, tmp_path):
    assert main(["help"]) == 0
    assert "usage: git-rework" in capsys.readouterr().out


def test_main_usage_error_exits_one(capsys):
    assert main(["-d", "-m", "abc1234"]) == 1
    assert "usage: git-rework" in capsys.readouterr().err


def test_not_a_repository(tmp_path):
    with pytest.raises(NotARepositoryError):
        Git(str(tmp_path))


def test_main_not_a_repository(tmp_path):
    assert main(["-C", str(tmp_path), "abc1234"]) == 1


class TestResolve:
    def test_two_commits_order_does_not_matter(self, linear_repo):
        git = Git(str(linear_repo.path))
        a, c = linear_repo.commits["A"], linear_repo.commits["C"]
        first = resolve_invocation(git, parse_args([a, c]))
        second = resolve_invocation(git, parse_args([c, a]))
        assert str(first.commit.id) == str(second.commit.id) == c
        assert str(first.target.id) == str(second.target.id) == a

    def test_two_commits_same_as_explicit_target(self, linear_repo):
        git = Git(str(linear_repo.path))
        a, c = linear_repo.commits["A"], linear_repo.commits["C"]
        positional = resolve_invocation(git, parse_args([a, c]))
        explicit = resolve_invocation(git, parse_args([f"-s={a}", c]))
        for invocation in (positional, explicit):
            assert invocation.action == Action.Squash
            assert str(invocation.commit.id) == c
            assert str(invocation.target.id) == a

    def test_default_target_is_parent(self, linear_repo):
        git = Git(str(linear_repo.path))
        invocation = resolve_invocation(git, parse_args(["-s", "HEAD"]))
        assert str(invocation.commit.id) == linear_repo.commits["C"]
        assert str(invocation.target.id) == linear_repo.commits["B"]

    def test_root_commit_has_no_parent(self, linear_repo):
        git = Git(str(linear_repo.path))
        with pytest.raises(NoParentError):
            resolve_invocation(git, parse_args(["-s", linear_repo.commits["A"]]))

    def test_target_must_be_ancestor(self, linear_repo):
        git = Git(str(linear_repo.path))
        a, c = linear_repo.commits["A"], linear_repo.commits["C"]
        with pytest.raises(NotDescendantError):
            resolve_invocation(git, parse_args([f"-s={c}", a]))

    def test_same_commit_twice(self, linear_repo):
        git = Git(str(linear_repo.path))
        with pytest.raises(UsageError):
            resolve_invocation(git, parse_args(["HEAD", linear_repo.commits["C"]]))

    def test_unknown_reference(self, linear_repo):
        git = Git(str(linear_repo.path))
        with pytest.raises(UnknownReferenceError):
            resolve_invocation(git, parse_args(["-d", "no-such-branch"]))

    def test_unrelated_commits(self, linear_repo):
        repo = linear_repo
        repo.git("checkout", "--quiet", "-b", "topic", repo.commits["A"])
        topic = repo.commit("D", d="d\n")
        repo.git("checkout", "--quiet", "main")
        git = Git(str(repo.path))
        with pytest.raises(AmbiguousCommitsError):
            resolve_invocation(git, parse_args([topic, repo.commits["C"]]))

    def test_commit_outside_current_branch(self, linear_repo):
        repo = linear_repo
        repo.git("checkout", "--quiet", "-b", "topic", repo.commits["A"])
        topic = repo.commit("D", d="d\n")
        repo.git("checkout", "--quiet", "main")
        git = Git(str(repo.path))
        with pytest.raises(NotInHistoryError):
            resolve_invocation(git, parse_args(["-d", topic]))

    def test_merge_in_rewritten_range(self, linear_repo):
        repo = linear_repo
        repo.git("checkout", "--quiet", "-b", "topic", repo.commits["A"])
        repo.commit("D", d="d\n")
        repo.git("checkout", "--quiet", "main")
        repo.git("merge", "--quiet", "--no-edit", "--no-ff", "topic")
        git = Git(str(repo.path))
        with pytest.raises(MergeInHistoryError):
            resolve_invocation(git, parse_args(["-d", repo.commits["B"]]))

    def test_merge_before_rewritten_range(self, linear_repo):
        repo = linear_repo
        repo.git("checkout", "--quiet", "-b", "topic", repo.commits["A"])
        repo.commit("D", d="d\n")
        repo.git("checkout", "--quiet", "main")
        repo.git("merge", "--quiet", "--no-edit", "--no-ff", "topic")
        e = repo.commit("E", e="e\n")
        git = Git(str(repo.path))
        invocation = resolve_invocation(git, parse_args(["-d", e]))
        assert invocation.action == Action.Drop
