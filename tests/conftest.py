import shutil
import subprocess
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parent.parent / "src"


def git(repo: Path, *args: str) -> str:
    return subprocess.check_output(["git", "-C", str(repo), *args], text=True).strip()


class Repo:
    """Throwaway repository with helpers to build a history."""

    def __init__(self, path: Path):
        self.path = path

    def git(self, *args: str) -> str:
        return git(self.path, *args)

    def write(self, name: str, content: str) -> None:
        (self.path / name).write_text(content)

    def read(self, name: str) -> str:
        return (self.path / name).read_text()

    def commit(self, message: str, **files: str) -> str:
        for name, content in files.items():
            self.write(name, content)
        self.git("add", "--all")
        self.git("commit", "--quiet", "-m", message)
        return self.git("rev-parse", "HEAD")

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")

    def subjects(self) -> list[str]:
        return self.git("log", "--format=%s").splitlines()

    def status(self) -> str:
        return self.git("status", "--porcelain")

    def rebase_in_progress(self) -> bool:
        gitdir = self.path / ".git"
        return (gitdir / "rebase-merge").exists() or (gitdir / "rebase-apply").exists()


@pytest.fixture
def temp_git_repo(tmp_path, monkeypatch):
    """Repository with a main branch and no commits."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_EDITOR", "true")
    monkeypatch.setenv("PYTHONPATH", str(SRC))
    for name in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(name, raising=False)

    path = tmp_path / "repo"
    path.mkdir()
    git(path, "init", "--quiet", "-b", "main")
    git(path, "config", "user.name", "Test User")
    git(path, "config", "user.email", "test@example.com")
    git(path, "config", "commit.gpgsign", "false")
    return Repo(path)


@pytest.fixture
def linear_repo(temp_git_repo):
    """Three commits touching one file each: A, B, C."""
    repo = temp_git_repo
    repo.commits = {
        "A": repo.commit("A", a="a\n"),
        "B": repo.commit("B", b="b\n"),
        "C": repo.commit("C", c="c\n"),
    }
    return repo
