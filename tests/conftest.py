"""Shared test fixtures: pygit2 repositories built in a temp dir."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pygit2
import pytest
from pygit2.enums import FileMode

from gitcui.repository import Repository

README_TEXT = "# project\n\nA small project used by the gitcui tests.\n"


def write_tree(repo: pygit2.Repository, files: dict[str, str]) -> pygit2.Oid:
    """Write nested trees for a `{path: content}` mapping and return the root id."""
    builder = repo.TreeBuilder()
    nested: dict[str, dict[str, str]] = {}
    for path, content in files.items():
        head, sep, rest = path.partition("/")
        if sep:
            nested.setdefault(head, {})[rest] = content
        else:
            builder.insert(head, repo.create_blob(content.encode()), FileMode.BLOB)
    for name, sub in nested.items():
        builder.insert(name, write_tree(repo, sub), FileMode.TREE)
    return builder.write()


@dataclass
class RepoBuilder:
    """Creates commits with strictly increasing committer times."""

    repo: pygit2.Repository
    path: Path
    clock: int = 1_700_000_000

    def commit(
        self,
        files: dict[str, str],
        message: str,
        parents: Optional[list[pygit2.Oid]] = None,
        ref: Optional[str] = "HEAD",
    ) -> pygit2.Oid:
        tree = write_tree(self.repo, files)
        self.clock += 60
        sig = pygit2.Signature("Test", "test@test.com", self.clock, 0)
        if parents is None:
            parents = [] if self.repo.head_is_unborn else [self.repo.head.target]
        return self.repo.create_commit(ref, sig, sig, message, tree, parents)

    def open(self) -> Repository:
        return Repository.open(str(self.path))


@pytest.fixture
def git_repo(tmp_path: Path) -> RepoBuilder:
    """An empty bare repository."""
    path = tmp_path / "repo.git"
    return RepoBuilder(pygit2.init_repository(str(path), bare=True), path)


@pytest.fixture
def history_repo(git_repo: RepoBuilder) -> RepoBuilder:
    """Three linear commits touching `dir/`, `docs/` and a renamed file."""
    git_repo.commit({"dir/a.txt": "alpha\n", "README.md": README_TEXT}, "initial import")
    git_repo.commit(
        {"dir/a.txt": "alpha\n", "dir/b.txt": "beta\n", "README.md": README_TEXT},
        "add b",
    )
    git_repo.commit(
        {
            "dir/a.txt": "alpha\nmore alpha\n",
            "dir/b.txt": "beta\n",
            "docs/README.md": README_TEXT,
        },
        "move readme into docs",
    )
    return git_repo
