"""
pygit2-backed access to the repository being browsed.

The rest of gitcui only sees the value types from `gitcui.models`: commits
are `CommitInfo`, trees are `TreeSnapshot`, and diffs come back as
`ChangeRecord`, `FileStat` and `FilePatch` lists.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from typing import Iterator, Optional

import pygit2
from pygit2.enums import DeltaStatus, DiffFind, SortMode

from gitcui.config import DIFF_CONTEXT_LINES, MAX_COMMITS
from gitcui.errors import EmptyHistoryError, RepositoryAccessError
from gitcui.models import (
    ChangeRecord,
    Chunk,
    ChunkKind,
    CommitInfo,
    EntryKind,
    FilePatch,
    FileStat,
    SnapshotEntry,
)

logger = logging.getLogger(__name__)

_ACCESS_ERRORS = (pygit2.GitError, KeyError, ValueError, OSError)

_CHUNK_KINDS = {
    " ": ChunkKind.EQUAL,
    "+": ChunkKind.ADD,
    "-": ChunkKind.DELETE,
}


class TreeSnapshot:
    """Snapshot over a `pygit2.Tree`."""

    def __init__(self, tree: pygit2.Tree) -> None:
        self._tree = tree

    @property
    def hash(self) -> str:
        return str(self._tree.id)

    def entries(self) -> Iterator[SnapshotEntry]:
        for obj in self._tree:
            kind = EntryKind.DIR if obj.type_str == "tree" else EntryKind.FILE
            yield SnapshotEntry(obj.name, kind, str(obj.id))

    def lookup(self, path: str) -> Optional["TreeSnapshot"]:
        path = path.strip("/")
        if not path or path == ".":
            return self
        try:
            obj = self._tree[path]
        except KeyError:
            return None
        if not isinstance(obj, pygit2.Tree):
            return None
        return TreeSnapshot(obj)

    def __repr__(self) -> str:
        return f"TreeSnapshot({self.hash[:10]})"


def _commit_info(commit: pygit2.Commit) -> CommitInfo:
    return CommitInfo(
        id=str(commit.id),
        message=commit.message,
        parent_ids=tuple(str(p) for p in commit.parent_ids),
        author=commit.author.name,
        committed_at=commit.commit_time,
    )


def _change_record(delta: pygit2.DiffDelta) -> Optional[ChangeRecord]:
    status = delta.status
    old_path = delta.old_file.path
    new_path = delta.new_file.path
    if status in (DeltaStatus.ADDED, DeltaStatus.COPIED):
        return ChangeRecord.insert(new_path)
    if status == DeltaStatus.DELETED:
        return ChangeRecord.delete(old_path)
    if status in (DeltaStatus.MODIFIED, DeltaStatus.RENAMED, DeltaStatus.TYPECHANGE):
        return ChangeRecord.modify(old_path, new_path)
    logger.debug(f"_change_record: skipping delta {status!r} for {new_path}")
    return None


def _file_patch(patch: pygit2.Patch) -> FilePatch:
    delta = patch.delta
    old_path = None if delta.status == DeltaStatus.ADDED else delta.old_file.path
    new_path = None if delta.status == DeltaStatus.DELETED else delta.new_file.path
    chunks: list[Chunk] = []
    kind: Optional[ChunkKind] = None
    lines: list[str] = []
    for number, hunk in enumerate(patch.hunks):
        if number:
            if lines:
                chunks.append(Chunk(kind, "".join(lines)))
                lines = []
            chunks.append(Chunk(ChunkKind.GAP, hunk.header.rstrip("\n") + "\n"))
        for line in hunk.lines:
            line_kind = _CHUNK_KINDS.get(line.origin)
            if line_kind is None:
                # "no newline at end of file" markers
                continue
            if line_kind is not kind and lines:
                chunks.append(Chunk(kind, "".join(lines)))
                lines = []
            kind = line_kind
            lines.append(line.content if line.content.endswith("\n") else line.content + "\n")
    if lines:
        chunks.append(Chunk(kind, "".join(lines)))
    return FilePatch(old_path, new_path, tuple(chunks), is_binary=delta.is_binary)


class Repository:
    """A git repository opened (or cloned) for browsing."""

    def __init__(self, repo: pygit2.Repository, source: str, tmpdir: Optional[str] = None) -> None:
        self._repo = repo
        self.source = source
        self._tmpdir = tmpdir
        self._stats_cache: dict[str, list[FileStat]] = {}

    @classmethod
    def open(cls, path: str) -> "Repository":
        """Open the repository containing `path`."""
        logger.info(f"Open {path}")
        try:
            gitdir = pygit2.discover_repository(os.path.abspath(path))
            if not gitdir:
                raise RepositoryAccessError(path, "not a git repository")
            repo = pygit2.Repository(gitdir)
        except _ACCESS_ERRORS as exc:
            raise RepositoryAccessError(path, str(exc)) from exc
        return cls(repo, path)

    @classmethod
    def clone(cls, url: str) -> "Repository":
        """Clone `url` into a temporary directory removed by `close`."""
        logger.info(f"Clone {url}")
        tmpdir = tempfile.mkdtemp(prefix="gitcui-")
        try:
            repo = pygit2.clone_repository(url, os.path.join(tmpdir, "repo.git"), bare=True)
        except _ACCESS_ERRORS as exc:
            shutil.rmtree(tmpdir, ignore_errors=True)
            raise RepositoryAccessError(url, str(exc)) from exc
        return cls(repo, url, tmpdir=tmpdir)

    def close(self) -> None:
        """Remove the clone directory, if any."""
        if self._tmpdir:
            shutil.rmtree(self._tmpdir, ignore_errors=True)
            self._tmpdir = None

    def __enter__(self) -> "Repository":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def log(self, limit: int = MAX_COMMITS) -> list[CommitInfo]:
        """Commits reachable from HEAD, newest committer time first."""
        if self._repo.head_is_unborn:
            return []
        commits: list[CommitInfo] = []
        for commit in self._repo.walk(self._repo.head.target, SortMode.TIME):
            if len(commits) >= limit:
                break
            commits.append(_commit_info(commit))
        return commits

    def load_history(self, limit: int = MAX_COMMITS) -> list[CommitInfo]:
        """Like `log`, but an empty history is an error."""
        logger.info("Loading commit logs")
        try:
            commits = self.log(limit)
        except _ACCESS_ERRORS as exc:
            raise RepositoryAccessError(self.source, str(exc)) from exc
        if not commits:
            raise EmptyHistoryError(self.source)
        logger.info(f"Loaded {len(commits)} commit(s)")
        return commits

    def _commit(self, commit: CommitInfo) -> pygit2.Commit:
        return self._repo[commit.id]

    def _tree(self, commit: Optional[CommitInfo]) -> Optional[pygit2.Tree]:
        if commit is None:
            return None
        return self._commit(commit).tree

    def parent(self, commit: CommitInfo, index: int = 0) -> Optional[CommitInfo]:
        """The `index`-th parent of `commit`, or None."""
        if index >= len(commit.parent_ids):
            return None
        return _commit_info(self._repo[commit.parent_ids[index]])

    def snapshot(self, commit: CommitInfo) -> TreeSnapshot:
        """The root tree of `commit`."""
        return TreeSnapshot(self._tree(commit))

    def _diff(self, reference: Optional[CommitInfo], commit: CommitInfo) -> pygit2.Diff:
        tree = self._tree(commit)
        ref_tree = self._tree(reference)
        if ref_tree is None:
            # everything is new relative to the empty tree
            diff = tree.diff_to_tree(context_lines=DIFF_CONTEXT_LINES, swap=True)
        else:
            diff = self._repo.diff(ref_tree, tree, context_lines=DIFF_CONTEXT_LINES)
        diff.find_similar(flags=DiffFind.FIND_RENAMES)
        return diff

    def changes(self, reference: Optional[CommitInfo], commit: CommitInfo) -> list[ChangeRecord]:
        """Change set turning `reference` (or the empty tree) into `commit`."""
        records = []
        for delta in self._diff(reference, commit).deltas:
            record = _change_record(delta)
            if record is not None:
                records.append(record)
        return records

    def patches(self, reference: Optional[CommitInfo], commit: CommitInfo) -> list[FilePatch]:
        """Line diffs from `reference` (or the empty tree) to `commit`, one per file."""
        return [_file_patch(p) for p in self._diff(reference, commit) if p is not None]

    def stats(self, commit: CommitInfo) -> list[FileStat]:
        """Per-file line counts of `commit` against its first parent."""
        cached = self._stats_cache.get(commit.id)
        if cached is not None:
            return cached
        stats = []
        for patch in self._diff(self.parent(commit), commit):
            if patch is None:
                continue
            _context, additions, deletions = patch.line_stats
            path = patch.delta.new_file.path or patch.delta.old_file.path
            stats.append(FileStat(path, additions, deletions))
        self._stats_cache[commit.id] = stats
        return stats
