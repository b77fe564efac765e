"""
Value types shared by the repository layer, the merge engine and the panels.

Everything here is immutable: commits, snapshots, change records and the
augmented tree are built once and replaced, never patched in place.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Mapping, Optional, Protocol

ZERO_HASH = "0" * 40


class EntryKind(str, Enum):
    DIR = "dir"
    FILE = "file"


class ChangeKind(str, Enum):
    UNCHANGED = "unchanged"
    INSERT = "insert"
    DELETE = "delete"
    MODIFY = "modify"


class ChunkKind(str, Enum):
    EQUAL = "equal"
    ADD = "add"
    DELETE = "delete"
    GAP = "gap"  # lines skipped between two hunks


class DiffMode(str, Enum):
    """What the selected commit is compared against."""

    SINGLE = "single"  # its first parent
    ACCUMULATED = "accumulated"  # the head of the loaded history


class FocusTarget(str, Enum):
    LIST = "list"
    TREE = "tree"
    DIFF = "diff"


@dataclass(frozen=True)
class CommitInfo:
    """A commit as loaded from the log."""

    id: str
    message: str
    parent_ids: tuple[str, ...] = ()
    author: str = ""
    committed_at: int = 0

    @property
    def short_id(self) -> str:
        return self.id[:10]

    @property
    def summary(self) -> str:
        lines = self.message.strip().splitlines()
        return lines[0] if lines else ""

    @property
    def is_merge(self) -> bool:
        return len(self.parent_ids) > 1


def navigable_commits(commits: Iterable[CommitInfo]) -> list[CommitInfo]:
    """Return the commits that may be listed and selected (merges dropped)."""
    return [c for c in commits if not c.is_merge]


@dataclass(frozen=True)
class SnapshotEntry:
    name: str
    kind: EntryKind
    hash: str

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIR


class Snapshot(Protocol):
    """Read-only view of one directory of a commit's tree."""

    @property
    def hash(self) -> str: ...

    def entries(self) -> Iterable[SnapshotEntry]: ...

    def lookup(self, path: str) -> Optional["Snapshot"]: ...


@dataclass(frozen=True)
class StaticSnapshot:
    """In-memory snapshot built from a `{path: content_hash}` mapping.

    Directory hashes are derived from their sorted entries so two snapshots
    with the same content compare equal and hash alike.
    """

    hash: str
    children: Mapping[str, "StaticSnapshot"] = field(default_factory=dict)
    files: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_files(cls, files: Mapping[str, str]) -> "StaticSnapshot":
        nested: dict[str, dict[str, str]] = {}
        local: dict[str, str] = {}
        for path, content_hash in files.items():
            head, sep, rest = path.strip("/").partition("/")
            if sep:
                nested.setdefault(head, {})[rest] = content_hash
            else:
                local[head] = content_hash
        overlap = set(nested) & set(local)
        if overlap:
            raise ValueError(f"names used for both a file and a directory: {sorted(overlap)}")
        children = {name: cls.from_files(sub) for name, sub in nested.items()}
        digest = hashlib.sha1()
        for name in sorted(children):
            digest.update(f"tree {name} {children[name].hash}\n".encode())
        for name in sorted(local):
            digest.update(f"blob {name} {local[name]}\n".encode())
        return cls(hash=digest.hexdigest(), children=children, files=local)

    def entries(self) -> Iterator[SnapshotEntry]:
        for name, child in self.children.items():
            yield SnapshotEntry(name, EntryKind.DIR, child.hash)
        for name, content_hash in self.files.items():
            yield SnapshotEntry(name, EntryKind.FILE, content_hash)

    def lookup(self, path: str) -> Optional["StaticSnapshot"]:
        node: Optional[StaticSnapshot] = self
        for part in path.split("/"):
            if part in ("", "."):
                continue
            if node is None:
                return None
            node = node.children.get(part)
        return node


@dataclass(frozen=True)
class ChangeRecord:
    """One entry of a change set between a reference tree and a commit tree."""

    kind: ChangeKind
    from_path: Optional[str] = None
    to_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is ChangeKind.INSERT:
            ok = self.from_path is None and self.to_path is not None
        elif self.kind is ChangeKind.DELETE:
            ok = self.from_path is not None and self.to_path is None
        elif self.kind is ChangeKind.MODIFY:
            ok = self.from_path is not None and self.to_path is not None
        else:
            ok = False
        if not ok:
            raise ValueError(
                f"invalid {self.kind.value} record: from={self.from_path!r} to={self.to_path!r}"
            )

    @classmethod
    def insert(cls, path: str) -> "ChangeRecord":
        return cls(ChangeKind.INSERT, to_path=path)

    @classmethod
    def delete(cls, path: str) -> "ChangeRecord":
        return cls(ChangeKind.DELETE, from_path=path)

    @classmethod
    def modify(cls, from_path: str, to_path: Optional[str] = None) -> "ChangeRecord":
        return cls(ChangeKind.MODIFY, from_path=from_path, to_path=to_path or from_path)

    @property
    def is_rename(self) -> bool:
        return self.kind is ChangeKind.MODIFY and self.from_path != self.to_path

    def contributions(self) -> list[tuple[str, ChangeKind]]:
        """Per-path statuses this record puts into the tree.

        A rename never becomes a moved node: it is a deletion at the old
        path plus an insertion at the new one.
        """
        if self.kind is ChangeKind.INSERT:
            return [(self.to_path, ChangeKind.INSERT)]
        if self.kind is ChangeKind.DELETE:
            return [(self.from_path, ChangeKind.DELETE)]
        if self.is_rename:
            return [(self.from_path, ChangeKind.DELETE), (self.to_path, ChangeKind.INSERT)]
        return [(self.from_path, ChangeKind.MODIFY)]


@dataclass(frozen=True)
class AugmentedNode:
    """A node of the merged tree shown by the tree panel."""

    name: str
    path: str
    kind: EntryKind
    content_hash: str
    status: ChangeKind = ChangeKind.UNCHANGED
    children: tuple["AugmentedNode", ...] = ()
    expanded: bool = False

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIR

    def walk(self) -> Iterator["AugmentedNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, path: str) -> Optional["AugmentedNode"]:
        node: Optional[AugmentedNode] = self
        for part in path.split("/"):
            if part in ("", "."):
                continue
            if node is None:
                return None
            node = next((c for c in node.children if c.name == part), None)
        return node

    def changed_files(self) -> list["AugmentedNode"]:
        return [
            n for n in self.walk()
            if not n.is_dir and n.status is not ChangeKind.UNCHANGED
        ]


@dataclass(frozen=True)
class FileStat:
    path: str
    additions: int
    deletions: int


@dataclass(frozen=True)
class Chunk:
    """A run of diff lines of one kind; a GAP chunk holds the next hunk header."""

    kind: ChunkKind
    text: str

    def lines(self) -> list[str]:
        """The lines of `text`, split on newlines only."""
        lines = self.text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        return lines


@dataclass(frozen=True)
class FilePatch:
    """Line-level changes of a single file."""

    from_path: Optional[str]
    to_path: Optional[str]
    chunks: tuple[Chunk, ...] = ()
    is_binary: bool = False

    @property
    def path(self) -> str:
        return self.to_path or self.from_path or ""

    def _count(self, kind: ChunkKind) -> int:
        return sum(len(c.lines()) for c in self.chunks if c.kind is kind)

    @property
    def additions(self) -> int:
        return self._count(ChunkKind.ADD)

    @property
    def deletions(self) -> int:
        return self._count(ChunkKind.DELETE)
