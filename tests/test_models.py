"""Tests for the value types."""

import pytest

from gitcui.models import (
    ChangeKind,
    ChangeRecord,
    Chunk,
    ChunkKind,
    CommitInfo,
    EntryKind,
    FilePatch,
    StaticSnapshot,
    navigable_commits,
)


class TestChangeRecord:
    @pytest.mark.parametrize(
        "kind, from_path, to_path",
        [
            (ChangeKind.INSERT, "a", "a"),
            (ChangeKind.INSERT, None, None),
            (ChangeKind.DELETE, None, "a"),
            (ChangeKind.DELETE, "a", "a"),
            (ChangeKind.MODIFY, "a", None),
            (ChangeKind.UNCHANGED, "a", "a"),
        ],
    )
    def test_invalid_shapes_rejected(self, kind, from_path, to_path):
        with pytest.raises(ValueError):
            ChangeRecord(kind, from_path, to_path)

    def test_constructors(self):
        assert ChangeRecord.insert("x") == ChangeRecord(ChangeKind.INSERT, None, "x")
        assert ChangeRecord.delete("x") == ChangeRecord(ChangeKind.DELETE, "x", None)
        assert ChangeRecord.modify("x") == ChangeRecord(ChangeKind.MODIFY, "x", "x")

    def test_contributions(self):
        assert ChangeRecord.insert("n").contributions() == [("n", ChangeKind.INSERT)]
        assert ChangeRecord.delete("o").contributions() == [("o", ChangeKind.DELETE)]
        assert ChangeRecord.modify("m").contributions() == [("m", ChangeKind.MODIFY)]
        rename = ChangeRecord.modify("a/x.txt", "b/x.txt")
        assert rename.is_rename
        assert rename.contributions() == [
            ("a/x.txt", ChangeKind.DELETE),
            ("b/x.txt", ChangeKind.INSERT),
        ]


class TestCommitInfo:
    def test_derived_fields(self):
        commit = CommitInfo("0123456789abcdef", "Fix parser\n\nlong body\n", ("p1",))
        assert commit.short_id == "0123456789"
        assert commit.summary == "Fix parser"
        assert not commit.is_merge

    def test_merge_commits_are_not_navigable(self):
        root = CommitInfo("r" * 40, "root")
        child = CommitInfo("c" * 40, "child", (root.id,))
        side = CommitInfo("s" * 40, "side", (root.id,))
        merge = CommitInfo("m" * 40, "merge", (child.id, side.id))
        assert merge.is_merge
        assert navigable_commits([merge, child, side, root]) == [child, side, root]


class TestStaticSnapshot:
    def test_lookup(self):
        snap = StaticSnapshot.from_files({"a/b/c.txt": "1", "d.txt": "2"})
        assert snap.lookup("a") is snap.children["a"]
        assert snap.lookup("a/b").files == {"c.txt": "1"}
        assert snap.lookup(".") is snap
        assert snap.lookup("missing") is None
        assert snap.lookup("d.txt") is None
        assert snap.lookup("a/missing/deeper") is None

    def test_entries(self):
        snap = StaticSnapshot.from_files({"a/b.txt": "1", "d.txt": "2"})
        entries = {e.name: e for e in snap.entries()}
        assert entries["a"].kind is EntryKind.DIR
        assert entries["a"].hash == snap.lookup("a").hash
        assert entries["d.txt"].kind is EntryKind.FILE
        assert entries["d.txt"].hash == "2"

    def test_hash_depends_on_content_only(self):
        one = StaticSnapshot.from_files({"a/b.txt": "1", "c.txt": "2"})
        two = StaticSnapshot.from_files({"c.txt": "2", "a/b.txt": "1"})
        three = StaticSnapshot.from_files({"c.txt": "3", "a/b.txt": "1"})
        assert one.hash == two.hash
        assert one.hash != three.hash

    def test_file_and_directory_with_same_name(self):
        with pytest.raises(ValueError):
            StaticSnapshot.from_files({"a": "1", "a/b": "2"})


class TestFilePatch:
    def test_counts_and_path(self):
        patch = FilePatch(
            "old.txt",
            "new.txt",
            (
                Chunk(ChunkKind.EQUAL, "same\n"),
                Chunk(ChunkKind.DELETE, "gone\n"),
                Chunk(ChunkKind.ADD, "one\ntwo\n"),
            ),
        )
        assert patch.path == "new.txt"
        assert patch.additions == 2
        assert patch.deletions == 1

    def test_lines_split_on_newline_only(self):
        chunk = Chunk(ChunkKind.ADD, "a\x0cb\nc d\n")
        assert chunk.lines() == ["a\x0cb", "c d"]
        assert FilePatch(None, "f.c", (chunk,)).additions == 2

    def test_gap_is_not_counted(self):
        patch = FilePatch(
            "f.txt",
            "f.txt",
            (
                Chunk(ChunkKind.ADD, "one\n"),
                Chunk(ChunkKind.GAP, "@@ -30,6 +30,6 @@\n"),
                Chunk(ChunkKind.DELETE, "two\n"),
            ),
        )
        assert (patch.additions, patch.deletions) == (1, 1)

    def test_deleted_file_path(self):
        assert FilePatch("old.txt", None).path == "old.txt"
