"""
Textual widgets for the commit list, tree, stat and diff panels.

The tree, stat and diff panels are passive: the controller hands them a new
model through `accept()` and they redraw. The commit list and the tree
report user navigation back to the application as messages.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import DataTable, Label, ListItem, ListView, Static, Tree
from textual.widgets.tree import TreeNode

from gitcui.config import EXPAND_TAB
from gitcui.models import (
    AugmentedNode,
    ChangeKind,
    ChunkKind,
    CommitInfo,
    FilePatch,
    navigable_commits,
)

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    ChangeKind.UNCHANGED: "",
    ChangeKind.INSERT: "green",
    ChangeKind.DELETE: "red",
    ChangeKind.MODIFY: "yellow",
}

LINE_PREFIXES = {
    ChunkKind.EQUAL: (" ", ""),
    ChunkKind.ADD: ("+", "green"),
    ChunkKind.DELETE: ("-", "red"),
}


class CommitListPanel(ListView):
    """Recent commits, newest first. Merge commits are never listed."""

    class SelectionChanged(Message):
        """Posted when the highlighted commit changes."""

        def __init__(self, commit: CommitInfo) -> None:
            self.commit = commit
            super().__init__()

    def __init__(self, commits: Iterable[CommitInfo], **kwargs) -> None:
        self.commits = navigable_commits(commits)
        super().__init__(*(self._row(c) for c in self.commits), **kwargs)

    @staticmethod
    def _row(commit: CommitInfo) -> ListItem:
        text = Text()
        text.append(commit.short_id, style="yellow")
        text.append("  ")
        text.append(commit.summary)
        return ListItem(Label(text))

    def commit_at(self, index: Optional[int]) -> Optional[CommitInfo]:
        if not self.commits or index is None:
            return None
        index = max(0, min(index, len(self.commits) - 1))
        return self.commits[index]

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        if event.list_view is not self:
            return
        event.stop()
        commit = self.commit_at(self.index)
        logger.debug(f"CommitListPanel.on_list_view_highlighted: index={self.index}")
        if commit is not None:
            self.post_message(self.SelectionChanged(commit))


class TreePanel(Tree[AugmentedNode]):
    """The selected commit's tree, colored by change status."""

    class FileSelected(Message):
        """Posted when the user picks a file node."""

        def __init__(self, path: str) -> None:
            self.path = path
            super().__init__()

    def __init__(self, **kwargs) -> None:
        super().__init__(".", **kwargs)

    @staticmethod
    def _label(node: AugmentedNode) -> Text:
        return Text(node.name, style=STATUS_STYLES[node.status])

    def accept(self, root: AugmentedNode) -> None:
        """Replace the displayed tree with `root`."""
        self.reset(self._label(root), data=root)
        self._populate(self.root, root)
        self.root.expand()

    def _populate(self, target: TreeNode[AugmentedNode], node: AugmentedNode) -> None:
        for child in node.children:
            if child.is_dir:
                branch = target.add(self._label(child), data=child, expand=child.expanded)
                self._populate(branch, child)
            else:
                target.add_leaf(self._label(child), data=child)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        node = event.node.data
        if node is None or node.is_dir:
            return
        event.stop()
        self.post_message(self.FileSelected(node.path))


class StatPanel(DataTable):
    """Added/removed line counts per file of the selected commit."""

    COLUMNS = ("file", "added", "removed")
    can_focus = False

    def __init__(self, repository, **kwargs) -> None:
        super().__init__(show_cursor=False, **kwargs)
        self.repository = repository
        self.commit: Optional[CommitInfo] = None

    def accept(self, commit: CommitInfo) -> None:
        """Show the line counts of `commit`."""
        self.clear(columns=True)
        self.add_columns(*self.COLUMNS)
        for stat in self.repository.stats(commit):
            self.add_row(
                stat.path,
                Text(str(stat.additions), justify="right"),
                Text(str(stat.deletions), justify="right"),
            )
        self.commit = commit


class DiffPanel(ListView):
    """Line diff of a single file."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.patch: Optional[FilePatch] = None

    def accept(self, patch: Optional[FilePatch]) -> None:
        """Show `patch`; None leaves the panel empty."""
        self.clear()
        self.patch = patch
        if patch is None:
            return
        self.append(ListItem(Label(Text(patch.path, style="bold"))))
        if patch.is_binary:
            self.append(ListItem(Label(Text("Binary file", style="dim italic"))))
            return
        for chunk in patch.chunks:
            if chunk.kind is ChunkKind.GAP:
                self.append(ListItem(Label(Text(chunk.text.rstrip("\n"), style="cyan dim"))))
                continue
            prefix, style = LINE_PREFIXES[chunk.kind]
            for line in chunk.lines():
                line = line.replace("\t", EXPAND_TAB)
                self.append(ListItem(Label(Text(prefix + line, style=style))))


HELP_TEXT = """\
gitcui
======

Panels
------
Commits (top left): recent commits, newest first. Merge commits are hidden.
Content (top right): tree of the selected commit.
    green  added      red  deleted      yellow  modified
File Diff (bottom left): changes of one file. Pick a file in the tree to show it.
Commit stat (bottom right): added and removed lines per file.

Keys
----
tab / shift+tab   move focus between commits, tree and diff
s                 toggle diff mode: against the parent, or against the newest commit
up / down         move inside the focused panel
enter             expand a directory or show the diff of a file
?                 this help
q                 quit

Press any key to return.
"""


class HelpScreen(ModalScreen):
    """Key reference; closes on any key."""

    def compose(self) -> ComposeResult:
        yield Static(Text(HELP_TEXT), id="help-text")

    def on_key(self, event: events.Key) -> None:
        event.stop()
        self.app.pop_screen()
