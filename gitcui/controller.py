"""
Selection and mode controller.

Owns the UI state and keeps the stat, tree and diff panels in step with it.
Every change goes through one of the transitions below, each of which runs
to completion before the next input event is handled.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Sequence

from gitcui.config import MAX_OPEN_DEPTH
from gitcui.errors import EmptyHistoryError
from gitcui.merge import build_augmented_tree
from gitcui.models import (
    AugmentedNode,
    ChangeRecord,
    CommitInfo,
    DiffMode,
    FilePatch,
    FocusTarget,
    Snapshot,
)

logger = logging.getLogger(__name__)

FOCUS_ORDER = (FocusTarget.LIST, FocusTarget.TREE, FocusTarget.DIFF)


class Panel(Protocol):
    def accept(self, model: Any) -> None: ...


class RepositorySource(Protocol):
    """The part of `gitcui.repository.Repository` the controller uses."""

    def parent(self, commit: CommitInfo, index: int = 0) -> Optional[CommitInfo]: ...

    def snapshot(self, commit: CommitInfo) -> Snapshot: ...

    def changes(self, reference: Optional[CommitInfo], commit: CommitInfo) -> list[ChangeRecord]: ...

    def patches(self, reference: Optional[CommitInfo], commit: CommitInfo) -> list[FilePatch]: ...


@dataclass
class UIState:
    head_commit: CommitInfo
    current_commit: Optional[CommitInfo] = None
    diff_mode: DiffMode = DiffMode.SINGLE
    focused_panel: FocusTarget = FocusTarget.LIST
    selected_path: Optional[str] = None


class SelectionController:
    """Applies selection, diff-mode and focus changes to the panels.

    `focus` is called with the new `FocusTarget` whenever focus moves; the
    application uses it to focus the matching widget.
    """

    def __init__(
        self,
        repository: RepositorySource,
        commits: Sequence[CommitInfo],
        *,
        stat_panel: Panel,
        tree_panel: Panel,
        diff_panel: Panel,
        focus: Optional[Callable[[FocusTarget], None]] = None,
        max_open_depth: int = MAX_OPEN_DEPTH,
    ) -> None:
        if not commits:
            raise EmptyHistoryError(getattr(repository, "source", "repository"))
        self.repository = repository
        self.commits = list(commits)
        self.stat_panel = stat_panel
        self.tree_panel = tree_panel
        self.diff_panel = diff_panel
        self._focus = focus
        self.max_open_depth = max_open_depth
        self._state = UIState(head_commit=self.commits[0])
        self._tree: Optional[AugmentedNode] = None
        self._reference: Optional[CommitInfo] = None
        self._patches: list[FilePatch] = []

    @property
    def state(self) -> UIState:
        return self._state

    @property
    def tree(self) -> Optional[AugmentedNode]:
        """The most recently built augmented tree."""
        return self._tree

    @property
    def reference(self) -> Optional[CommitInfo]:
        return self._reference

    @property
    def patches(self) -> list[FilePatch]:
        return list(self._patches)

    def start(self) -> None:
        """Show the head commit."""
        self.select_commit(self._state.head_commit)

    def reference_for(self, commit: CommitInfo) -> Optional[CommitInfo]:
        """The commit `commit` is compared with in the current mode."""
        if self._state.diff_mode is DiffMode.ACCUMULATED:
            return self._state.head_commit
        return self.repository.parent(commit, 0)

    def select_commit(self, commit: CommitInfo) -> None:
        """Show `commit` compared with its reference; re-selecting it does nothing."""
        if commit == self._state.current_commit:
            return
        logger.debug(f"select_commit: {commit.short_id} {commit.summary!r}")
        self._state.current_commit = commit
        self.stat_panel.accept(commit)
        self._refresh()

    def toggle_mode(self) -> None:
        """Switch between the parent and head comparisons and redraw."""
        if self._state.diff_mode is DiffMode.SINGLE:
            self._state.diff_mode = DiffMode.ACCUMULATED
        else:
            self._state.diff_mode = DiffMode.SINGLE
        logger.debug(f"toggle_mode: now {self._state.diff_mode.value}")
        if self._state.current_commit is not None:
            self._refresh()

    def move_focus(self, forward: bool = True) -> FocusTarget:
        """Move focus to the next (or previous) panel, wrapping around."""
        idx = FOCUS_ORDER.index(self._state.focused_panel)
        step = 1 if forward else -1
        target = FOCUS_ORDER[(idx + step) % len(FOCUS_ORDER)]
        self._state.focused_panel = target
        if self._focus is not None:
            self._focus(target)
        return target

    def select_file(self, path: str) -> Optional[FilePatch]:
        """Show the patch of `path` from the current comparison, if it has one."""
        patch = next((p for p in self._patches if path in (p.to_path, p.from_path)), None)
        self._state.selected_path = patch.path if patch is not None else None
        self.diff_panel.accept(patch)
        return patch

    def _refresh(self) -> None:
        commit = self._state.current_commit
        reference = self.reference_for(commit)
        self._reference = reference

        current_snapshot = self.repository.snapshot(commit)
        reference_snapshot = self.repository.snapshot(reference) if reference is not None else None
        changes = self.repository.changes(reference, commit)
        self._tree = build_augmented_tree(
            current_snapshot, reference_snapshot, changes, self.max_open_depth
        )
        self.tree_panel.accept(self._tree)

        self._patches = self.repository.patches(reference, commit)
        patch = self._patches[0] if self._patches else None
        self._state.selected_path = patch.path if patch is not None else None
        self.diff_panel.accept(patch)
