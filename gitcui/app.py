"""
The gitcui Textual application.

Lays out the four panels and routes key bindings and panel messages into
the `SelectionController`.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Label

from gitcui.config import MAX_OPEN_DEPTH
from gitcui.controller import SelectionController
from gitcui.models import CommitInfo, DiffMode, FocusTarget
from gitcui.panels import CommitListPanel, DiffPanel, HelpScreen, StatPanel, TreePanel
from gitcui.repository import Repository

logger = logging.getLogger(__name__)

PANEL_IDS = {
    FocusTarget.LIST: "#commits",
    FocusTarget.TREE: "#tree",
    FocusTarget.DIFF: "#diff",
}

MODE_TITLES = {
    DiffMode.SINGLE: "Current Hash Content (vs parent)",
    DiffMode.ACCUMULATED: "Current Hash Content (vs head)",
}


class GitCuiApp(App):
    """Commit list and tree on top, file diff and commit stat below."""

    TITLE = "gitcui"
    CSS = """
App {
    overflow: hidden;
}
#title {
    height: 1;
    padding: 0 1;
    width: 100%;
    text-align: center;
}
#top, #bottom {
    height: 1fr;
}
#commits, #tree, #diff, #stat {
    border: heavy #555555;
    scrollbar-size-vertical: 1;
}
#commits:focus, #tree:focus, #diff:focus {
    border: solid white;
}
#diff-column {
    width: 2fr;
}
#stat-column {
    width: 1fr;
}
#footer {
    height: 1;
    padding: 0 1;
}
"""

    BINDINGS = [
        Binding("tab", "next_panel", "Next panel", priority=True),
        Binding("shift+tab", "previous_panel", "Previous panel", priority=True),
        Binding("s", "toggle_mode", "Diff mode"),
        Binding("question_mark", "help", "Help"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        repository: Repository,
        commits: Sequence[CommitInfo],
        max_open_depth: int = MAX_OPEN_DEPTH,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.repository = repository
        self.commits = list(commits)
        self.max_open_depth = max_open_depth
        # built on mount, once the panels exist
        self.controller: Optional[SelectionController] = None

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            yield Label(Text(self.TITLE, style="bold"), id="title")
            with Horizontal(id="top"):
                with Vertical(id="list-column"):
                    yield Label(Text("Commits", style="bold"), id="list-title")
                    yield CommitListPanel(self.commits, id="commits")
                with Vertical(id="tree-column"):
                    yield Label(Text(MODE_TITLES[DiffMode.SINGLE], style="bold"), id="tree-title")
                    yield TreePanel(id="tree")
            with Horizontal(id="bottom"):
                with Vertical(id="diff-column"):
                    yield Label(Text("File Diff", style="bold"), id="diff-title")
                    yield DiffPanel(id="diff")
                with Vertical(id="stat-column"):
                    yield Label(Text("Commit stat", style="bold"), id="stat-title")
                    yield StatPanel(self.repository, id="stat")
            yield Label(Text("q(uit)  ?(help)  s(witch mode)  tab/shift+tab", style="bold"), id="footer")

    def on_mount(self) -> None:
        logger.info("Creating views")
        self.controller = SelectionController(
            self.repository,
            self.commits,
            stat_panel=self.query_one("#stat", StatPanel),
            tree_panel=self.query_one("#tree", TreePanel),
            diff_panel=self.query_one("#diff", DiffPanel),
            focus=self._focus_panel,
            max_open_depth=self.max_open_depth,
        )
        self.query_one("#commits", CommitListPanel).focus()
        self.call_after_refresh(self.controller.start)

    def _focus_panel(self, target: FocusTarget) -> None:
        self.query_one(PANEL_IDS[target]).focus()

    def on_commit_list_panel_selection_changed(self, event: CommitListPanel.SelectionChanged) -> None:
        if self.controller is None:
            return
        self.controller.select_commit(event.commit)

    def on_tree_panel_file_selected(self, event: TreePanel.FileSelected) -> None:
        if self.controller is None:
            return
        self.controller.select_file(event.path)

    def action_next_panel(self) -> None:
        if self.controller is not None:
            self.controller.move_focus(forward=True)

    def action_previous_panel(self) -> None:
        if self.controller is not None:
            self.controller.move_focus(forward=False)

    def action_toggle_mode(self) -> None:
        if self.controller is None:
            return
        self.controller.toggle_mode()
        title = self.query_one("#tree-title", Label)
        title.update(Text(MODE_TITLES[self.controller.state.diff_mode], style="bold"))

    def action_help(self) -> None:
        self.push_screen(HelpScreen())
