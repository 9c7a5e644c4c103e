"""In-document search for the text, markdown and tree views.

``/`` opens a search bar; the query is a case-insensitive regular
expression, taken literally when it does not compile. ``n`` and ``N``
step through the matches, wrapping at either end.
"""

from __future__ import annotations

import re
from typing import Any, Iterator

from rich.text import Text
from textual import on
from textual.binding import Binding
from textual.widgets import Input, Tree
from textual.widgets.tree import TreeNode

from dropview.viewers.base import ViewerWidget

MATCH_STYLE = "black on yellow"
CURRENT_MATCH_STYLE = "bold black on dark_orange"


def compile_query(query: str) -> re.Pattern[str] | None:
    if not query:
        return None
    try:
        return re.compile(query, re.IGNORECASE | re.MULTILINE)
    except re.error:
        return re.compile(re.escape(query), re.IGNORECASE)


def find_matches(text: str, query: str) -> list[tuple[int, int]]:
    """Spans of every non-empty match of ``query`` in ``text``."""
    pattern = compile_query(query)
    if pattern is None:
        return []
    return [m.span() for m in pattern.finditer(text) if m.end() > m.start()]


def line_col(text: str, offset: int) -> tuple[int, int]:
    """1-based line and 0-based column of ``offset``, as Rich's Syntax counts."""
    line = text.count("\n", 0, offset) + 1
    return line, offset - (text.rfind("\n", 0, offset) + 1)


def highlight_spans(text: Text, spans: list[tuple[int, int]], current: int) -> Text:
    text = text.copy()
    for index, (start, end) in enumerate(spans):
        text.stylize(CURRENT_MATCH_STYLE if index == current else MATCH_STYLE, start, end)
    return text


class SearchBar(Input):
    """One-line query input docked under a searchable view."""

    DEFAULT_CSS = """
    SearchBar {
        dock: bottom;
        display: none;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel search")]

    def action_cancel(self) -> None:
        self.display = False
        if isinstance(self.parent, SearchableView):
            self.parent.focus_content()


class SearchableView(ViewerWidget):
    """A view whose content can be searched.

    Subclasses say what a match is (``find``) and how matches are shown
    (``show_matches``). ``matches`` holds whatever ``find`` returned and
    ``match_index`` points at the current one, or -1.
    """

    BINDINGS = [
        Binding("slash", "open_search", "Search"),
        Binding("n", "next_match", "Next match", show=False),
        Binding("N", "previous_match", "Previous match", show=False),
    ]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.search_query = ""
        self.matches: list[Any] = []
        self.match_index = -1

    def find(self, query: str) -> list[Any]:
        raise NotImplementedError

    def show_matches(self) -> None:
        raise NotImplementedError

    def focus_content(self) -> None:
        raise NotImplementedError

    @property
    def current_match(self) -> Any:
        if self.match_index < 0:
            return None
        return self.matches[self.match_index]

    def search_bar(self) -> SearchBar:
        return SearchBar(placeholder="search (regex)", id="search-bar")

    def search(self, query: str) -> int:
        """Run ``query`` and jump to the first match. Returns the match count."""
        self.search_query = query
        self.matches = self.find(query)
        self.match_index = 0 if self.matches else -1
        self.show_matches()
        if query and not self.matches:
            self.notify(f"No matches for {query}", severity="warning")
        return len(self.matches)

    def action_open_search(self) -> None:
        bar = self.query_one("#search-bar", SearchBar)
        bar.display = True
        bar.value = self.search_query
        bar.focus()

    def action_next_match(self) -> None:
        self._step(1)

    def action_previous_match(self) -> None:
        self._step(-1)

    def _step(self, delta: int) -> None:
        if not self.matches:
            return
        self.match_index = (self.match_index + delta) % len(self.matches)
        self.show_matches()

    @on(Input.Submitted, "#search-bar")
    def _on_search_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        event.input.display = False
        self.search(event.value)
        self.focus_content()


class SearchableTextView(SearchableView):
    """Searchable view over a single string, ``source``."""

    source: str = ""

    def find(self, query: str) -> list[tuple[int, int]]:
        return find_matches(self.source, query)

    @property
    def current_line(self) -> int:
        """1-based line of the current match, 0 without one."""
        match = self.current_match
        if match is None:
            return 0
        return line_col(self.source, match[0])[0]


def walk_nodes(node: TreeNode) -> Iterator[TreeNode]:
    """``node`` and its descendants in document order."""
    yield node
    for child in node.children:
        yield from walk_nodes(child)


class SearchableTreeView(SearchableView):
    """Searchable view over the labels of the ``Tree`` with id ``tree_id``.

    Matched labels are restyled in place; the originals are put back
    before the next search.
    """

    tree_id = ""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._labels: dict[TreeNode, Text] = {}

    @property
    def search_tree(self) -> Tree:
        return self.query_one(f"#{self.tree_id}", Tree)

    def focus_content(self) -> None:
        self.search_tree.focus()

    def find(self, query: str) -> list[TreeNode]:
        self._restore_labels()
        pattern = compile_query(query)
        if pattern is None:
            return []
        return [node for node in walk_nodes(self.search_tree.root) if pattern.search(node.label.plain)]

    def show_matches(self) -> None:
        self._restore_labels()
        pattern = compile_query(self.search_query)
        if pattern is None or not self.matches:
            return
        current = self.current_match
        for node in self.matches:
            label = node.label
            self._labels[node] = label
            spans = [m.span() for m in pattern.finditer(label.plain) if m.end() > m.start()]
            node.set_label(highlight_spans(label, spans, 0 if node is current else -1))
        parent = current.parent
        while parent is not None:
            parent.expand()
            parent = parent.parent
        # Line numbers are only known once the expanded tree has rendered.
        self.call_after_refresh(self.search_tree.move_cursor, current)

    def _restore_labels(self) -> None:
        for node, label in self._labels.items():
            node.set_label(label)
        self._labels.clear()
