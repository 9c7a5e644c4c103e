"""Markdown viewer: rendered markdown with Rich."""

from __future__ import annotations

from rich.markdown import Markdown
from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

from dropview.dispatch.descriptor import FileRef
from dropview.viewers.base import ExtensionViewer, read_text
from dropview.viewers.search import SearchableTextView, highlight_spans


class MarkdownView(SearchableTextView):
    """Rendered markdown, with ``s`` toggling the source.

    Searching switches to the source, where matches can be marked.
    """

    DEFAULT_CSS = """
    MarkdownView > VerticalScroll > Static {
        width: 1fr;
    }
    """

    BINDINGS = [("s", "toggle_source", "Source")]

    def __init__(self, source: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.source = source
        self.show_source = False

    def compose(self):
        with VerticalScroll(id="md-scroll"):
            yield Static(Markdown(self.source), id="md-content")
        yield self.search_bar()

    def focus_content(self) -> None:
        self.query_one("#md-scroll", VerticalScroll).focus()

    def render_content(self) -> Markdown | Text:
        if not self.show_source:
            return Markdown(self.source)
        return highlight_spans(Text(self.source), self.matches, self.match_index)

    def action_toggle_source(self) -> None:
        self.show_source = not self.show_source
        self.query_one("#md-content", Static).update(self.render_content())

    def show_matches(self) -> None:
        if self.search_query:
            self.show_source = True
        self.query_one("#md-content", Static).update(self.render_content())
        if self.current_line:
            self.query_one("#md-scroll", VerticalScroll).scroll_to(
                y=max(0, self.current_line - 3), animate=False
            )


class MarkdownViewer(ExtensionViewer):
    """Displays markdown files rendered with Rich."""

    name = "markdown"
    extensions = frozenset({".md", ".markdown", ".mkd", ".mdx"})

    def load(self, target: FileRef) -> str:
        return read_text(target)

    def build(self, target: FileRef, content: str) -> MarkdownView:
        return MarkdownView(content, classes="viewer markdown-viewer")
