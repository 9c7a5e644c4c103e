"""Text viewer: syntax-highlighted scrollable text."""

from __future__ import annotations

from rich.syntax import Syntax
from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

from dropview.dispatch.descriptor import FileRef
from dropview.viewers.base import ExtensionViewer, read_text
from dropview.viewers.search import (
    CURRENT_MATCH_STYLE,
    MATCH_STYLE,
    SearchableTextView,
    highlight_spans,
    line_col,
)

MAX_LINES = 10_000
SYNTAX_THEME = "monokai"

# Highlighted with a lexer picked by Pygments from the file name.
SOURCE_EXTENSIONS = frozenset(
    ".py .pyi .js .mjs .ts .jsx .tsx .rs .go .c .h .cpp .hpp .cc .java .kt"
    " .rb .php .lua .sh .bash .zsh .fish .sql .html .htm .css .scss"
    " .yaml .yml .toml .ini .cfg .conf .rst .proto .dockerfile .diff"
    .split()
)

PLAIN_EXTENSIONS = frozenset(
    ".txt .text .log .csv .tsv .env .gitignore .properties".split()
)


def truncate_lines(raw: str, limit: int = MAX_LINES) -> str:
    lines = raw.split("\n", limit + 1)
    if len(lines) <= limit:
        return raw
    return "\n".join(lines[:limit]) + f"\n\n... truncated at {limit:,} lines ..."


def pick_lexer(name: str, content: str) -> str | None:
    """Pygments lexer for a source file, or None for plain text."""
    lexer = Syntax.guess_lexer(name, content)
    return None if lexer in ("default", "text") else lexer


def render_source(
    source: str,
    lexer: str | None,
    spans: list[tuple[int, int]] = (),
    current: int = -1,
) -> Syntax | Text:
    """Render ``source``, marking the search match ``spans``."""
    if lexer is None:
        return highlight_spans(Text(source), spans, current)
    syntax = Syntax(source, lexer, theme=SYNTAX_THEME, line_numbers=True, word_wrap=False)
    for index, (start, end) in enumerate(spans):
        style = CURRENT_MATCH_STYLE if index == current else MATCH_STYLE
        syntax.stylize_range(style, line_col(source, start), line_col(source, end))
    return syntax


class TextView(SearchableTextView):
    """Scrollable, searchable text."""

    DEFAULT_CSS = """
    TextView > VerticalScroll > Static {
        width: 1fr;
    }
    """

    def __init__(self, source: str, lexer: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.source = source
        self.lexer = lexer

    def compose(self):
        with VerticalScroll(id="text-scroll"):
            yield Static(render_source(self.source, self.lexer), id="text-content")
        yield self.search_bar()

    def on_mount(self) -> None:
        self.focus_content()

    def focus_content(self) -> None:
        self.query_one("#text-scroll", VerticalScroll).focus()

    def show_matches(self) -> None:
        body = render_source(self.source, self.lexer, self.matches, self.match_index)
        self.query_one("#text-content", Static).update(body)
        if self.current_line:
            self.query_one("#text-scroll", VerticalScroll).scroll_to(
                y=max(0, self.current_line - 3), animate=False
            )


class TextViewer(ExtensionViewer):
    """Displays text and source files."""

    name = "text"
    extensions = SOURCE_EXTENSIONS | PLAIN_EXTENSIONS

    def load(self, target: FileRef) -> str:
        return truncate_lines(read_text(target))

    def build(self, target: FileRef, content: str) -> TextView:
        lexer = None if target.suffix in PLAIN_EXTENSIONS else pick_lexer(target.name, content)
        return TextView(content, lexer, classes="viewer text-viewer")
