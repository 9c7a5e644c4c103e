"""Status bar with the view mode, file count and key hints."""

from __future__ import annotations

from rich.text import Text
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Static


class StatusBar(Widget):
    """One-line footer: mode, file count, keybinding hints."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $panel;
        color: $text;
    }
    StatusBar > #status-line {
        width: 1fr;
    }
    """

    mode = reactive("empty")
    file_count = reactive(0)

    _HINTS = {
        "empty": [("paste", "open"), ("q", "quit")],
        "single": [("/", "search"), ("esc", "close"), ("q", "quit")],
        "multiple": [("s", "sort"), ("enter", "open"), ("esc", "close"), ("q", "quit")],
    }

    _LABELS = {
        "empty": "No file",
        "single": "Single file",
        "multiple": "File list",
    }

    def compose(self):
        yield Static(id="status-line")

    def on_mount(self) -> None:
        self._render_status()

    def watch_mode(self) -> None:
        self._render_status()

    def watch_file_count(self) -> None:
        self._render_status()

    def build_line(self) -> Text:
        text = Text()
        text.append(self._LABELS.get(self.mode, self.mode), style="bold #a6e22e")
        if self.file_count:
            noun = "file" if self.file_count == 1 else "files"
            text.append(f"  {self.file_count} {noun}", style="#f8f8f2")
        text.append(" │ ", style="#75715e")
        for i, (key, desc) in enumerate(self._HINTS.get(self.mode, [])):
            if i > 0:
                text.append("  ")
            text.append(key, style="bold #66d9ef")
            text.append(f" {desc}", style="#75715e")
        return text

    def _render_status(self) -> None:
        try:
            self.query_one("#status-line", Static).update(self.build_line())
        except NoMatches:
            # Not composed yet.
            return
