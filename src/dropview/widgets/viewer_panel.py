"""Panel hosting the display container and the drop placeholder."""

from __future__ import annotations

from rich.text import Text
from textual.containers import Vertical
from textual.widget import Widget
from textual.widgets import Static

from dropview.dispatch.session import SessionState

PLACEHOLDER_HINT = "Drop files or folders here"


class Stage(Vertical):
    """The display container a viewer session mounts into."""


class ViewerPanel(Widget):
    """Shows the placeholder while empty, the stage while a viewer is live."""

    DEFAULT_CSS = """
    ViewerPanel {
        height: 1fr;
        width: 1fr;
        border: round $primary;
    }
    ViewerPanel > #drop-zone {
        height: 1fr;
        width: 1fr;
        content-align: center middle;
        color: $text-muted;
    }
    ViewerPanel > Stage {
        height: 1fr;
        display: none;
    }
    ViewerPanel.has-viewer > #drop-zone {
        display: none;
    }
    ViewerPanel.has-viewer > Stage {
        display: block;
    }
    """

    def compose(self):
        hint = Text()
        hint.append(PLACEHOLDER_HINT, style="bold")
        hint.append("\n\npaste a path, or pass files on the command line", style="dim")
        yield Static(hint, id="drop-zone")
        yield Stage(id="stage")

    @property
    def stage(self) -> Stage:
        return self.query_one("#stage", Stage)

    def show_state(self, state: SessionState, title: str | None = None) -> None:
        """Switch between placeholder and stage for a session state."""
        live = state in (SessionState.ATTACHING, SessionState.ACTIVE)
        self.set_class(live, "has-viewer")
        self.border_title = title if live and title else None
