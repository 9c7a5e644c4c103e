"""Main Textual application for dropview."""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Sequence

from textual import events, on, work
from textual.app import App, ComposeResult
from textual.widgets import Header

from dropview.dispatch.classifier import parse_dropped_paths
from dropview.dispatch.descriptor import DropEntry, FileRef
from dropview.dispatch.dispatcher import Dispatcher
from dropview.dispatch.registry import HandlerRegistry
from dropview.dispatch.session import SessionState, ViewerSession
from dropview.dispatch.viewer import describe
from dropview.utils.config import Settings, load_settings
from dropview.utils.log import setup_logging
from dropview.viewers.base import WidgetViewer
from dropview.viewers.image_viewer import ImageViewer
from dropview.viewers.json_viewer import JsonViewer
from dropview.viewers.list_viewer import FileListView, ListViewer
from dropview.viewers.markdown_viewer import MarkdownViewer
from dropview.viewers.pdf_viewer import PdfViewer
from dropview.viewers.text_viewer import TextViewer
from dropview.viewers.video_viewer import VideoViewer
from dropview.viewers.xml_viewer import XmlViewer
from dropview.widgets.status_bar import StatusBar
from dropview.widgets.viewer_panel import ViewerPanel

logger = logging.getLogger(__name__)

# Resolution order: the first capable viewer wins, so specific formats
# come before the catch-all text viewer.
VIEWERS: list[type[WidgetViewer]] = [
    ImageViewer,
    PdfViewer,
    MarkdownViewer,
    JsonViewer,
    XmlViewer,
    VideoViewer,
    TextViewer,
    ListViewer,
]


def build_registry(settings: Settings | None = None) -> HandlerRegistry:
    """Register the enabled viewers, in resolution order."""
    settings = settings or Settings()
    registry = HandlerRegistry()
    for viewer_cls in VIEWERS:
        if not settings.viewer_enabled(viewer_cls.name):
            logger.info("Viewer %r disabled by config", viewer_cls.name)
            continue
        registry.register_viewer(viewer_cls, partial(viewer_cls, settings))
    return registry


class DropviewApp(App):
    """Terminal file viewer: paste or pass paths to open them."""

    TITLE = "dropview"
    CSS_PATH = "dropview.tcss"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+c", "quit", "Quit"),
        ("escape", "close_viewer", "Close"),
        ("ctrl+w", "close_viewer", "Close"),
    ]

    def __init__(
        self,
        open_args: Sequence[str] = (),
        settings: Settings | None = None,
        registry: HandlerRegistry | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.settings = settings or Settings()
        self.registry = registry or build_registry(self.settings)
        self._open_args = list(open_args)
        self.session: ViewerSession | None = None
        self.dispatcher: Dispatcher | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield ViewerPanel(id="viewer-panel")
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        panel = self.query_one("#viewer-panel", ViewerPanel)
        self.session = ViewerSession(panel.stage, on_change=self._on_session_change)
        self.dispatcher = Dispatcher(self.registry, self.session, self.notify)
        if self._open_args:
            self.open_args(self._open_args)

    def _on_session_change(self, state: SessionState) -> None:
        panel = self.query_one("#viewer-panel", ViewerPanel)
        status = self.query_one("#status-bar", StatusBar)
        target = self.session.target if self.session else None
        if state is SessionState.ACTIVE and target is not None:
            panel.show_state(state, describe(target))
            if isinstance(target, FileRef):
                status.mode, status.file_count = "single", 1
            else:
                status.mode, status.file_count = "multiple", len(target)
        else:
            panel.show_state(state)
            if state is SessionState.EMPTY:
                status.mode, status.file_count = "empty", 0

    # --- Input events ---

    def on_paste(self, event: events.Paste) -> None:
        """Terminals paste the paths of files dropped on them."""
        paths = parse_dropped_paths(event.text)
        if not paths:
            return
        event.stop()
        self.drop([DropEntry.from_path(p) for p in paths])

    @on(FileListView.FileChosen)
    def _on_file_chosen(self, event: FileListView.FileChosen) -> None:
        self.open_file(event.file)

    # --- Dispatch workers ---

    @work(group="dispatch")
    async def drop(self, entries: list[DropEntry]) -> None:
        await self.dispatcher.handle(entries)

    @work(group="dispatch")
    async def open_file(self, file: FileRef) -> None:
        await self.dispatcher.open_file(file)

    @work(group="dispatch")
    async def open_args(self, args: list[str]) -> None:
        """Open command-line arguments.

        One file argument is an "open with" request; anything else (a
        directory, several paths) is handled like a drop.
        """
        if len(args) == 1 and not Path(args[0]).is_dir():
            await self.dispatcher.open_path(args[0])
            return
        entries = []
        for arg in args:
            if arg.startswith("-"):
                logger.warning("Ignoring stray argument %r", arg)
                continue
            entries.append(DropEntry.from_path(arg))
        if entries:
            await self.dispatcher.handle(entries)

    @work(group="dispatch")
    async def close_viewer(self) -> None:
        await self.dispatcher.close()

    def action_close_viewer(self) -> None:
        if self.dispatcher is not None:
            self.close_viewer()


def run(paths: Sequence[str] = ()) -> None:
    """Run the dropview app."""
    settings = load_settings()
    log_path = setup_logging(settings)
    if log_path:
        logger.info("Logging to %s", log_path)
    app = DropviewApp(open_args=paths, settings=settings)
    app.run()
