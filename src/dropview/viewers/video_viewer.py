"""Video viewer — file details, playback in an external player."""

from __future__ import annotations

import asyncio
import logging
import shutil
import subprocess  # noqa: S404 -- launches a local media player with a fixed arg list
import sys

from rich.table import Table
from textual.binding import Binding
from textual.widgets import Static

from dropview.dispatch.descriptor import FileRef
from dropview.dispatch.errors import ReadError
from dropview.utils.file_info import file_metadata
from dropview.viewers.base import ExtensionViewer, ViewerWidget

logger = logging.getLogger(__name__)

# Seconds a player gets to exit after SIGTERM before it is killed.
PLAYER_EXIT_TIMEOUT = 2.0

# Players tried in order; the first on PATH wins.
PLAYERS: list[list[str]] = [
    ["mpv", "--really-quiet"],
    ["ffplay", "-autoexit", "-loglevel", "quiet"],
]


def player_command(path: str) -> list[str]:
    """Command line that plays ``path``: a known player, else the OS opener."""
    for player in PLAYERS:
        if shutil.which(player[0]):
            return [*player, path]
    if sys.platform == "darwin":
        return ["open", path]
    if sys.platform == "win32":
        return ["explorer", path]
    return ["xdg-open", path]


class VideoView(ViewerWidget, can_focus=True):
    """Metadata table with a play binding."""

    DEFAULT_CSS = """
    VideoView {
        padding: 1 2;
    }
    """

    BINDINGS = [Binding("o,enter", "play", "Play")]

    def __init__(self, viewer: VideoViewer, meta: dict[str, str], **kwargs) -> None:
        super().__init__(**kwargs)
        self._viewer = viewer
        self._meta = meta

    def compose(self):
        table = Table(title="Video", show_header=False, expand=True)
        table.add_column("Key", style="bold cyan", ratio=1)
        table.add_column("Value", ratio=3)
        for key, value in self._meta.items():
            table.add_row(key, value)
        table.caption = "o: play in external player"
        yield Static(table, id="video-info")

    def on_mount(self) -> None:
        self.focus()

    def action_play(self) -> None:
        try:
            self._viewer.play()
        except OSError as e:
            self.notify(f"Cannot start player: {e}", severity="error")


class VideoViewer(ExtensionViewer):
    """Shows video details and hands playback to an external player.

    A player started from the viewer is terminated on detach.
    """

    name = "video"
    extensions = frozenset({".mp4", ".webm", ".mkv", ".mov", ".avi", ".m4v"})

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.file: FileRef | None = None
        self.process: subprocess.Popen | None = None

    def load(self, target: FileRef) -> dict[str, str]:
        try:
            with open(target.path, "rb") as f:
                f.read(1)
        except OSError as e:
            raise ReadError(target.name, e.strerror or str(e)) from e
        return file_metadata(target.path)

    def build(self, target: FileRef, content: dict[str, str]) -> VideoView:
        self.file = target
        return VideoView(self, content, classes="viewer video-viewer")

    def play(self) -> None:
        if self.file is None:
            return
        if self.process is not None and self.process.poll() is None:
            return
        cmd = player_command(str(self.file.path))
        logger.info("Starting player: %s", cmd)
        self.process = subprocess.Popen(  # noqa: S603 -- fixed arg list, not shell=True
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    async def release(self) -> None:
        process, self.process = self.process, None
        self.file = None
        if process is None or process.poll() is not None:
            return
        process.terminate()
        # Blocking waits stay off the event loop.
        try:
            await asyncio.to_thread(process.wait, PLAYER_EXIT_TIMEOUT)
        except subprocess.TimeoutExpired:
            logger.warning("Player did not exit, killing pid %d", process.pid)
            process.kill()
            await asyncio.to_thread(process.wait)
