"""Base classes for viewers that render into a Textual container."""

from __future__ import annotations

import asyncio
import logging
from abc import abstractmethod
from typing import Any

from textual.widget import Widget

from dropview.dispatch.descriptor import FileRef
from dropview.dispatch.errors import DecodeError, InvariantViolation, ReadError, UnsupportedError
from dropview.dispatch.viewer import Target, Viewer
from dropview.utils.config import Settings
from dropview.utils.file_info import human_size

logger = logging.getLogger(__name__)

# Bytes inspected for NUL when deciding a file is binary.
BINARY_SNIFF_SIZE = 8192


class ViewerWidget(Widget):
    """Base class for the widget a viewer mounts."""

    DEFAULT_CSS = """
    ViewerWidget {
        height: 1fr;
        width: 1fr;
    }
    """


def read_bytes(file: FileRef) -> bytes:
    """Read a file, mapping OS errors to ReadError."""
    try:
        return file.read_bytes()
    except OSError as e:
        raise ReadError(file.name, e.strerror or str(e)) from e


def read_text(file: FileRef) -> str:
    """Read a text file as UTF-8, replacing undecodable bytes.

    Raises:
        DecodeError: If the content looks binary.
    """
    raw = read_bytes(file)
    if b"\x00" in raw[:BINARY_SNIFF_SIZE]:
        raise DecodeError(file.name, "binary content")
    return raw.decode("utf-8", errors="replace")


class WidgetViewer(Viewer):
    """A viewer that loads its input, then mounts one widget.

    ``attach`` runs ``load`` in a worker thread, so all I/O and decoding
    happen before anything touches the container. Only when loading
    succeeded is the widget from ``build`` mounted. ``detach`` removes
    the widget, awaits ``release`` and drops the loaded content.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.widget: Widget | None = None
        self.content: Any = None
        self._attached = False

    @property
    def attached(self) -> bool:
        return self.widget is not None

    @abstractmethod
    def load(self, target: Target) -> Any:
        """Read and decode ``target``. Runs in a worker thread.

        Raises:
            AttachError: If the input cannot be displayed.
        """
        ...

    @abstractmethod
    def build(self, target: Target, content: Any) -> Widget:
        """Return the widget displaying ``content``."""
        ...

    async def release(self) -> None:
        """Free resources held outside the widget. Awaited by ``detach``."""

    def check_size(self, target: Target) -> None:
        if isinstance(target, FileRef) and target.size > self.settings.max_file_size:
            raise UnsupportedError(
                target.name,
                f"file too large ({human_size(target.size)} > "
                f"{human_size(self.settings.max_file_size)} limit)",
            )

    async def attach(self, target: Target, container: Any) -> None:
        if self._attached:
            raise InvariantViolation(f"{type(self).__name__} attached twice")
        self._attached = True
        self.check_size(target)
        content = await asyncio.to_thread(self.load, target)
        self.content = content
        widget = self.build(target, content)
        self.widget = widget
        await container.mount(widget)

    async def detach(self) -> None:
        widget, self.widget = self.widget, None
        try:
            if widget is not None and widget.parent is not None:
                await widget.remove()
            await self.release()
        finally:
            self.content = None


class ExtensionViewer(WidgetViewer):
    """A single-file viewer matched by file extension."""

    extensions: frozenset[str] = frozenset()

    @classmethod
    def can_handle(cls, target: Any) -> bool:
        return isinstance(target, FileRef) and target.suffix in cls.extensions
