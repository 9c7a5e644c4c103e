"""PDF viewer — page text with page navigation.

The document handle stays open while the viewer is attached so pages
are extracted on demand; ``detach`` closes it.
"""

from __future__ import annotations

import fitz  # PyMuPDF
from rich.text import Text
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.reactive import reactive
from textual.widgets import Static

from dropview.dispatch.descriptor import FileRef
from dropview.dispatch.errors import DecodeError
from dropview.viewers.base import ExtensionViewer, ViewerWidget, read_bytes


class PdfView(ViewerWidget):
    """Shows one page's text at a time."""

    DEFAULT_CSS = """
    PdfView > #pdf-info {
        height: auto;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    PdfView > VerticalScroll > Static {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("n,pagedown", "next_page", "Next page"),
        Binding("p,pageup", "previous_page", "Previous page"),
    ]

    page = reactive(0)

    def __init__(self, file: FileRef, document: fitz.Document, **kwargs) -> None:
        super().__init__(**kwargs)
        self.file = file
        self.document = document

    @property
    def page_count(self) -> int:
        return self.document.page_count

    def compose(self):
        yield Static(id="pdf-info")
        with VerticalScroll():
            yield Static(id="pdf-page")

    def on_mount(self) -> None:
        self._show_page()

    def watch_page(self) -> None:
        if self.is_mounted:
            self._show_page()

    def page_text(self, index: int) -> str:
        return self.document.load_page(index).get_text()

    def _show_page(self) -> None:
        info = Text()
        info.append(self.file.name, style="bold")
        info.append(f"  page {self.page + 1} of {self.page_count}", style="dim")
        info.append("  n/p: next/previous", style="dim")
        self.query_one("#pdf-info", Static).update(info)

        if self.page_count:
            body = Text(self.page_text(self.page).strip() or "(no text on this page)")
        else:
            body = Text("(empty document)", style="dim")
        self.query_one("#pdf-page", Static).update(body)

    def action_next_page(self) -> None:
        if self.page + 1 < self.page_count:
            self.page += 1

    def action_previous_page(self) -> None:
        if self.page > 0:
            self.page -= 1


class PdfViewer(ExtensionViewer):
    """Displays PDF documents page by page."""

    name = "pdf"
    extensions = frozenset({".pdf"})

    def load(self, target: FileRef) -> fitz.Document:
        raw = read_bytes(target)
        try:
            document = fitz.open(stream=raw, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            # PyMuPDF reports corrupt and empty files as FileDataError (a RuntimeError).
            raise DecodeError(target.name, f"cannot read PDF: {e}") from e
        if document.needs_pass:
            document.close()
            raise DecodeError(target.name, "document is password protected")
        return document

    def build(self, target: FileRef, content: fitz.Document) -> PdfView:
        return PdfView(target, content, classes="viewer pdf-viewer")

    async def release(self) -> None:
        if self.content is not None and not self.content.is_closed:
            self.content.close()
