"""List viewer — table of several dropped files."""

from __future__ import annotations

from typing import Any, Sequence

from rich.text import Text
from textual import on
from textual.binding import Binding
from textual.message import Message
from textual.widgets import DataTable, Static

from dropview.dispatch.descriptor import FileRef
from dropview.utils.file_info import format_mtime, human_size, type_label
from dropview.viewers.base import ViewerWidget, WidgetViewer

SORT_KEYS = ("name", "size", "type", "date")

_SORTERS = {
    "name": lambda f: f.name.casefold(),
    "size": lambda f: f.size,
    "type": lambda f: (f.content_type, f.name.casefold()),
    "date": lambda f: f.last_modified,
}


def sort_files(files: Sequence[FileRef], key: str) -> list[FileRef]:
    return sorted(files, key=_SORTERS[key])


class FileListView(ViewerWidget):
    """Sortable file table; ``enter`` opens the highlighted file."""

    DEFAULT_CSS = """
    FileListView > #list-info {
        height: auto;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    FileListView > DataTable {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("s", "cycle_sort", "Sort"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    class FileChosen(Message):
        """A file in the list was picked for opening."""

        def __init__(self, file: FileRef) -> None:
            super().__init__()
            self.file = file

    def __init__(self, files: Sequence[FileRef], **kwargs) -> None:
        super().__init__(**kwargs)
        self.files = list(files)
        self.sort_key = SORT_KEYS[0]
        self._rows: list[FileRef] = []

    def compose(self):
        yield Static(id="list-info")
        yield DataTable(id="file-table", cursor_type="row", zebra_stripes=True)

    def on_mount(self) -> None:
        table = self.query_one("#file-table", DataTable)
        table.add_columns("Name", "Type", "Size", "Modified")
        self._fill()
        table.focus()

    @property
    def rows(self) -> list[FileRef]:
        return list(self._rows)

    def _fill(self) -> None:
        table = self.query_one("#file-table", DataTable)
        table.clear()
        self._rows = sort_files(self.files, self.sort_key)
        for index, file in enumerate(self._rows):
            table.add_row(
                file.name,
                type_label(file.content_type),
                Text(human_size(file.size), justify="right"),
                format_mtime(file.last_modified),
                key=str(index),
            )
        info = Text()
        info.append(f"{len(self.files)} files", style="bold")
        info.append(f"  sorted by {self.sort_key}", style="dim")
        info.append("  s: sort  enter: open", style="dim")
        self.query_one("#list-info", Static).update(info)

    def action_cycle_sort(self) -> None:
        position = SORT_KEYS.index(self.sort_key)
        self.sort_key = SORT_KEYS[(position + 1) % len(SORT_KEYS)]
        self._fill()

    def action_cursor_down(self) -> None:
        self.query_one("#file-table", DataTable).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#file-table", DataTable).action_cursor_up()

    @on(DataTable.RowSelected)
    def _on_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        index = int(event.row_key.value)
        self.post_message(self.FileChosen(self._rows[index]))


class ListViewer(WidgetViewer):
    """Displays a list of files. Accepts any non-empty file list."""

    name = "list"
    accepts_lists = True

    @classmethod
    def can_handle(cls, target: Any) -> bool:
        if isinstance(target, FileRef) or not isinstance(target, Sequence):
            return False
        return len(target) > 0 and all(isinstance(f, FileRef) for f in target)

    def load(self, target: Sequence[FileRef]) -> list[FileRef]:
        return list(target)

    def build(self, target: Sequence[FileRef], content: list[FileRef]) -> FileListView:
        return FileListView(content, classes="viewer list-viewer")
