"""JSON viewer: collapsible tree with vim-style navigation."""

from __future__ import annotations

import json
from typing import Any

from rich.text import Text
from textual.binding import Binding
from textual.widgets import Static, Tree
from textual.widgets.tree import TreeNode

from dropview.dispatch.descriptor import FileRef
from dropview.dispatch.errors import DecodeError
from dropview.utils.file_info import human_size
from dropview.viewers.base import ExtensionViewer, read_text
from dropview.viewers.search import SearchableTreeView

MAX_DEPTH = 50
MAX_NODES = 50_000

TREE_HINTS = "  j/k: move  l: expand  h: collapse  space: toggle"

KEY_STYLE = "bold white"


class NavTree(Tree):
    """Tree navigated with vim keys; ``l``/``h`` step in and out of branches."""

    BINDINGS = [
        Binding(key, action, description, priority=True)
        for key, action, description in (
            ("j", "cursor_down", "Down"),
            ("k", "cursor_up", "Up"),
            ("l", "step_in", "Expand"),
            ("h", "step_out", "Collapse"),
            ("space", "toggle_node", "Toggle"),
            ("g", "scroll_home", "Top"),
            ("G", "scroll_end", "Bottom"),
        )
    ]

    def action_step_in(self) -> None:
        node = self.cursor_node
        if node is None or not node.allow_expand:
            return
        if node.is_expanded:
            if node.children:
                self.cursor_line += 1
        else:
            node.expand()

    def action_step_out(self) -> None:
        node = self.cursor_node
        if node is None:
            return
        if node.allow_expand and node.is_expanded:
            node.collapse()
            return
        parent = node.parent
        if parent is not None:
            self.select_node(parent)
            parent.collapse()


def info_line(file: FileRef) -> Text:
    return Text.assemble(
        (file.name, "bold"),
        (f"  ({human_size(file.size)})", "dim"),
        (TREE_HINTS, "dim"),
    )


def container_summary(value: dict | list) -> str:
    if isinstance(value, dict):
        return f"{{}} {len(value)} keys"
    return f"[] {len(value)} items"


def scalar_text(value: Any) -> Text:
    """Style a JSON scalar the way it is written in JSON."""
    if value is None:
        return Text("null", style="dim italic")
    if isinstance(value, bool):
        return Text("true" if value else "false", style="yellow")
    if isinstance(value, (int, float)):
        return Text(str(value), style="cyan")
    if isinstance(value, str):
        return Text(json.dumps(value, ensure_ascii=False), style="green")
    return Text(repr(value), style="white")


def node_label(key: str | None, body: Text) -> Text:
    if key is None:
        return body
    return Text.assemble((key, KEY_STYLE), (": ", "dim"), body)


class JsonView(SearchableTreeView):
    """Navigable, searchable tree over parsed JSON."""

    DEFAULT_CSS = """
    JsonView > #tree-info {
        height: auto;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    JsonView > NavTree {
        height: 1fr;
    }
    """

    tree_id = "json-tree"

    def __init__(self, file: FileRef, data: Any, **kwargs) -> None:
        super().__init__(**kwargs)
        self.file = file
        self.data = data
        self.node_count = 0

    def compose(self):
        root = self.file.name
        if isinstance(self.data, (dict, list)):
            root = f"{root}  {container_summary(self.data)}"
        yield Static(info_line(self.file), id="tree-info")
        yield NavTree(Text(root, style="bold"), id="json-tree")
        yield self.search_bar()

    def on_mount(self) -> None:
        tree = self.query_one("#json-tree", NavTree)
        self.node_count = 0
        self._add(tree.root, None, self.data, 0)
        tree.root.expand()
        tree.focus()

    def _add(self, parent: TreeNode, key: str | None, value: Any, depth: int) -> None:
        if self.node_count >= MAX_NODES:
            parent.add_leaf(Text(f"... truncated ({MAX_NODES:,} node limit)", style="italic dim"))
            return
        if depth >= MAX_DEPTH:
            parent.add_leaf(Text(f"... depth limit ({MAX_DEPTH})", style="italic dim"))
            return
        self.node_count += 1

        if isinstance(value, dict):
            children = list(value.items())
        elif isinstance(value, list):
            children = [(str(i), item) for i, item in enumerate(value)]
        else:
            parent.add_leaf(node_label(key, scalar_text(value)))
            return

        branch = parent.add(node_label(key, Text(container_summary(value), style="dim italic")))
        for child_key, child in children:
            self._add(branch, child_key, child, depth + 1)


class JsonViewer(ExtensionViewer):
    """Displays JSON and JSON Lines files as a collapsible tree."""

    name = "json"
    extensions = frozenset({".json", ".geojson", ".jsonl"})

    def load(self, target: FileRef) -> Any:
        raw = read_text(target)
        try:
            if target.suffix != ".jsonl":
                return json.loads(raw)
            return [json.loads(line) for line in raw.splitlines() if line.strip()]
        except json.JSONDecodeError as e:
            raise DecodeError(target.name, f"invalid JSON: {e}") from e

    def build(self, target: FileRef, content: Any) -> JsonView:
        return JsonView(target, content, classes="viewer json-viewer")
