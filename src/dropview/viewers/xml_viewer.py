"""XML viewer: element tree with attributes and text."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from rich.text import Text
from textual.widgets import Static

from dropview.dispatch.descriptor import FileRef
from dropview.dispatch.errors import DecodeError
from dropview.viewers.base import ExtensionViewer, read_bytes
from dropview.viewers.json_viewer import MAX_NODES, NavTree, info_line
from dropview.viewers.search import SearchableTreeView

MAX_TEXT = 80


def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on tags."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _element_label(element: ET.Element) -> Text:
    text = Text()
    text.append(f"<{_local_name(element.tag)}", style="bold magenta")
    for name, value in element.attrib.items():
        text.append(f" {_local_name(name)}", style="cyan")
        text.append("=", style="dim")
        text.append(f'"{value}"', style="green")
    text.append(">", style="bold magenta")
    body = (element.text or "").strip()
    if body:
        if len(body) > MAX_TEXT:
            body = body[:MAX_TEXT] + "..."
        text.append(f" {body}", style="white")
    return text


class XmlView(SearchableTreeView):
    """Navigable, searchable element tree."""

    DEFAULT_CSS = """
    XmlView > #tree-info {
        height: auto;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    XmlView > NavTree {
        height: 1fr;
    }
    """

    tree_id = "xml-tree"

    def __init__(self, file: FileRef, root: ET.Element, **kwargs) -> None:
        super().__init__(**kwargs)
        self.file = file
        self.root = root
        self._node_count = 0

    def compose(self):
        yield Static(info_line(self.file), id="tree-info")
        yield NavTree(_element_label(self.root), id="xml-tree")
        yield self.search_bar()

    def on_mount(self) -> None:
        tree = self.query_one("#xml-tree", NavTree)
        self._node_count = 0
        self._add_children(tree.root, self.root)
        tree.root.expand()
        tree.focus()

    def _add_children(self, node, element: ET.Element) -> None:
        for child in element:
            if self._node_count >= MAX_NODES:
                node.add_leaf(Text(f"... truncated ({MAX_NODES:,} node limit)", style="italic dim"))
                return
            self._node_count += 1
            if len(child):
                self._add_children(node.add(_element_label(child)), child)
            else:
                node.add_leaf(_element_label(child))


class XmlViewer(ExtensionViewer):
    """Displays XML documents as a collapsible element tree."""

    name = "xml"
    extensions = frozenset({".xml", ".xsd", ".xsl", ".xslt", ".svg", ".plist"})

    def load(self, target: FileRef) -> ET.Element:
        raw = read_bytes(target)
        try:
            return ET.fromstring(raw)
        except ET.ParseError as e:
            raise DecodeError(target.name, f"invalid XML: {e}") from e

    def build(self, target: FileRef, content: ET.Element) -> XmlView:
        return XmlView(target, content, classes="viewer xml-viewer")
