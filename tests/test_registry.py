"""Tests for first-match-wins handler resolution."""

from __future__ import annotations

from pathlib import Path

from dropview.dispatch.descriptor import FileRef
from dropview.dispatch.registry import HandlerRegistration, HandlerRegistry
from fakes import FakeImageViewer, FakeListViewer, FakeMarkdownViewer, FakeTextViewer


def ref(name: str, size: int = 1) -> FileRef:
    return FileRef(path=Path(name), name=name, size=size, last_modified=0.0, content_type="")


class TestResolve:
    def test_first_registered_wins_on_overlap(self):
        reg = HandlerRegistry()
        reg.register_viewer(FakeTextViewer)
        reg.register_viewer(FakeMarkdownViewer)
        for _ in range(5):
            assert isinstance(reg.resolve(ref("notes.md")), FakeTextViewer)

    def test_order_flipped_flips_winner(self):
        reg = HandlerRegistry()
        reg.register_viewer(FakeMarkdownViewer)
        reg.register_viewer(FakeTextViewer)
        assert isinstance(reg.resolve(ref("notes.md")), FakeMarkdownViewer)
        assert isinstance(reg.resolve(ref("notes.txt")), FakeTextViewer)

    def test_each_resolve_returns_fresh_instance(self):
        reg = HandlerRegistry()
        reg.register_viewer(FakeImageViewer)
        first = reg.resolve(ref("a.png"))
        second = reg.resolve(ref("a.png"))
        assert first is not second

    def test_no_match_returns_none(self):
        reg = HandlerRegistry()
        reg.register_viewer(FakeImageViewer)
        assert reg.resolve(ref("setup.exe")) is None
        assert reg.find(ref("setup.exe")) is None

    def test_empty_registry(self):
        assert HandlerRegistry().resolve(ref("a.png")) is None

    def test_list_target_only_matches_list_handlers(self):
        reg = HandlerRegistry()
        reg.register_viewer(FakeImageViewer)
        reg.register_viewer(FakeListViewer)
        files = (ref("a.png"), ref("b.png"))
        assert isinstance(reg.resolve(files), FakeListViewer)
        assert isinstance(reg.resolve(files[0]), FakeImageViewer)

    def test_file_target_never_matches_list_handler(self):
        reg = HandlerRegistry()
        reg.register_viewer(FakeListViewer)
        assert reg.resolve(ref("a.png")) is None
        assert not reg.supports_file(ref("a.png"))

    def test_factory_not_called_for_non_matching(self):
        calls = []
        reg = HandlerRegistry()
        reg.register(HandlerRegistration("never", lambda t: False, lambda: calls.append("never")))
        reg.register(HandlerRegistration("always", lambda t: True, lambda: calls.append("always") or "viewer"))
        assert reg.resolve(ref("x.bin")) == "viewer"
        assert calls == ["always"]


class TestRegister:
    def test_duplicates_allowed(self):
        reg = HandlerRegistry()
        reg.register_viewer(FakeImageViewer)
        reg.register_viewer(FakeImageViewer)
        assert len(reg) == 2
        assert reg.names == ["image", "image"]

    def test_names_in_registration_order(self, registry):
        assert registry.names == ["image", "broken", "slow", "text", "list"]

    def test_register_viewer_returns_class(self):
        reg = HandlerRegistry()
        assert reg.register_viewer(FakeImageViewer) is FakeImageViewer

    def test_custom_factory(self):
        reg = HandlerRegistry()
        made = FakeImageViewer()
        reg.register_viewer(FakeImageViewer, lambda: made)
        assert reg.resolve(ref("a.jpg")) is made

    def test_supports_file(self, registry):
        assert registry.supports_file(ref("photo.PNG"))
        assert not registry.supports_file(ref("x.exe"))
