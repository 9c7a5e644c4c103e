"""Tests for drop classification and directory expansion."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from dropview.dispatch.classifier import InputClassifier, is_openable_path, parse_dropped_paths
from dropview.dispatch.descriptor import DescriptorKind, DropEntry, FileRef, InputDescriptor
from fakes import touch


@pytest.fixture
def classifier(registry) -> InputClassifier:
    return InputClassifier(registry)


def entries(*paths: Path) -> list[DropEntry]:
    return [DropEntry.from_path(p) for p in paths]


class TestDescriptorBuild:
    def ref(self, name):
        return FileRef(path=Path(name), name=name, size=0, last_modified=0.0, content_type="")

    def test_kinds(self):
        assert InputDescriptor.build([]).kind is DescriptorKind.EMPTY
        assert InputDescriptor.build([self.ref("a")]).kind is DescriptorKind.SINGLE
        assert InputDescriptor.build([self.ref("a"), self.ref("b")]).kind is DescriptorKind.MULTIPLE
        assert InputDescriptor.build([], ["x.exe"]).kind is DescriptorKind.REJECTED

    def test_partial_success_is_not_rejected(self):
        d = InputDescriptor.build([self.ref("a")], ["x.exe"] * 99)
        assert d.kind is DescriptorKind.SINGLE
        assert d.dispatchable

    def test_target(self):
        a, b = self.ref("a"), self.ref("b")
        assert InputDescriptor.build([a]).target == a
        assert InputDescriptor.build([a, b]).target == (a, b)
        with pytest.raises(ValueError):
            InputDescriptor.build([]).target

    def test_label(self):
        assert InputDescriptor.build([self.ref("a.png")]).label == "a.png"
        assert InputDescriptor.build([self.ref("a"), self.ref("b")]).label == "2 files"


class TestClassify:
    async def test_single_supported_file(self, classifier, tmp_path):
        png = touch(tmp_path / "a.png")
        d = await classifier.classify(entries(png))
        assert d.kind is DescriptorKind.SINGLE
        assert [f.name for f in d.files] == ["a.png"]
        assert d.unsupported_names == ()
        assert d.files[0].size == 1
        assert d.files[0].content_type == "image/png"

    async def test_only_unsupported_is_rejected(self, classifier, tmp_path):
        a = touch(tmp_path / "a.exe")
        b = touch(tmp_path / "b.exe")
        d = await classifier.classify(entries(a, b))
        assert d.kind is DescriptorKind.REJECTED
        assert d.unsupported_names == ("a.exe", "b.exe")
        assert d.files == ()

    async def test_nothing_dropped_is_empty(self, classifier):
        d = await classifier.classify([])
        assert d.kind is DescriptorKind.EMPTY

    async def test_empty_directory_is_empty(self, classifier, tmp_path):
        (tmp_path / "nothing").mkdir()
        d = await classifier.classify(entries(tmp_path / "nothing"))
        assert d.kind is DescriptorKind.EMPTY
        assert d.skipped == 0

    async def test_folder_with_images_and_exe(self, classifier, tmp_path):
        folder = tmp_path / "shots"
        for name in ("1.png", "2.png", "3.jpg", "x.exe"):
            touch(folder / name)
        d = await classifier.classify(entries(folder))
        assert d.kind is DescriptorKind.MULTIPLE
        assert [f.name for f in d.files] == ["1.png", "2.png", "3.jpg"]
        assert d.unsupported_names == ("x.exe",)

    async def test_nested_directories_expand_fully(self, classifier, tmp_path):
        root = tmp_path / "root"
        touch(root / "a.txt")
        touch(root / "sub" / "b.txt")
        touch(root / "sub" / "deeper" / "deepest" / "c.png")
        touch(root / "other" / "d.bin")
        d = await classifier.classify(entries(root))
        assert [f.name for f in d.files] == ["a.txt", "b.txt", "c.png"]
        assert d.unsupported_names == ("d.bin",)

    async def test_expansion_order_is_deterministic(self, classifier, tmp_path):
        root = tmp_path / "root"
        touch(root / "z.txt")
        touch(root / "a.txt")
        touch(root / "m" / "b.txt")
        touch(root / "b" / "c.txt")
        d = await classifier.classify(entries(root))
        # Files of a directory first, then its subdirectories, all by name.
        assert [f.name for f in d.files] == ["a.txt", "z.txt", "c.txt", "b.txt"]

    async def test_drop_order_preserved_across_entries(self, classifier, tmp_path):
        folder = tmp_path / "folder"
        touch(folder / "inner.txt")
        last = touch(tmp_path / "last.png")
        first = touch(tmp_path / "first.txt")
        d = await classifier.classify(entries(first, folder, last))
        assert [f.name for f in d.files] == ["first.txt", "inner.txt", "last.png"]

    async def test_partition_covers_every_leaf_exactly_once(self, classifier, tmp_path):
        root = tmp_path / "tree"
        names = ["a.png", "b.txt", "c.exe", "d/e.png", "d/f.dll", "d/g/h.md", "d/g/i.zip"]
        for name in names:
            touch(root / name)
        loose = touch(tmp_path / "loose.iso")
        d = await classifier.classify(entries(root, loose))
        supported = [f.name for f in d.files]
        unsupported = list(d.unsupported_names)
        assert len(supported) + len(unsupported) == len(names) + 1
        assert not set(supported) & set(unsupported)
        assert set(supported) | set(unsupported) == {Path(n).name for n in names} | {"loose.iso"}

    async def test_missing_file_counts_as_unsupported(self, classifier, tmp_path):
        d = await classifier.classify([DropEntry(path=tmp_path / "gone.png", is_dir=False)])
        assert d.kind is DescriptorKind.REJECTED
        assert d.unsupported_names == ("gone.png",)

    async def test_unreadable_directory_is_skipped(self, classifier, tmp_path):
        good = touch(tmp_path / "ok.txt")
        d = await classifier.classify(
            [DropEntry.from_path(good), DropEntry(path=tmp_path / "vanished", is_dir=True)]
        )
        assert d.kind is DescriptorKind.SINGLE
        assert d.skipped == 1

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    async def test_directory_symlinks_not_followed(self, classifier, tmp_path):
        root = tmp_path / "root"
        touch(root / "a.txt")
        os.symlink(root, root / "loop")
        d = await classifier.classify(entries(root))
        assert [f.name for f in d.files] == ["a.txt"]
        assert d.unsupported_names == ("loop",)


class TestClassifyOpen:
    def test_single_descriptor_without_filtering(self, classifier, tmp_path):
        exe = touch(tmp_path / "tool.exe")
        d = classifier.classify_open(str(exe))
        assert d.kind is DescriptorKind.SINGLE
        assert d.files[0].name == "tool.exe"

    def test_missing_file_raises(self, classifier, tmp_path):
        with pytest.raises(OSError):
            classifier.classify_open(tmp_path / "nope.png")


class TestOpenablePath:
    def test_real_file(self, tmp_path):
        assert is_openable_path(str(touch(tmp_path / "a.png")))

    @pytest.mark.parametrize("arg", ["--verbose", "-v", "--inspect=9229", "", "   "])
    def test_flags_and_blanks(self, arg):
        assert not is_openable_path(arg)

    def test_flag_named_file_still_rejected(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        touch(tmp_path / "--verbose")
        assert not is_openable_path("--verbose")

    def test_directory_and_missing(self, tmp_path):
        assert not is_openable_path(str(tmp_path))
        assert not is_openable_path(str(tmp_path / "missing.png"))

    def test_non_string(self):
        assert not is_openable_path(None)
        assert not is_openable_path(42)


class TestParseDroppedPaths:
    def test_single_plain_path(self):
        assert parse_dropped_paths("/tmp/a.png") == [Path("/tmp/a.png")]

    def test_quoted_and_escaped(self):
        text = "'/tmp/my file.png' /tmp/other\\ file.txt"
        assert parse_dropped_paths(text) == [Path("/tmp/my file.png"), Path("/tmp/other file.txt")]

    def test_one_per_line(self):
        assert parse_dropped_paths("/a.txt\n\n/b.txt\n") == [Path("/a.txt"), Path("/b.txt")]

    def test_file_uri(self):
        assert parse_dropped_paths("file:///tmp/with%20space.pdf") == [Path("/tmp/with space.pdf")]

    def test_unbalanced_quote_taken_whole(self):
        assert parse_dropped_paths("/tmp/it's.txt") == [Path("/tmp/it's.txt")]

    def test_blank(self):
        assert parse_dropped_paths("  \n ") == []


async def test_sibling_directories_scanned_concurrently(classifier, tmp_path, monkeypatch):
    import threading
    import time

    from dropview.dispatch import classifier as classifier_module

    real_scan = classifier_module._scan
    lock = threading.Lock()
    in_flight = 0
    peak = 0

    def slow_scan(directory):
        nonlocal in_flight, peak
        with lock:
            in_flight += 1
            peak = max(peak, in_flight)
        time.sleep(0.05)
        try:
            return real_scan(directory)
        finally:
            with lock:
                in_flight -= 1

    monkeypatch.setattr(classifier_module, "_scan", slow_scan)
    root = tmp_path / "root"
    for name in ("d1", "d2", "d3", "d4"):
        touch(root / name / f"{name}.txt")

    d = await classifier.classify(entries(root))
    assert peak > 1
    assert [f.name for f in d.files] == ["d1.txt", "d2.txt", "d3.txt", "d4.txt"]


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes unavailable")
async def test_named_pipe_is_unsupported(classifier, tmp_path):
    folder = tmp_path / "folder"
    touch(folder / "real.txt")
    os.mkfifo(folder / "pipe.txt")
    d = await classifier.classify(entries(folder))
    assert [f.name for f in d.files] == ["real.txt"]
    assert d.unsupported_names == ("pipe.txt",)


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes unavailable")
def test_file_ref_refuses_special_files(tmp_path):
    os.mkfifo(tmp_path / "pipe.txt")
    with pytest.raises(OSError):
        FileRef.from_path(tmp_path / "pipe.txt")


async def test_failing_predicate_cancels_sibling_scans(tmp_path, monkeypatch):
    import asyncio
    import time

    from dropview.dispatch import classifier as classifier_module
    from dropview.dispatch.registry import HandlerRegistration, HandlerRegistry
    from fakes import FakeTextViewer

    checked: list[str] = []

    def predicate(file):
        checked.append(file.name)
        if file.name == "boom.txt":
            raise ValueError("predicate failed")
        return True

    real_scan = classifier_module._scan

    def slow_scan(directory):
        if directory.name == "sub":
            time.sleep(0.2)
        return real_scan(directory)

    monkeypatch.setattr(classifier_module, "_scan", slow_scan)
    registry = HandlerRegistry()
    registry.register(HandlerRegistration("text", predicate, FakeTextViewer))

    root = tmp_path / "root"
    touch(root / "boom.txt")
    for name in ("x.txt", "y.txt"):
        touch(root / "sub" / name)

    with pytest.raises(ValueError, match="predicate failed"):
        await InputClassifier(registry).classify(entries(root))
    # Give an uncancelled sibling time to finish its scan and classify.
    await asyncio.sleep(0.4)
    assert checked == ["boom.txt"]
