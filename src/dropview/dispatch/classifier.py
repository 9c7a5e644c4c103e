"""Turns drop and open events into input descriptors."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
from pathlib import Path
from typing import Any, Awaitable, Sequence
from urllib.parse import unquote, urlparse

from dropview.dispatch.descriptor import DropEntry, FileRef, InputDescriptor
from dropview.dispatch.errors import ClassificationError
from dropview.dispatch.registry import HandlerRegistry

logger = logging.getLogger(__name__)


def parse_dropped_paths(text: str) -> list[Path]:
    """Split pasted text into paths.

    Terminals paste a dropped file as its path, shell-quoted or escaped,
    several files separated by spaces or newlines. Some paste
    ``file://`` URIs instead.
    """
    paths: list[Path] = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            tokens = shlex.split(line)
        except ValueError:
            # Unbalanced quotes: take the line as one path.
            tokens = [line]
        for token in tokens:
            if token.startswith("file://"):
                token = unquote(urlparse(token).path)
            if token:
                paths.append(Path(token).expanduser())
    return paths


def is_openable_path(arg: object) -> bool:
    """Sanity check for an externally supplied path.

    Rejects non-strings, stray command-line flags, and anything that is
    not an existing regular file.
    """
    if not isinstance(arg, str) or not arg.strip():
        return False
    if arg.startswith("-"):
        return False
    return Path(arg).expanduser().is_file()


def _scan(directory: Path) -> tuple[list[Path], list[Path]]:
    """List one directory: (subdirectories, files), each in name order."""
    dirs: list[Path] = []
    files: list[Path] = []
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise ClassificationError(directory, e.strerror or str(e)) from e
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                dirs.append(Path(entry.path))
            else:
                files.append(Path(entry.path))
        except OSError:
            files.append(Path(entry.path))
    return dirs, files


async def _run_all(coros: Sequence[Awaitable[Any]]) -> list[Any]:
    """Run ``coros`` concurrently, results in order.

    The first failure cancels the others and is re-raised as itself,
    not wrapped in an exception group.
    """
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(c) for c in coros]
    except BaseExceptionGroup as group:
        error: BaseException = group
        while isinstance(error, BaseExceptionGroup):
            error = error.exceptions[0]
        raise error from None
    return [t.result() for t in tasks]


def _stat(path: Path) -> FileRef | None:
    try:
        return FileRef.from_path(path)
    except OSError:
        logger.debug("Cannot stat %s", path)
        return None


class _Partition:
    """Accumulates supported files and unsupported names."""

    def __init__(self) -> None:
        self.files: list[FileRef] = []
        self.unsupported: list[str] = []
        self.skipped = 0


class InputClassifier:
    """Classifies raw entries against a registry's per-file predicates."""

    def __init__(self, registry: HandlerRegistry) -> None:
        self.registry = registry

    async def classify(self, entries: Sequence[DropEntry]) -> InputDescriptor:
        """Classify a drop: expand directories, partition, count.

        Results keep drop order, a directory's files standing in for the
        directory itself.
        """
        groups = await _run_all([self._classify_entry(e) for e in entries])
        merged = _Partition()
        for group in groups:
            merged.files.extend(group.files)
            merged.unsupported.extend(group.unsupported)
            merged.skipped += group.skipped
        descriptor = InputDescriptor.build(merged.files, merged.unsupported, merged.skipped)
        logger.info(
            "Classified %d entries: %s, %d supported, %d unsupported, %d skipped",
            len(entries),
            descriptor.kind.value,
            len(descriptor.files),
            len(descriptor.unsupported_names),
            descriptor.skipped,
        )
        return descriptor

    def classify_open(self, path: Path | str) -> InputDescriptor:
        """Pre-classify an externally opened file as a single input.

        No directory expansion and no predicate filtering: the registry
        decides at resolution time.

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        return InputDescriptor.build([FileRef.from_path(Path(path).expanduser())])

    async def _classify_entry(self, entry: DropEntry) -> _Partition:
        if entry.is_dir:
            return await self._expand(entry.path)
        part = _Partition()
        await self._classify_file(entry.path, part)
        return part

    async def _classify_file(self, path: Path, part: _Partition) -> None:
        file = await asyncio.to_thread(_stat, path)
        if file is not None and self.registry.supports_file(file):
            part.files.append(file)
        else:
            part.unsupported.append(path.name)

    async def _expand(self, directory: Path) -> _Partition:
        """Recursively enumerate ``directory``, siblings in parallel."""
        part = _Partition()
        try:
            subdirs, files = await asyncio.to_thread(_scan, directory)
        except ClassificationError as e:
            logger.warning("Skipping unreadable directory: %s", e)
            part.skipped += 1
            return part

        file_parts = [_Partition() for _ in files]
        results = await _run_all([
            *(self._classify_file(path, p) for path, p in zip(files, file_parts)),
            *(self._expand(d) for d in subdirs),
        ])
        # Files first, then subdirectories, each in name order.
        for sub in [*file_parts, *results[len(files):]]:
            part.files.extend(sub.files)
            part.unsupported.extend(sub.unsupported)
            part.skipped += sub.skipped
        return part
