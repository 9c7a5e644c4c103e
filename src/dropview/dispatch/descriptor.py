"""Normalized inputs: file references, drop entries and descriptors."""

from __future__ import annotations

import errno
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Sequence

from dropview.utils.file_info import guess_content_type


@dataclass(frozen=True)
class FileRef:
    """A file offered to the viewers."""

    path: Path
    name: str
    size: int
    last_modified: float
    content_type: str

    @classmethod
    def from_path(cls, path: Path | str) -> FileRef:
        """Stat ``path`` into a reference.

        Raises:
            OSError: If it cannot be stat'ed or is not a regular file.
        """
        path = Path(path)
        st = path.stat()
        if not stat.S_ISREG(st.st_mode):
            raise OSError(errno.EINVAL, "Not a regular file", str(path))
        return cls(
            path=path,
            name=path.name,
            size=st.st_size,
            last_modified=st.st_mtime,
            content_type=guess_content_type(path.name),
        )

    @property
    def suffix(self) -> str:
        return Path(self.name).suffix.lower()

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True)
class DropEntry:
    """One item of a drop event, tagged directory or file."""

    path: Path
    is_dir: bool

    @classmethod
    def from_path(cls, path: Path | str) -> DropEntry:
        path = Path(path)
        # Directory symlinks are treated as plain entries, never expanded.
        is_dir = path.is_dir() and not os.path.islink(path)
        return cls(path=path, is_dir=is_dir)

    @property
    def name(self) -> str:
        return self.path.name


class DescriptorKind(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    EMPTY = "empty"
    REJECTED = "rejected"


@dataclass(frozen=True)
class InputDescriptor:
    """Classified result of one drop or open event.

    ``files`` and ``unsupported_names`` keep drop order. ``skipped``
    counts directories that could not be read while expanding.
    """

    kind: DescriptorKind
    files: tuple[FileRef, ...] = ()
    unsupported_names: tuple[str, ...] = ()
    skipped: int = 0

    @classmethod
    def build(
        cls,
        files: Sequence[FileRef],
        unsupported: Sequence[str] = (),
        skipped: int = 0,
    ) -> InputDescriptor:
        """Derive ``kind`` from the partition."""
        files = tuple(files)
        unsupported = tuple(unsupported)
        if len(files) == 1:
            kind = DescriptorKind.SINGLE
        elif len(files) > 1:
            kind = DescriptorKind.MULTIPLE
        elif unsupported:
            kind = DescriptorKind.REJECTED
        else:
            kind = DescriptorKind.EMPTY
        return cls(kind=kind, files=files, unsupported_names=unsupported, skipped=skipped)

    @property
    def dispatchable(self) -> bool:
        return self.kind in (DescriptorKind.SINGLE, DescriptorKind.MULTIPLE)

    @property
    def target(self) -> FileRef | tuple[FileRef, ...]:
        """What handlers are resolved against: one file, or the file list."""
        if self.kind is DescriptorKind.SINGLE:
            return self.files[0]
        if self.kind is DescriptorKind.MULTIPLE:
            return self.files
        raise ValueError(f"{self.kind.value} descriptor has no target")

    @property
    def label(self) -> str:
        """Short human description of the target."""
        if len(self.files) == 1:
            return self.files[0].name
        return f"{len(self.files)} files"
