"""The capability contract every viewer implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from dropview.dispatch.descriptor import FileRef

# A single file, or a list of files for list-capable viewers.
Target = FileRef | Sequence[FileRef]


def describe(target: Target) -> str:
    """Label a target for messages: the file name, or a file count."""
    if isinstance(target, FileRef):
        return target.name
    return f"{len(target)} files"


class Viewer(ABC):
    """A format-specific component that can test and render an input.

    Subclasses define:
        name: Unique identifier used in config and diagnostics.
        accepts_lists: True if ``can_handle`` takes a list of files
                       instead of a single file.

    Lifecycle: a factory produces a fresh instance with no side effects.
    ``attach`` is called at most once per instance; ``detach`` may be
    called any number of times, attached or not.
    """

    name: str = ""
    accepts_lists: bool = False

    @classmethod
    @abstractmethod
    def can_handle(cls, target: Any) -> bool:
        """Return True if this viewer can render ``target``. Must be pure."""
        ...

    @abstractmethod
    async def attach(self, target: Target, container: Any) -> None:
        """Render ``target`` inside ``container``.

        Raises:
            AttachError: On failure, with nothing left in ``container``.
            InvariantViolation: If this instance was attached before.
        """
        ...

    @abstractmethod
    async def detach(self) -> None:
        """Release everything ``attach`` acquired. Safe to repeat."""
        ...
