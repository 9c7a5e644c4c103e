"""Error types raised by the dispatch core and by viewers."""

from __future__ import annotations


class DropviewError(Exception):
    """Base class for dropview errors."""


class ClassificationError(DropviewError):
    """A directory entry could not be read during expansion."""

    def __init__(self, path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class AttachError(DropviewError):
    """A viewer failed to attach to its input.

    Subclasses tell the user why: the file could not be read, its
    content could not be decoded, or the viewer refuses it.
    """

    def __init__(self, label: str, reason: str) -> None:
        super().__init__(f"{label}: {reason}")
        self.label = label
        self.reason = reason


class ReadError(AttachError):
    """The file could not be read."""


class DecodeError(AttachError):
    """The file was read but its content is malformed."""


class UnsupportedError(AttachError):
    """The viewer cannot display this input (wrong kind, too large)."""


class InvariantViolation(DropviewError):
    """A lifecycle contract was broken by the caller."""
