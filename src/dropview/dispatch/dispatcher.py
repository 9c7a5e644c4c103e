"""Routes each new input to a viewer session."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from dropview.dispatch.classifier import InputClassifier, is_openable_path
from dropview.dispatch.descriptor import DescriptorKind, DropEntry, FileRef, InputDescriptor
from dropview.dispatch.errors import AttachError
from dropview.dispatch.registry import HandlerRegistry
from dropview.dispatch.session import ViewerSession

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Fire-and-forget sink for user-facing messages (``App.notify`` fits)."""

    def __call__(self, message: str, *, severity: str = "information") -> None: ...


def unsupported_message(names: Sequence[str]) -> str:
    if len(names) == 1:
        return f"1 file type unsupported: {names[0]}"
    return f"{len(names)} file types unsupported"


class Dispatcher:
    """Routes classified input to a viewer session.

    Every public call is serialized: a call arriving while another is in
    flight waits for it to finish, in arrival order. When a call returns
    the session is either active with a working viewer or empty.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        session: ViewerSession,
        notify: Notifier,
        classifier: InputClassifier | None = None,
    ) -> None:
        self.registry = registry
        self.session = session
        self.notify = notify
        self.classifier = classifier or InputClassifier(registry)
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def handle(self, entries: Sequence[DropEntry]) -> None:
        """Handle a drop of files and directories."""
        async with self._lock:
            try:
                descriptor = await self.classifier.classify(entries)
            except Exception as e:
                logger.exception("Classification failed")
                self.notify(f"Could not read dropped items: {e}", severity="error")
                return

            self._report_rejects(descriptor)
            if not descriptor.dispatchable:
                if descriptor.kind is DescriptorKind.EMPTY and not descriptor.skipped:
                    self.notify("Nothing to open", severity="information")
                return
            await self._dispatch(descriptor)

    async def open_path(self, arg: object) -> None:
        """Handle an externally invoked open ("open with", command line)."""
        async with self._lock:
            if not is_openable_path(arg):
                logger.warning("Ignoring open request for %r", arg)
                self.notify(f"Not a file: {arg}", severity="warning")
                return
            try:
                descriptor = self.classifier.classify_open(arg)
            except OSError as e:
                logger.warning("Cannot open %s: %s", arg, e)
                self.notify(f"Could not open {arg}: {e.strerror or e}", severity="error")
                return
            await self._dispatch(descriptor)

    async def open_file(self, file: FileRef) -> None:
        """Open one already-known file, e.g. picked from a file list."""
        async with self._lock:
            await self._dispatch(InputDescriptor.build([file]))

    async def close(self) -> None:
        """End the current session (user-triggered close)."""
        async with self._lock:
            await self._end_session()

    def _report_rejects(self, descriptor: InputDescriptor) -> None:
        if descriptor.unsupported_names:
            self.notify(unsupported_message(descriptor.unsupported_names), severity="warning")
        if descriptor.skipped:
            noun = "entry" if descriptor.skipped == 1 else "entries"
            self.notify(f"{descriptor.skipped} {noun} could not be read", severity="warning")

    async def _end_session(self) -> None:
        try:
            await self.session.end()
        except Exception as e:
            logger.exception("Detach failed")
            self.notify(f"Viewer did not close cleanly: {e}", severity="error")

    async def _dispatch(self, descriptor: InputDescriptor) -> None:
        target = descriptor.target
        await self._end_session()

        try:
            viewer = self.registry.resolve(target)
        except Exception as e:
            logger.exception("Handler resolution failed for %s", descriptor.label)
            self.notify(f"Could not open {descriptor.label}: {e}", severity="error")
            return
        if viewer is None:
            logger.info("No viewer for %s", descriptor.label)
            self.notify(f"No viewer available for {descriptor.label}", severity="warning")
            return

        logger.info("Opening %s with %s", descriptor.label, type(viewer).__name__)
        try:
            await self.session.start(viewer, target)
        except AttachError as e:
            logger.warning("Attach failed: %s", e)
            self.notify(f"Could not open {e.label}: {e.reason}", severity="error")
        except Exception as e:
            logger.exception("Unexpected error opening %s", descriptor.label)
            self.notify(f"Could not open {descriptor.label}: {e}", severity="error")
