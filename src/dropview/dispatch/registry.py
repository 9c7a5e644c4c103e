"""Ordered handler registry: the first capable viewer wins."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from dropview.dispatch.descriptor import FileRef

if TYPE_CHECKING:
    from dropview.dispatch.viewer import Viewer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandlerRegistration:
    """One registered handler: a predicate and a viewer factory."""

    name: str
    can_handle: Callable[[Any], bool]
    factory: Callable[[], Viewer]
    accepts_lists: bool = False

    def matches(self, target: Any) -> bool:
        """True if this registration takes ``target``'s shape and accepts it."""
        is_file = isinstance(target, FileRef)
        if is_file == self.accepts_lists:
            return False
        return bool(self.can_handle(target))


class HandlerRegistry:
    """Ordered collection of handler registrations.

    Registrations are consulted in the order they were added and the
    first capable one wins. Overlapping capabilities are allowed.
    """

    def __init__(self) -> None:
        self._registrations: list[HandlerRegistration] = []

    def __len__(self) -> int:
        return len(self._registrations)

    @property
    def names(self) -> list[str]:
        return [r.name for r in self._registrations]

    def register(self, registration: HandlerRegistration) -> HandlerRegistration:
        """Append a registration."""
        self._registrations.append(registration)
        logger.debug("Registered handler %r (lists=%s)", registration.name, registration.accepts_lists)
        return registration

    def register_viewer(
        self,
        viewer_cls: type[Viewer],
        factory: Callable[[], Viewer] | None = None,
    ) -> type[Viewer]:
        """Register a Viewer subclass.

        The class's ``can_handle`` is the predicate; ``factory`` defaults
        to the class itself.
        """
        self.register(
            HandlerRegistration(
                name=viewer_cls.name,
                can_handle=viewer_cls.can_handle,
                factory=factory or viewer_cls,
                accepts_lists=viewer_cls.accepts_lists,
            )
        )
        return viewer_cls

    def find(self, target: Any) -> HandlerRegistration | None:
        """Return the first registration capable of ``target``."""
        for registration in self._registrations:
            if registration.matches(target):
                return registration
        return None

    def resolve(self, target: Any) -> Viewer | None:
        """Return a fresh viewer from the first capable registration."""
        registration = self.find(target)
        if registration is None:
            return None
        return registration.factory()

    def supports_file(self, file: FileRef) -> bool:
        """True if any per-file handler accepts ``file``."""
        return self.find(file) is not None
