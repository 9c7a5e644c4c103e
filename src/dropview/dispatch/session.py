"""Lifecycle of the one live viewer in a display container."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from dropview.dispatch.errors import InvariantViolation
from dropview.dispatch.viewer import Target, Viewer, describe

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    EMPTY = "empty"
    ATTACHING = "attaching"
    ACTIVE = "active"
    DETACHING = "detaching"


class ViewerSession:
    """Binding between one display container and at most one viewer.

    Created once per container and reused: ``start`` attaches a viewer,
    ``end`` detaches it. The caller must ``end`` (and await it) before
    the next ``start``.

    Transitions::

        EMPTY --start--> ATTACHING --ok--> ACTIVE --end--> DETACHING --> EMPTY
                             \\--fail--> EMPTY
    """

    def __init__(
        self,
        container: Any,
        on_change: Callable[[SessionState], None] | None = None,
    ) -> None:
        self.container = container
        self.on_change = on_change
        self.viewer: Viewer | None = None
        self.target: Target | None = None
        self._state = SessionState.EMPTY

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is SessionState.ACTIVE

    def _set_state(self, state: SessionState) -> None:
        logger.debug("Session %s -> %s", self._state.value, state.value)
        self._state = state
        if self.on_change is not None:
            self.on_change(state)

    async def start(self, viewer: Viewer, target: Target) -> None:
        """Attach ``viewer`` to ``target`` inside the container.

        Raises:
            InvariantViolation: If the session is not empty.
            AttachError: If the viewer fails; the session is empty again.
        """
        if self._state is not SessionState.EMPTY:
            raise InvariantViolation(
                f"start() while session is {self._state.value}"
            )
        self._set_state(SessionState.ATTACHING)
        try:
            await viewer.attach(target, self.container)
        except BaseException:
            logger.debug("Attach of %s failed, cleaning up", describe(target))
            try:
                await viewer.detach()
            finally:
                self._set_state(SessionState.EMPTY)
            raise
        self.viewer = viewer
        self.target = target
        self._set_state(SessionState.ACTIVE)

    async def end(self) -> None:
        """Detach the current viewer. No-op when empty.

        The session is empty afterwards even if ``detach`` raises.
        """
        if self._state is SessionState.EMPTY:
            return
        if self._state is not SessionState.ACTIVE:
            raise InvariantViolation(
                f"end() while session is {self._state.value}"
            )
        viewer = self.viewer
        self._set_state(SessionState.DETACHING)
        try:
            if viewer is not None:
                await viewer.detach()
        finally:
            self.viewer = None
            self.target = None
            self._set_state(SessionState.EMPTY)
