"""Tests for the viewer session state machine."""

from __future__ import annotations

from pathlib import Path

import pytest

from dropview.dispatch.descriptor import FileRef
from dropview.dispatch.errors import DecodeError, InvariantViolation
from dropview.dispatch.session import SessionState, ViewerSession
from fakes import BrokenViewer, FakeContainer, FakeImageViewer


def ref(name: str) -> FileRef:
    return FileRef(path=Path(name), name=name, size=1, last_modified=0.0, content_type="")


async def test_new_session_is_empty(session):
    assert session.state is SessionState.EMPTY
    assert session.viewer is None
    assert not session.active


async def test_start_attaches_and_activates(session, container, states):
    viewer = FakeImageViewer()
    await session.start(viewer, ref("a.png"))
    assert session.state is SessionState.ACTIVE
    assert session.viewer is viewer
    assert session.target == ref("a.png")
    assert container.mounted == [viewer]
    assert states == [SessionState.ATTACHING, SessionState.ACTIVE]


async def test_end_detaches_and_empties(session, container, states):
    viewer = FakeImageViewer()
    await session.start(viewer, ref("a.png"))
    await session.end()
    assert session.state is SessionState.EMPTY
    assert session.viewer is None
    assert session.target is None
    assert container.clean
    assert states[-2:] == [SessionState.DETACHING, SessionState.EMPTY]


async def test_end_when_empty_is_noop(session, states):
    await session.end()
    assert session.state is SessionState.EMPTY
    assert states == []


async def test_start_while_active_is_refused(session, container):
    first = FakeImageViewer()
    await session.start(first, ref("a.png"))
    second = FakeImageViewer()
    with pytest.raises(InvariantViolation):
        await session.start(second, ref("b.png"))
    # The refused start left the live session untouched.
    assert session.viewer is first
    assert session.state is SessionState.ACTIVE
    assert second.attach_calls == 0
    assert container.mounted == [first]


async def test_failed_attach_cleans_up_and_reraises(session, container, states):
    viewer = BrokenViewer()
    with pytest.raises(DecodeError):
        await session.start(viewer, ref("x.bad"))
    assert session.state is SessionState.EMPTY
    assert session.viewer is None
    assert viewer.detach_calls == 1
    assert container.clean
    assert states == [SessionState.ATTACHING, SessionState.EMPTY]


async def test_session_reused_after_failure(session, container):
    with pytest.raises(DecodeError):
        await session.start(BrokenViewer(), ref("x.bad"))
    viewer = FakeImageViewer()
    await session.start(viewer, ref("a.png"))
    assert session.active
    assert container.mounted == [viewer]


async def test_detach_error_still_empties_session(container):
    class ExplodingDetach(FakeImageViewer):
        async def detach(self):
            await super().detach()
            raise RuntimeError("boom")

    session = ViewerSession(container)
    await session.start(ExplodingDetach(), ref("a.png"))
    with pytest.raises(RuntimeError):
        await session.end()
    assert session.state is SessionState.EMPTY
    assert session.viewer is None


async def test_session_without_callback():
    session = ViewerSession(FakeContainer())
    await session.start(FakeImageViewer(), ref("a.png"))
    await session.end()
    assert session.state is SessionState.EMPTY
