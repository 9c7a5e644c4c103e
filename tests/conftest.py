from __future__ import annotations

import pytest

from dropview.dispatch.dispatcher import Dispatcher
from dropview.dispatch.registry import HandlerRegistry
from dropview.dispatch.session import ViewerSession
from fakes import (
    BrokenViewer,
    FakeContainer,
    FakeImageViewer,
    FakeListViewer,
    FakeTextViewer,
    FakeViewer,
    Notifications,
    SlowViewer,
)


@pytest.fixture(autouse=True)
def journal():
    FakeViewer.journal.clear()
    yield FakeViewer.journal
    FakeViewer.journal.clear()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    from dropview.utils.config import config_dir

    monkeypatch.setenv("DROPVIEW_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("DROPVIEW_DEBUG_LOG", raising=False)
    config_dir.cache_clear()
    yield
    config_dir.cache_clear()


@pytest.fixture
def registry() -> HandlerRegistry:
    reg = HandlerRegistry()
    for viewer_cls in (FakeImageViewer, BrokenViewer, SlowViewer, FakeTextViewer, FakeListViewer):
        reg.register_viewer(viewer_cls)
    return reg


@pytest.fixture
def container() -> FakeContainer:
    return FakeContainer()


@pytest.fixture
def states():
    return []


@pytest.fixture
def session(container, states) -> ViewerSession:
    return ViewerSession(container, on_change=states.append)


@pytest.fixture
def notes() -> Notifications:
    return Notifications()


@pytest.fixture
def dispatcher(registry, session, notes) -> Dispatcher:
    return Dispatcher(registry, session, notes)
