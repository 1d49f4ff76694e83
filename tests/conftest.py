from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from core import client as client_module
from tests.fakes import FakeHttp
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> Iterator[type[FakeHttp]]:
    """Replace the client's transport with FakeHttp and start from an empty queue."""
    FakeHttp.responses = []
    FakeHttp.calls = []
    monkeypatch.setattr(client_module, "AsyncHttp", FakeHttp)
    yield FakeHttp
    FakeHttp.responses = []
    FakeHttp.calls = []


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    LoggerUtils.reset()
