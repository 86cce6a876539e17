"""Pytest fixtures shared by the test modules."""

from __future__ import annotations

from typing import Any

import pytest

from vk_bot.context import Context
from vk_bot.request import CallbackRequest, EventObject


class FakeApi:
    """Records every messages.send call instead of hitting the network."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send(self, params: dict[str, Any]) -> Any:
        self.sent.append(params)
        return len(self.sent)

    async def aclose(self) -> None:
        return None


class Recorder:
    """Builds handlers that log their name and the context they were called with."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.contexts: list[Context] = []

    def handler(self, name: str):
        async def _handler(ctx: Context) -> None:
            self.calls.append(name)
            self.contexts.append(ctx)

        return _handler


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


def make_request(type_: str = "message_new", group_id: int = 1, **obj: Any) -> CallbackRequest:
    obj.setdefault("peer_id", 2000000001)
    return CallbackRequest(type=type_, group_id=group_id, object=EventObject.from_dict(obj))
