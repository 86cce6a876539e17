"""单条事件的执行上下文。

每条请求新建一个 Context，处理器结束后丢弃；不同请求之间不共享任何可变状态。
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional, Protocol

from .errors import MissingFieldError
from .events import Event
from .request import EventObject
from .response import Response

logger = logging.getLogger(__name__)

# 回复目标取自哪个字段；没列出来的事件都用 peer_id
_TARGET_FIELD = {
    Event.MESSAGE_ALLOW: "user_id",
    Event.MESSAGE_DENY: "user_id",
    Event.MESSAGE_TYPING_STATE: "from_id",
}

_RANDOM_ID_MAX = 2**31 - 1


class SendApi(Protocol):
    """Context 只依赖一个 send(params) 能力（见 api.VkApi）。"""

    async def send(self, params: dict[str, Any]) -> Any: ...


class Context:
    """处理器拿到的上下文：事件、原始 object、API、待发送的 Response。"""

    def __init__(self, event: Event, obj: EventObject, api: SendApi):
        field_name = _TARGET_FIELD.get(event, "peer_id")
        peer_id: Optional[int] = getattr(obj, field_name)
        if peer_id is None:
            raise MissingFieldError(event.value, field_name)

        self.event = event
        self.object = obj
        self.api = api
        self.peer_id: int = peer_id
        self.response = Response()

    @property
    def text(self) -> Optional[str]:
        return self.object.text

    @property
    def payload(self) -> Optional[str]:
        return self.object.payload

    def send_params(self) -> dict[str, Any]:
        """把 Response 转成 messages.send 的参数；空字段不带。"""
        params: dict[str, Any] = {
            "peer_id": self.peer_id,
            "random_id": random.randint(0, _RANDOM_ID_MAX),
        }
        response = self.response
        if response.message:
            params["message"] = response.message
        if response.attachments:
            params["attachment"] = response.attachment_param()
        if response.keyboard is not None:
            params["keyboard"] = response.keyboard.to_json()
        return params

    async def send(self) -> Any:
        """发送当前 Response。不会清空 Response，可以改完再发一次。"""
        params = self.send_params()
        logger.debug("[send] peer=%s keys=%s", self.peer_id, sorted(params))
        return await self.api.send(params)

    def __repr__(self) -> str:
        return f"Context(event={self.event.value!r}, peer_id={self.peer_id!r})"
