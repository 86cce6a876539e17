"""事件类型。

Callback API 推送的事件类型（type 字段）+ 解析 message_new 时派生出的事件。
- start / service_action：只在解析 message_new 时产生
- no_match：没有任何处理器命中时的兜底事件
"""

from __future__ import annotations

from enum import Enum

from .errors import UnknownEventError


class Event(str, Enum):
    """处理器可以订阅的事件。值就是 Callback API 里的字符串。"""

    MESSAGE_NEW = "message_new"
    MESSAGE_REPLY = "message_reply"
    MESSAGE_EDIT = "message_edit"
    MESSAGE_TYPING_STATE = "message_typing_state"
    MESSAGE_ALLOW = "message_allow"
    MESSAGE_DENY = "message_deny"

    START = "start"
    SERVICE_ACTION = "service_action"

    NO_MATCH = "no_match"

    @property
    def wire(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


_BY_WIRE = {event.value: event for event in Event}


def parse_event(name: str) -> Event:
    """把 wire 字符串转换成 Event；不认识就抛 UnknownEventError。"""
    try:
        return _BY_WIRE[name]
    except (KeyError, TypeError):
        raise UnknownEventError(str(name)) from None
