"""Callback API 请求结构。

VK 推送的请求体大致是：
    {"type": "message_new", "group_id": 1, "secret": "...", "object": {...}}

object 里我们只关心几个字段（from_id/peer_id/user_id/text/payload/action），
其余字段原样放进 extra，处理器需要时自己取。
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import MalformedRequestError

_KNOWN_FIELDS = ("from_id", "peer_id", "user_id", "text", "payload", "action")


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_payload(value: Any) -> Optional[str]:
    """payload 在协议里是 JSON 字符串；偶尔会直接给成对象，这里统一成紧凑 JSON 字符串。"""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


@dataclass
class EventObject:
    """请求中的 object 字段。"""

    from_id: Optional[int] = None
    peer_id: Optional[int] = None
    user_id: Optional[int] = None
    text: Optional[str] = None
    payload: Optional[str] = None
    action: Any = None
    # action 即使是 null 也算"存在"
    has_action: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "EventObject":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise MalformedRequestError("`object` must be a JSON object")

        extra: dict[str, Any] = {}
        # 新版 API 的 message_new：{"message": {...}, "client_info": {...}}
        message = data.get("message")
        if isinstance(message, dict):
            extra.update({k: v for k, v in data.items() if k != "message"})
            data = message

        extra.update({k: v for k, v in data.items() if k not in _KNOWN_FIELDS})
        text = data.get("text")

        return cls(
            from_id=_to_int(data.get("from_id")),
            peer_id=_to_int(data.get("peer_id")),
            user_id=_to_int(data.get("user_id")),
            text=text if isinstance(text, str) else None,
            payload=_to_payload(data.get("payload")),
            action=data.get("action"),
            has_action="action" in data,
            extra=extra,
        )


@dataclass
class CallbackRequest:
    """一条 Callback API 请求。"""

    type: str
    group_id: int
    secret: Optional[str] = None
    object: EventObject = field(default_factory=EventObject)

    @classmethod
    def from_dict(cls, data: Any) -> "CallbackRequest":
        """校验并解析请求体；结构不对抛 MalformedRequestError。"""
        if not isinstance(data, dict):
            raise MalformedRequestError("request body must be a JSON object")

        type_ = data.get("type")
        if not isinstance(type_, str) or not type_:
            raise MalformedRequestError("missing or invalid `type`")

        group_id = _to_int(data.get("group_id"))
        if group_id is None:
            raise MalformedRequestError("missing or invalid `group_id`")

        secret = data.get("secret")
        if secret is not None and not isinstance(secret, str):
            raise MalformedRequestError("invalid `secret`")

        return cls(
            type=type_,
            group_id=group_id,
            secret=secret,
            object=EventObject.from_dict(data.get("object")),
        )
