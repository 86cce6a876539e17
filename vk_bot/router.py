"""事件路由（分发引擎）。

一条请求进来后的流程：
1) type 字符串 -> Event（不认识直接报错）
2) 新建 Context（缺少回复目标 ID 直接报错）
3) handle_event：
   - message_new 走"消息解析"子流程
   - 其它事件查 event_handlers，没有就落到 no_match
     （message_reply 例外：没有处理器就什么都不做，避免机器人自己的回复触发 no_match 再回复，死循环）

消息解析子流程，按固定优先级，命中即停：
    action -> payload(start / 静态 / 动态) -> 命令 -> 正则 -> no_match

Dispatcher 由 core.Core.build() 生成，生成后只读，可以被多个请求并发使用。
"""

from __future__ import annotations

import json
import logging
import re
from re import Pattern
from types import MappingProxyType
from typing import Awaitable, Callable, Iterable, Mapping, Optional, Tuple

from .context import Context, SendApi
from .events import Event, parse_event
from .request import CallbackRequest

logger = logging.getLogger(__name__)

Handler = Callable[[Context], Awaitable[None]]
Tester = Callable[[str], bool]


def command_pattern(cmd: str, cmd_prefix: str = "", group_id: Optional[int] = None) -> Pattern[str]:
    """构造命令匹配正则。

    文本开头可以先有一个 @社区 的提及（`[club123|@bot] `），然后是 前缀+命令名（可重复）。
    group_id 为 None 时任意社区 ID 都接受。
    """
    club = str(int(group_id)) if group_id is not None else r"\d+"
    return re.compile(
        r"^(?:\[club" + club + r"\|[^\]]*\]\s*)?(?:" + re.escape(cmd_prefix) + re.escape(cmd) + r")+"
    )


def is_start_payload(payload: str) -> bool:
    """判断是否为"开始"按钮的 payload：{"command": "start"}。"""
    try:
        data = json.loads(payload)
    except ValueError:
        return False
    return isinstance(data, dict) and data.get("command") == "start"


class Dispatcher:
    """只读的处理器表 + 分发逻辑。"""

    def __init__(
        self,
        *,
        event_handlers: Mapping[Event, Handler],
        static_payload_handlers: Mapping[str, Handler],
        dyn_payload_handlers: Iterable[Tuple[Tester, Handler]],
        command_handlers: Mapping[str, Handler],
        regex_handlers: Iterable[Tuple[Pattern[str], Handler]],
        cmd_prefix: Optional[str] = None,
        group_id: Optional[int] = None,
    ):
        self._cmd_prefix = cmd_prefix or ""
        self._group_id = group_id
        self._event_handlers = MappingProxyType(dict(event_handlers))
        self._static_payload_handlers = MappingProxyType(dict(static_payload_handlers))
        self._dyn_payload_handlers = tuple(dyn_payload_handlers)
        self._command_handlers = MappingProxyType(dict(command_handlers))
        self._regex_handlers = tuple(regex_handlers)
        # 命令正则在这里一次性编译好
        self._command_matchers = tuple(
            (name, command_pattern(name, self._cmd_prefix, group_id), handler)
            for name, handler in self._command_handlers.items()
        )

    @property
    def cmd_prefix(self) -> str:
        return self._cmd_prefix

    @property
    def group_id(self) -> Optional[int]:
        return self._group_id

    @property
    def event_handlers(self) -> Mapping[Event, Handler]:
        return self._event_handlers

    @property
    def command_handlers(self) -> Mapping[str, Handler]:
        return self._command_handlers

    # ---------- 入口 ----------

    async def dispatch(self, request: CallbackRequest, api: SendApi) -> None:
        """处理一条已通过校验的请求。

        UnknownEventError / MissingFieldError 会直接抛给调用方。
        """
        event = parse_event(request.type)
        ctx = Context(event, request.object, api)
        logger.debug("[dispatch] event=%s peer=%s", event.value, ctx.peer_id)
        await self.handle_event(event, ctx)

    async def handle_event(self, event: Event, ctx: Context) -> None:
        if event is Event.MESSAGE_NEW:
            await self._handle_message_new(ctx)
            return

        handler = self._event_handlers.get(event)
        if handler is not None:
            ctx.event = event
            await handler(ctx)
            return

        if event is Event.NO_MATCH:
            logger.debug("[dispatch] no_match without handler, ignored")
            return
        if event is Event.MESSAGE_REPLY:
            logger.debug("[dispatch] message_reply without handler, ignored")
            return

        logger.debug("[dispatch] no handler for %s, falling back to no_match", event.value)
        await self.handle_event(Event.NO_MATCH, ctx)

    # ---------- message_new ----------

    async def _handle_message_new(self, ctx: Context) -> None:
        obj = ctx.object
        if obj.has_action:
            logger.debug("[dispatch] service action: %s", obj.action)
            await self.handle_event(Event.SERVICE_ACTION, ctx)
            return

        if obj.payload is not None:
            if is_start_payload(obj.payload):
                logger.debug("[dispatch] start payload")
                await self.handle_event(Event.START, ctx)
                return
            handler = self.find_payload_handler(obj.payload)
            if handler is not None:
                logger.debug("[dispatch] payload matched: %s", obj.payload)
                await handler(ctx)
                return

        if obj.text is not None:
            handler = self.find_command_handler(obj.text)
            if handler is None:
                handler = self.find_regex_handler(obj.text)
            if handler is not None:
                await handler(ctx)
                return

        await self.handle_event(Event.NO_MATCH, ctx)

    # ---------- 纯匹配（无副作用） ----------

    def find_payload_handler(self, payload: str) -> Optional[Handler]:
        """先精确匹配静态 payload，再按注册顺序试动态 payload。"""
        handler = self._static_payload_handlers.get(payload)
        if handler is not None:
            return handler
        for tester, handler in self._dyn_payload_handlers:
            if tester(payload):
                return handler
        return None

    def find_command_handler(self, text: str) -> Optional[Handler]:
        for name, pattern, handler in self._command_matchers:
            if pattern.match(text):
                logger.debug("[dispatch] command matched: %s", name)
                return handler
        return None

    def find_regex_handler(self, text: str) -> Optional[Handler]:
        for pattern, handler in self._regex_handlers:
            if pattern.search(text):
                logger.debug("[dispatch] regex matched: %s", pattern.pattern)
                return handler
        return None

    def __repr__(self) -> str:
        return (
            f"Dispatcher(events={len(self._event_handlers)}, "
            f"payloads={len(self._static_payload_handlers)}+{len(self._dyn_payload_handlers)}, "
            f"commands={len(self._command_handlers)}, regexes={len(self._regex_handlers)})"
        )


__all__ = ["Dispatcher", "Handler", "Tester", "command_pattern", "is_start_payload"]
