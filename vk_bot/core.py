"""处理器注册（构建器）。

用法：

    core = (
        Core()
        .cmd_prefix("/")
        .cmd("keyboard", show_keyboard)
        .regex("nice", thanks)
        .on(Event.NO_MATCH, dont_understand)
        .payload('{"a":"b"}', button_b)
        .dyn_payload(lambda payload: True, any_payload)
    )
    dispatcher = core.build(group_id=1)

所有注册错误都在这里（启动阶段）抛出，不会拖到处理请求时才暴露。
build() 得到的 Dispatcher 是只读的，之后再改 Core 不会影响它。
"""

from __future__ import annotations

import logging
import re
from re import Pattern
from typing import Dict, List, Optional, Tuple, Union

from .errors import (
    ConfigurationError,
    DuplicateHandlerError,
    InvalidPatternError,
    ReservedEventError,
    UnknownEventError,
)
from .events import Event, parse_event
from .router import Dispatcher, Handler, Tester

logger = logging.getLogger(__name__)


def _ensure_callable(kind: str, value: object) -> None:
    if not callable(value):
        raise ConfigurationError(f"{kind} must be callable, got {type(value).__name__}")


class Core:
    """收集用户注册的各种处理器。"""

    def __init__(self) -> None:
        self._cmd_prefix: Optional[str] = None
        self._event_handlers: Dict[Event, Handler] = {}
        self._static_payload_handlers: Dict[str, Handler] = {}
        self._dyn_payload_handlers: List[Tuple[Tester, Handler]] = []
        self._command_handlers: Dict[str, Handler] = {}
        self._regex_handlers: List[Tuple[Pattern[str], Handler]] = []

    def cmd_prefix(self, prefix: str) -> "Core":
        """设置命令前缀；重复设置以最后一次为准。"""
        self._cmd_prefix = prefix
        return self

    def on(self, event: Union[Event, str], handler: Handler) -> "Core":
        """注册事件处理器。message_new 由内部解析，不能替换。"""
        if not isinstance(event, Event):
            try:
                event = parse_event(event)
            except UnknownEventError:
                raise ConfigurationError(
                    f"attempt to set up handler for unsupported event `{event}`"
                ) from None
        if event is Event.MESSAGE_NEW:
            raise ReservedEventError(
                f"`{event.value}` is internally defined and cannot be replaced"
            )
        if event in self._event_handlers:
            raise DuplicateHandlerError(f"attempt to set up duplicate handler for event `{event.value}`")
        _ensure_callable("handler", handler)
        self._event_handlers[event] = handler
        return self

    def payload(self, payload: str, handler: Handler) -> "Core":
        """注册静态 payload 处理器（字符串完全相等才命中）。"""
        if payload in self._static_payload_handlers:
            raise DuplicateHandlerError(f"attempt to set up duplicate handler for payload {payload!r}")
        _ensure_callable("handler", handler)
        self._static_payload_handlers[payload] = handler
        return self

    def dyn_payload(self, tester: Tester, handler: Handler) -> "Core":
        """注册动态 payload 处理器：按注册顺序，第一个 tester 返回 True 的命中。"""
        _ensure_callable("tester", tester)
        _ensure_callable("handler", handler)
        self._dyn_payload_handlers.append((tester, handler))
        return self

    def cmd(self, cmd: str, handler: Handler) -> "Core":
        """注册命令处理器（消息以 前缀+命令名 开头时命中）。"""
        if cmd in self._command_handlers:
            raise DuplicateHandlerError(f"attempt to set up duplicate handler for command `{cmd}`")
        _ensure_callable("handler", handler)
        self._command_handlers[cmd] = handler
        return self

    def regex(self, pattern: Union[str, Pattern[str]], handler: Handler) -> "Core":
        """注册正则处理器：按注册顺序，文本中任意位置匹配即命中。

        同样的正则可以注册多次，相当于多个独立的匹配器。
        """
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as e:
                raise InvalidPatternError(f"invalid regex {pattern!r}: {e}") from e
        elif not isinstance(pattern, Pattern) or not isinstance(pattern.pattern, str):
            # bytes 正则无法匹配 str 文本
            raise InvalidPatternError(f"regex must be a str pattern, got {pattern!r}")
        _ensure_callable("handler", handler)
        self._regex_handlers.append((pattern, handler))
        return self

    def build(self, group_id: Optional[int] = None) -> Dispatcher:
        """生成只读的 Dispatcher。

        group_id 用于匹配命令前的 `[club<group_id>|...]` 提及；不传则接受任意社区 ID。
        """
        dispatcher = Dispatcher(
            event_handlers=self._event_handlers,
            static_payload_handlers=self._static_payload_handlers,
            dyn_payload_handlers=self._dyn_payload_handlers,
            command_handlers=self._command_handlers,
            regex_handlers=self._regex_handlers,
            cmd_prefix=self._cmd_prefix,
            group_id=group_id,
        )
        logger.info("handlers ready: %r", dispatcher)
        return dispatcher
