"""异常类型。

分两大类：
- ConfigurationError：注册处理器阶段（启动时）出错，进程应直接启动失败
- DispatchError：处理单条请求时出错，只影响这一条请求
"""

from __future__ import annotations


class VkBotError(Exception):
    """本项目所有异常的基类。"""


class ConfigurationError(VkBotError):
    """处理器注册阶段的配置错误。"""


class DuplicateHandlerError(ConfigurationError):
    """同一个 key（事件/payload/命令）重复注册。"""


class ReservedEventError(ConfigurationError):
    """试图覆盖内部保留的事件（message_new）。"""


class InvalidPatternError(ConfigurationError):
    """正则表达式无法编译。"""


class DispatchError(VkBotError):
    """单条请求无法分发。"""


class UnknownEventError(DispatchError):
    """未知的事件类型字符串。"""

    def __init__(self, name: str):
        super().__init__(f"unknown event: `{name}`")
        self.name = name


class MissingFieldError(DispatchError):
    """事件对象缺少该事件类型必需的 ID 字段。"""

    def __init__(self, event: str, field_name: str):
        super().__init__(f"event `{event}` requires field `{field_name}`")
        self.event = event
        self.field_name = field_name


class MalformedRequestError(DispatchError):
    """Callback API 请求体结构不对。"""


class VkApiError(VkBotError):
    """VK API 返回了 error 对象。"""

    def __init__(self, code: int, message: str, method: str = ""):
        super().__init__(f"[{method or '?'}] error {code}: {message}")
        self.code = code
        self.message = message
        self.method = method
