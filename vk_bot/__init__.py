"""VK 社区机器人（Callback API -> HTTP Server）

模块化结构：
- settings: 配置加载
- events: 事件类型
- request: Callback API 请求结构
- core: 处理器注册（构建器）
- router: 事件分发
- context / response / keyboard: 处理器使用的上下文与回复
- api: VK API 客户端
- server / bot: HTTP server 启动
"""

from .bot import Bot
from .context import Context
from .core import Core
from .events import Event
from .keyboard import Button, Color, Keyboard
from .response import Attachment, Response
from .router import Dispatcher, Handler, Tester

__all__ = [
    "Attachment",
    "Bot",
    "Button",
    "Color",
    "Context",
    "Core",
    "Dispatcher",
    "Event",
    "Handler",
    "Keyboard",
    "Response",
    "Tester",
]
