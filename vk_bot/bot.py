"""Bot：把配置、API 客户端、Dispatcher、HTTP server 组装到一起。"""

from __future__ import annotations

import logging
from typing import Optional

from aiohttp import web

from .api import VkApi
from .core import Core
from .server import create_app, run_server
from .settings import BotSettings

logger = logging.getLogger(__name__)


class Bot:
    """一个 VK 社区机器人。

    Core 在这里 build 成只读的 Dispatcher；之后只读不写。
    """

    def __init__(self, settings: BotSettings, core: Core, api: Optional[VkApi] = None) -> None:
        self.settings = settings
        self.api = api or VkApi(
            token=settings.vk_token,
            version=settings.api_version,
            base_url=settings.api_base_url,
            timeout=settings.api_timeout,
        )
        self.dispatcher = core.build(group_id=settings.group_id or None)

    def make_app(self) -> web.Application:
        app = create_app(self.settings, self.dispatcher, self.api)
        app.on_cleanup.append(self._close_api)
        return app

    async def _close_api(self, _app: web.Application) -> None:
        await self.api.aclose()

    def start(self) -> None:
        """启动 HTTP server，阻塞直到进程退出。"""
        logger.info("starting bot for group %s", self.settings.group_id)
        run_server(self.make_app(), self.settings)
