"""Callback API 的 HTTP 入口。

这里只负责：校验 secret / group_id，处理 confirmation，然后把请求交给 Dispatcher。
每个请求独立处理，一个请求出错不影响其它请求。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiohttp import web

from .errors import DispatchError, MalformedRequestError
from .request import CallbackRequest
from .settings import BotSettings

if TYPE_CHECKING:
    from .context import SendApi
    from .router import Dispatcher

logger = logging.getLogger(__name__)

# 每个 Callback API 请求都要回这个字符串
VK_OK = "ok"


class CallbackEndpoint:
    """POST / 接收 Callback API 事件。"""

    def __init__(self, settings: BotSettings, dispatcher: Dispatcher, api: SendApi) -> None:
        self.settings = settings
        self.dispatcher = dispatcher
        self.api = api

    def register(self, router: web.UrlDispatcher) -> None:
        router.add_post("/", self.handle)
        router.add_get("/", self._get)

    async def _get(self, _req: web.Request) -> web.Response:
        logger.debug("received a GET request")
        return web.Response(status=405)

    async def handle(self, req: web.Request) -> web.Response:
        try:
            body = await req.json()
        except ValueError as exc:
            logger.debug("received a POST request with invalid JSON: %s", exc)
            return web.Response(status=400, text="invalid json")

        try:
            request = CallbackRequest.from_dict(body)
        except MalformedRequestError as exc:
            logger.debug("received a malformed POST request: %s", exc)
            return web.Response(status=400, text=str(exc))

        if (request.secret or "") != self.settings.secret:
            logger.debug("received a POST request with invalid `secret`")
            return web.Response(status=400, text="invalid secret")
        if request.group_id != self.settings.group_id:
            logger.debug("received a POST request with invalid `group_id`")
            return web.Response(status=400, text="invalid group_id")

        if request.type == "confirmation":
            logger.debug("responded with confirmation token")
            return web.Response(text=self.settings.confirmation_token)

        try:
            await self.dispatcher.dispatch(request, self.api)
        except DispatchError as exc:
            logger.warning("cannot dispatch `%s`: %s", request.type, exc)
            return web.Response(status=400, text=str(exc))
        except Exception:
            logger.exception("handler failed for `%s`", request.type)
            return web.Response(status=500, text="handler error")

        return web.Response(text=VK_OK)


def create_app(settings: BotSettings, dispatcher: Dispatcher, api: SendApi) -> web.Application:
    app = web.Application()
    CallbackEndpoint(settings, dispatcher, api).register(app.router)
    return app


def run_server(app: web.Application, settings: BotSettings) -> None:
    """启动 HTTP server，并永久阻塞运行。"""
    logger.info("starting bot on http://%s:%s", settings.host, settings.port)
    web.run_app(app, host=settings.host, port=settings.port, print=None)
