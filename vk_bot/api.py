"""VK API 客户端封装。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from .errors import VkApiError

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "5.131"
DEFAULT_BASE_URL = "https://api.vk.com/method/"


@dataclass
class VkApi:
    """VK API 客户端。

    整个进程共用一个 httpx.AsyncClient；同一个事件循环里并发调用是安全的。
    """

    token: str
    version: str = DEFAULT_API_VERSION
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    _client: Optional[httpx.AsyncClient] = field(default=None, init=False, repr=False)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            )
        return self._client

    async def call(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        """调用任意 API 方法，返回 response 字段。

        返回体带 error 时抛 VkApiError；网络错误按 httpx.HTTPError 原样抛出。
        """
        data = dict(params or {})
        data["access_token"] = self.token
        data["v"] = self.version

        client = self._get_client()
        resp = await client.post(method, data=data)
        resp.raise_for_status()
        body = resp.json()

        error = body.get("error")
        if error:
            code = error.get("error_code", -1)
            message = error.get("error_msg", "")
            logger.warning("[vk] %s failed: code=%s msg=%s", method, code, message)
            raise VkApiError(code, message, method)

        logger.debug("[vk] %s ok", method)
        return body.get("response")

    async def send(self, params: dict[str, Any]) -> Any:
        """messages.send"""
        return await self.call("messages.send", params)

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
