"""配置模块。

所有配置集中在 BotSettings 中，从 config/bot_settings.json 加载。
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Optional

from .api import DEFAULT_API_VERSION, DEFAULT_BASE_URL


@dataclass(frozen=True)
class BotSettings:
    """机器人运行时配置（从 JSON 加载）。"""
    host: str = "127.0.0.1"
    port: int = 12345

    # VK / Callback API
    vk_token: str = ""
    confirmation_token: str = ""  # Callback API 设置页里的确认字符串
    group_id: int = 0
    secret: str = ""

    # API
    api_version: str = DEFAULT_API_VERSION
    api_base_url: str = DEFAULT_BASE_URL
    api_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"


def _read_json_file(path: Path) -> dict[str, Any]:
    """读取 JSON 文件为 dict；文件不存在则返回空 dict。"""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    return data if isinstance(data, dict) else {}


def load_settings(config_path: Optional[str] = None) -> BotSettings:
    """加载配置：仅从 JSON 配置文件读取，缺失的项用默认值。"""
    config: dict[str, Any] = {}
    if config_path:
        config = _read_json_file(Path(config_path))

    def pick(key: str, default: Any) -> Any:
        return config.get(key, default)

    def pick_int(key: str, default: int) -> int:
        try:
            val = config.get(key)
            return int(val) if val is not None else default
        except (TypeError, ValueError):
            return default

    def pick_float(key: str, default: float) -> float:
        try:
            val = config.get(key)
            return float(val) if val is not None else default
        except (TypeError, ValueError):
            return default

    return BotSettings(
        host=str(pick("host", BotSettings.host)),
        port=pick_int("port", BotSettings.port),
        vk_token=str(pick("vk_token", "")),
        confirmation_token=str(pick("confirmation_token", "")),
        group_id=pick_int("group_id", 0),
        secret=str(pick("secret", "")),
        api_version=str(pick("api_version", DEFAULT_API_VERSION)),
        api_base_url=str(pick("api_base_url", DEFAULT_BASE_URL)),
        api_timeout=pick_float("api_timeout", BotSettings.api_timeout),
        log_level=str(pick("log_level", "INFO")).upper().strip() or "INFO",
    )
