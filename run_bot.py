"""启动入口。

本项目作为 VK Callback API 的 HTTP Server：
- 在社区设置 -> Callback API 里把地址指向 http://<host>:<port>/
- 本脚本组装处理器并启动 server
"""

from __future__ import annotations

from pathlib import Path

from vk_bot import Bot, Button, Color, Context, Core, Event, Keyboard
from vk_bot.logging import setup_logger
from vk_bot.settings import load_settings


KEYBOARD = Keyboard(
    [[Button("A", Color.PRIMARY), Button("B", Color.DEFAULT, '{"a":"b"}')]],
    one_time=False,
)


def simple_handler(message: str):
    """回复一条固定文字的处理器。"""
    async def _handler(ctx: Context) -> None:
        ctx.response.set_message(message)
        await ctx.send()

    return _handler


async def _show_keyboard(ctx: Context) -> None:
    ctx.response.set_message("Here you go:").set_keyboard(KEYBOARD)
    await ctx.send()


def build_core() -> Core:
    """处理器注册：payload > 命令 > 正则 > no_match。"""
    return (
        Core()
        .cmd_prefix("/")
        .cmd("keyboard", _show_keyboard)
        .regex("nice", simple_handler("Thanks!"))
        .on(Event.START, simple_handler("Hi! Type /keyboard to begin."))
        .on(Event.NO_MATCH, simple_handler("I don't understand..."))
        .payload('{"a":"b"}', simple_handler("You pressed button B!"))
        # 剩下的 payload 全收
        .dyn_payload(lambda _payload: True, simple_handler("Received a payload!"))
    )


def main() -> None:
    """读取配置并启动 server。"""
    default_config = Path(__file__).resolve().parent / "config" / "bot_settings.json"
    if not default_config.exists():
        raise FileNotFoundError(
            f"缺少配置文件: {default_config}. 请复制 config/bot_settings.example.json 为 bot_settings.json 并填写 token。"
        )

    settings = load_settings(str(default_config))
    setup_logger(settings.log_level)
    Bot(settings, build_core()).start()


if __name__ == "__main__":
    main()
