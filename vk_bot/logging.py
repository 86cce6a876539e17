"""日志配置模块。

统一配置项目日志，使用 logger 而非 print。
"""

import logging
import sys

# 日志格式
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(level=logging.INFO) -> logging.Logger:
    """初始化根 logger，输出到 stdout。

    参数:
        level: 日志级别，int 或 "DEBUG"/"INFO" 这样的名字

    返回:
        已配置的根 logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # 避免重复添加处理器
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)

    # httpx 每个请求都打 INFO，太吵
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    return root
