"""回复键盘。

示例：

    Keyboard(
        [
            [Button("A", Color.PRIMARY), Button("B")],
            [Button("C", Color.POSITIVE), Button("D", Color.NEGATIVE, '{"payload": "json"}')],
        ],
    )

显示效果：

            column 0    column 1
          +-----------+-----------+
    row 0 |     A     |     B     |
          +-----------+-----------+
    row 1 |     C     |     D     |
          +-----------+-----------+
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple


class Color(str, Enum):
    """按钮颜色。"""

    PRIMARY = "primary"
    DEFAULT = "default"
    NEGATIVE = "negative"
    POSITIVE = "positive"

    @classmethod
    def parse(cls, name: str) -> "Color":
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"unknown color: `{name}`") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Button:
    """键盘上的一个按钮。payload 是按下后随消息发回来的 JSON 字符串。"""

    label: str = "Button"
    color: Color = Color.DEFAULT
    payload: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        action: dict[str, Any] = {"type": "text", "label": self.label}
        if self.payload is not None:
            action["payload"] = self.payload
        return {"color": self.color.value, "action": action}


@dataclass(frozen=True)
class Keyboard:
    """由若干行 Button 组成的键盘。

    one_time=True 时，按下任意按钮后键盘就会收起。
    没有按钮的键盘发给用户就是"移除键盘"。
    """

    buttons: Tuple[Tuple[Button, ...], ...] = ()
    one_time: bool = False

    def __post_init__(self) -> None:
        # 接受 list，统一存成 tuple
        object.__setattr__(self, "buttons", tuple(tuple(row) for row in self.buttons))

    @classmethod
    def empty(cls) -> "Keyboard":
        return cls([], False)

    def is_empty(self) -> bool:
        return not any(self.buttons)

    def to_dict(self) -> dict[str, Any]:
        return {
            "one_time": self.one_time,
            "buttons": [[button.to_dict() for button in row] for row in self.buttons],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))
