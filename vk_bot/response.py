"""回复内容。

Response 由处理器填写，Context.send() 时转换成 messages.send 的参数。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .keyboard import Keyboard

# photo-1_456239017 / doc123_456_abcdef
_ATTACHMENT_RE = re.compile(r"^([a-z_]+)(-?\d+)_(\d+)(?:_(\w+))?$")


@dataclass(frozen=True)
class Attachment:
    """附件的唯一标识（可选带 access_key）。"""

    type: str
    owner_id: int
    resource_id: int
    access_key: Optional[str] = None

    @classmethod
    def parse(cls, token: str) -> "Attachment":
        """从 `photo1_2` / `photo1_2_key` 形式的字符串解析。"""
        match = _ATTACHMENT_RE.match(token or "")
        if not match:
            raise ValueError(f"invalid attachment: `{token}`")
        type_, owner_id, resource_id, access_key = match.groups()
        return cls(type_, int(owner_id), int(resource_id), access_key)

    def __str__(self) -> str:
        token = f"{self.type}{self.owner_id}_{self.resource_id}"
        if self.access_key:
            token += f"_{self.access_key}"
        return token


@dataclass
class Response:
    """处理器当前准备发送的回复。

    - message 为空字符串表示"不带文字"
    - keyboard 为 None 表示不动用户当前的键盘；Keyboard.empty() 表示移除键盘
    """

    message: str = ""
    attachments: List[Attachment] = field(default_factory=list)
    keyboard: Optional[Keyboard] = None

    def set_message(self, message: str) -> "Response":
        self.message = message
        return self

    def push_attachment(self, attachment: Attachment) -> "Response":
        self.attachments.append(attachment)
        return self

    def set_attachments(self, attachments: Iterable[Attachment]) -> "Response":
        self.attachments = list(attachments)
        return self

    def set_keyboard(self, keyboard: Keyboard) -> "Response":
        self.keyboard = keyboard
        return self

    def remove_keyboard(self) -> "Response":
        self.keyboard = Keyboard.empty()
        return self

    def clear_keyboard(self) -> "Response":
        self.keyboard = None
        return self

    def attachment_param(self) -> str:
        return ",".join(str(a) for a in self.attachments)
