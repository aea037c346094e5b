"""请求与结果数据模型。

本模块定义 1min.ai 各接口在项目内部的统一结构：

- Conversation: 服务端会话（只保存 id 与标题）。
- ChatExchange / ChatReply: 一次流式对话的输入与累积结果。
- ImageJob / ImageRecord: 图片生成任务的输入与服务端任务记录。

HTTP 客户端只依赖这些模型，并负责在 API JSON 与模型之间做转换。
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


CHAT_REQUEST_TYPE = "CHAT_WITH_AI"
IMAGE_REQUEST_TYPE = "IMAGE_GENERATOR"
JOB_SUCCESS = "SUCCESS"
TITLE_FORMAT = "%Y/%m/%d at %I:%M:%S %p"


def conversation_title(now: datetime) -> str:
    """根据本地时间生成会话标题，如 ``API - 2024/03/01 at 09:05:07 PM``。"""

    return f"API - {now.strftime(TITLE_FORMAT)}"


@dataclass(frozen=True)
class Conversation:
    """服务端会话，id 获取后在本次运行内不再变化。"""

    id: str
    title: str


@dataclass
class ChatExchange:
    """一次对话请求。

    max_words 只是给服务端的长度提示；混合模式与联网搜索固定关闭。
    """

    conversation_id: str
    model: str
    prompt: str
    max_words: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": CHAT_REQUEST_TYPE,
            "conversationId": self.conversation_id,
            "model": self.model,
            "promptObject": {
                "prompt": self.prompt,
                "isMixed": False,
                "webSearch": False,
                "numOfSite": 0,
                "maxWord": self.max_words,
            },
        }


@dataclass
class ChatReply:
    """流式回复的累积结果，fragments 保持到达顺序。"""

    model: str
    fragments: List[str] = field(default_factory=list)

    @property
    def full_response(self) -> str:
        return "".join(self.fragments)


@dataclass
class ImageJob:
    """图片生成任务。每次只请求一张图片（n=1）。"""

    model: str
    prompt: str
    size: str
    quality: str
    style: str
    n: int = 1

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": IMAGE_REQUEST_TYPE,
            "model": self.model,
            "promptObject": {
                "prompt": self.prompt,
                "n": self.n,
                "size": self.size,
                "quality": self.quality,
                "style": self.style,
            },
        }


@dataclass
class ImageRecord:
    """服务端返回的任务记录（aiRecord）。"""

    status: str
    temporary_url: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == JOB_SUCCESS

    @classmethod
    def from_response(cls, data: Any) -> "ImageRecord":
        """解析 features 接口返回体，结构不符合预期时抛出 ValueError。"""

        record = data.get("aiRecord") if isinstance(data, dict) else None
        if not isinstance(record, dict):
            raise ValueError("missing aiRecord object")
        status = record.get("status") or ""
        url = record.get("temporaryUrl") or ""
        if not isinstance(status, str) or not isinstance(url, str):
            raise ValueError("aiRecord status and temporaryUrl must be strings")
        return cls(status=status, temporary_url=url)
