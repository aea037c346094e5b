"""请求编排层依赖的外部能力协议。

HTTP 组件不直接依赖 keyring、终端或语音命令，而是依赖这些协议：

- CredentialStore: 凭证的安全持久化（load/save）。
- CredentialProvider: 解析与刷新 API 密钥，收到 401 时由重试策略调用。
- Speaker: 朗读回复文本。

测试中可以注入返回固定值的实现，而不必弹出交互提示。
"""

from typing import Callable, Optional, Protocol


PromptFn = Callable[[str], str]


class CredentialStore(Protocol):
    def load(self) -> Optional[str]:
        ...

    def save(self, value: str) -> None:
        ...


class CredentialProvider(Protocol):
    """API 密钥来源。

    - resolve(): 读取已保存的密钥，不存在时交互获取并保存。
    - refresh(): 无条件交互获取新密钥并保存，仅在鉴权失败时使用。
    """

    def resolve(self) -> str:
        ...

    def refresh(self) -> str:
        ...


class Speaker(Protocol):
    def speak(self, text: str) -> None:
        ...
