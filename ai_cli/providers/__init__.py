"""1min.ai 请求编排层。

该包下的模块负责：
- 定义外部能力协议 (base)：凭证存储、凭证来源、朗读。
- 解析与刷新 API 密钥 (credentials)，401 重试策略 (retry)。
- 会话创建 (conversation)、流式对话 (chat)、图片生成 (image)。
"""

from typing import Optional

from ai_cli.config.settings import settings
from ai_cli.infrastructure.storage.keyring_store import KeyringCredentialStore
from ai_cli.providers.base import CredentialProvider, CredentialStore, PromptFn, Speaker
from ai_cli.providers.chat import ChatStreamer
from ai_cli.providers.conversation import ConversationSession
from ai_cli.providers.credentials import InteractiveCredentialProvider, prompt_secret
from ai_cli.providers.image import ImageGenerator, derive_filename, extract_error_message
from ai_cli.providers.retry import call_with_credential_retry
from ai_cli.providers.transport import create_http_client


def create_credential_provider(
    cfg=settings,
    store: Optional[CredentialStore] = None,
    prompt_fn: PromptFn = prompt_secret,
) -> InteractiveCredentialProvider:
    """默认使用 keyring 存储，可传入其他 store（例如测试中的内存实现）。"""

    store = store or KeyringCredentialStore(cfg.keyring_service, cfg.keyring_username)
    return InteractiveCredentialProvider(store, prompt_fn=prompt_fn, api_key=cfg.api_key)


__all__ = [
    "ChatStreamer",
    "ConversationSession",
    "CredentialProvider",
    "CredentialStore",
    "ImageGenerator",
    "InteractiveCredentialProvider",
    "Speaker",
    "call_with_credential_retry",
    "create_credential_provider",
    "create_http_client",
    "derive_filename",
    "extract_error_message",
]
