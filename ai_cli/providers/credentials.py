"""API 密钥的解析与刷新。

- resolve(): 显式配置 > keyring 中已保存的值 > 交互输入（输入后写回 keyring）。
- refresh(): 服务端返回 401 时调用，交互输入新密钥并写回 keyring。

密钥只在内存中传递，不写日志。
"""

from typing import Optional

from prompt_toolkit import prompt
from prompt_toolkit.validation import Validator

from ai_cli.infrastructure.logging.logger import logger
from ai_cli.providers.base import CredentialStore, PromptFn


MISSING_KEY_PROMPT = "API key not found. Please enter your 1min.ai API key"
INVALID_KEY_PROMPT = "Invalid API key. Please enter a new one"
CONFIGURE_KEY_PROMPT = "Please enter your 1min.ai API key"

_non_empty = Validator.from_callable(
    lambda text: bool(text.strip()),
    error_message="Value cannot be empty",
    move_cursor_to_end=True,
)


def prompt_secret(message: str) -> str:
    """在终端中隐藏输入地读取一个非空密钥。"""

    return prompt(f"{message}: ", is_password=True, validator=_non_empty).strip()


class InteractiveCredentialProvider:
    """从 CredentialStore 读取密钥，必要时通过 prompt_fn 交互获取。"""

    def __init__(
        self,
        store: CredentialStore,
        prompt_fn: PromptFn = prompt_secret,
        api_key: Optional[str] = None,
    ):
        self._store = store
        self._prompt = prompt_fn
        self._api_key = api_key

    def resolve(self) -> str:
        if self._api_key:
            return self._api_key
        stored = self._store.load()
        if stored:
            return stored
        logger.info("no stored credential, asking user")
        return self._ask_and_save(MISSING_KEY_PROMPT)

    def refresh(self) -> str:
        logger.warning("credential rejected, asking user for a new one")
        return self._ask_and_save(INVALID_KEY_PROMPT)

    def configure(self) -> str:
        return self._ask_and_save(CONFIGURE_KEY_PROMPT)

    def _ask_and_save(self, message: str) -> str:
        value = self._prompt(message).strip()
        while not value:
            value = self._prompt(message).strip()
        self._store.save(value)
        self._api_key = None
        return value
