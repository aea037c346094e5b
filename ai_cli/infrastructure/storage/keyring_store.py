from typing import Optional

import keyring
from keyring.errors import KeyringError

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import CredentialUnavailable


class KeyringCredentialStore:
    """基于系统 keyring 的凭证存储，API 密钥只保存在系统安全存储中。"""

    def __init__(self, service: Optional[str] = None, username: Optional[str] = None):
        self._service = service or settings.keyring_service
        self._username = username or settings.keyring_username

    def load(self) -> Optional[str]:
        try:
            value = keyring.get_password(self._service, self._username)
        except (KeyringError, RuntimeError, OSError) as e:
            raise CredentialUnavailable(code="CREDENTIAL_UNAVAILABLE", message=f"Cannot open keyring: {e}")
        return value or None

    def save(self, value: str) -> None:
        try:
            keyring.set_password(self._service, self._username, value)
        except (KeyringError, ValueError, RuntimeError, OSError) as e:
            raise CredentialUnavailable(code="CREDENTIAL_UNAVAILABLE", message=f"Cannot write keyring: {e}")

