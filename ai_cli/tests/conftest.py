import httpx
import pytest

from ai_cli.config.settings import Settings


class MemoryStore:
    """内存中的凭证存储，记录每次写入。"""

    def __init__(self, value=None):
        self.value = value
        self.saved = []

    def load(self):
        return self.value

    def save(self, value):
        self.saved.append(value)
        self.value = value


class FakeCredentials:
    """按顺序返回预设新密钥的 CredentialProvider。"""

    def __init__(self, initial="key-1", refreshed=("key-2",), store=None):
        self.initial = initial
        self._refreshed = list(refreshed)
        self.store = store if store is not None else MemoryStore(initial)
        self.refresh_calls = 0

    def resolve(self):
        return self.initial

    def refresh(self):
        self.refresh_calls += 1
        value = self._refreshed.pop(0)
        self.store.save(value)
        return value


@pytest.fixture
def cfg(tmp_path):
    return Settings(
        api_base_url="https://api.test/api",
        api_key=None,
        image_output_dir=str(tmp_path),
        log_dir=str(tmp_path / "logs"),
        max_auth_retries=1,
    )


@pytest.fixture
def credentials():
    return FakeCredentials()


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))
