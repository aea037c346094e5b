"""会话创建。

每次运行只创建一个服务端会话，标题中带有调用时刻的本地时间，
之后所有对话都复用返回的会话 id。
"""

from datetime import datetime
from typing import Callable, Tuple

import httpx

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import ApiError, NetworkError
from ai_cli.domain.models import CHAT_REQUEST_TYPE, Conversation, conversation_title
from ai_cli.infrastructure.logging.logger import logger
from ai_cli.providers.base import CredentialProvider
from ai_cli.providers.retry import call_with_credential_retry
from ai_cli.providers.transport import auth_headers, raise_for_api_status


OPERATION = "conversation"


class ConversationSession:
    def __init__(
        self,
        client: httpx.Client,
        credentials: CredentialProvider,
        cfg=settings,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._client = client
        self._credentials = credentials
        self._settings = cfg
        self._now = now

    def create(self, credential: str, seed_prompt: str = "") -> Tuple[Conversation, str]:
        """创建会话，返回 (会话, 最终使用的凭证)。

        seed_prompt 目前不发送给服务端，仅用于日志。
        """

        return call_with_credential_retry(
            lambda key: self._create_once(key, seed_prompt),
            credential,
            self._credentials,
            max_retries=self._settings.max_auth_retries,
            name=OPERATION,
        )

    def _create_once(self, credential: str, seed_prompt: str) -> Conversation:
        title = conversation_title(self._now())
        try:
            resp = self._client.post(
                self._settings.conversations_url,
                json={"type": CHAT_REQUEST_TYPE, "title": title},
                headers=auth_headers(credential),
            )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), operation=OPERATION)
        raise_for_api_status(resp, OPERATION)
        try:
            uuid = resp.json()["conversation"]["uuid"]
        except (ValueError, KeyError, TypeError):
            raise ApiError(
                code="API_ERROR",
                message=f"Unexpected {OPERATION} API response: {resp.text}",
                http_status=resp.status_code,
                operation=OPERATION,
                detail=resp.text,
            )
        logger.info(
            "conversation created",
            extra={"extra": {"conversation_id": uuid, "title": title, "seed_prompt_chars": len(seed_prompt)}},
        )
        return Conversation(id=str(uuid), title=title)
