"""流式对话。

本模块负责：

1. 把 ChatExchange 转成 features 接口（isStreaming=true）的请求体。
2. 按到达顺序逐块读取响应字节，UTF-8 解码（非法字节替换，不报错）。
3. 非 quiet 模式下每块立即写到标准输出并 flush；无论是否 quiet 都累积全文。
4. 流结束后按需把全文交给 Speaker 朗读。

401 由重试策略处理：刷新凭证后用同一会话 id 与提示词重发整个请求。
"""

import sys
from typing import Optional, TextIO, Tuple

import httpx

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import NetworkError, SpeechError
from ai_cli.domain.models import ChatExchange, ChatReply
from ai_cli.infrastructure.logging.logger import logger, redact
from ai_cli.providers.base import CredentialProvider, Speaker
from ai_cli.providers.retry import call_with_credential_retry
from ai_cli.providers.transport import auth_headers, raise_for_api_status


OPERATION = "features"


class ChatStreamer:
    def __init__(
        self,
        client: httpx.Client,
        credentials: CredentialProvider,
        speaker: Optional[Speaker] = None,
        cfg=settings,
        output: Optional[TextIO] = None,
    ):
        self._client = client
        self._credentials = credentials
        self._speaker = speaker
        self._settings = cfg
        self._output = output

    def send(
        self,
        credential: str,
        conversation_id: str,
        prompt: str,
        model: str,
        max_words: int,
        quiet: bool = False,
        voice_enabled: bool = False,
    ) -> Tuple[ChatReply, str]:
        """发送一条消息并消费流式回复，返回 (回复, 最终使用的凭证)。"""

        exchange = ChatExchange(
            conversation_id=conversation_id,
            model=model,
            prompt=prompt,
            max_words=max_words,
        )
        return call_with_credential_retry(
            lambda key: self._send_once(key, exchange, quiet, voice_enabled),
            credential,
            self._credentials,
            max_retries=self._settings.max_auth_retries,
            name=OPERATION,
        )

    def _send_once(self, credential: str, exchange: ChatExchange, quiet: bool, voice_enabled: bool) -> ChatReply:
        reply = ChatReply(model=exchange.model)
        out = self._output or sys.stdout
        logger.info(
            "chat request",
            extra={"extra": {
                "conversation_id": exchange.conversation_id,
                "model": exchange.model,
                "prompt": redact(exchange.prompt, self._settings),
            }},
        )
        try:
            with self._client.stream(
                "POST",
                self._settings.streaming_features_url,
                json=exchange.to_payload(),
                headers=auth_headers(credential),
            ) as resp:
                if not resp.is_success:
                    resp.read()
                    raise_for_api_status(resp, OPERATION)
                if not quiet:
                    out.write(f"AI({exchange.model}): ")
                    out.flush()
                for chunk in resp.iter_bytes():
                    text = chunk.decode("utf-8", errors="replace")
                    if not quiet:
                        out.write(text)
                        out.flush()
                    reply.fragments.append(text)
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), operation=OPERATION)
        if not quiet:
            out.write("\n")
            out.flush()

        logger.info(
            "chat response",
            extra={"extra": {
                "conversation_id": exchange.conversation_id,
                "chunks": len(reply.fragments),
                "response": redact(reply.full_response, self._settings),
            }},
        )
        if voice_enabled:
            if self._speaker is None:
                raise SpeechError(code="SPEECH_ERROR", message="Voice output requested but no speaker is configured")
            self._speaker.speak(reply.full_response)
        return reply
