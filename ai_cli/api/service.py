"""对外 API 服务模块。

提供 CLI 使用的简化接口：参数组合校验、模型选择，
以及把凭证在会话创建、对话、图片生成之间逐次传递的 AiCliService。
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, TextIO

import httpx

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import ValidationError
from ai_cli.domain.models import ChatReply, Conversation, ImageJob
from ai_cli.providers import ChatStreamer, ConversationSession, CredentialProvider, ImageGenerator, Speaker


@dataclass
class RunOptions:
    """CLI 解析得到的一次运行参数。model/max_words 为空时取配置默认值。"""

    prompt: Optional[str] = None
    model: Optional[str] = None
    max_words: Optional[int] = None
    interactive: bool = False
    voice_output: bool = False
    quiet: bool = False
    image_generation: bool = False
    size: Optional[str] = None
    quality: Optional[str] = None
    style: Optional[str] = None


def validate_flags(opts: RunOptions) -> None:
    """在任何网络请求之前检查互斥参数，所有问题一次性报告。"""

    errors: List[str] = []
    if opts.quiet and not opts.voice_output:
        errors.append("Quiet mode requires voice output to be enabled.")
    if opts.image_generation and opts.interactive:
        errors.append("Image generation is not compatible with interactive mode.")
    if opts.image_generation and opts.voice_output:
        errors.append("Image generation is not compatible with voice output mode.")
    if opts.image_generation and not (opts.prompt or "").strip():
        errors.append("No prompt provided for image generation.")
    if errors:
        raise ValidationError(code="INVALID_FLAGS", message="\nError: ".join(errors), errors=errors)


def resolve_model(opts: RunOptions, cfg=settings) -> str:
    if opts.model:
        return opts.model
    return cfg.default_image_model if opts.image_generation else cfg.default_model


def build_image_job(opts: RunOptions, cfg=settings) -> ImageJob:
    return ImageJob(
        model=resolve_model(opts, cfg),
        prompt=opts.prompt or "",
        size=opts.size or cfg.default_image_size,
        quality=opts.quality or cfg.default_image_quality,
        style=opts.style or cfg.default_image_style,
    )


class AiCliService:
    """一次进程运行内的请求编排。

    凭证在 login() 时解析，之后每次调用都把上一次调用最终使用的凭证传下去，
    这样 401 刷新得到的新密钥会被后续请求沿用。
    """

    def __init__(
        self,
        client: httpx.Client,
        credentials: CredentialProvider,
        speaker: Optional[Speaker] = None,
        cfg=settings,
        output: Optional[TextIO] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._credentials = credentials
        self._settings = cfg
        self._sessions = ConversationSession(client, credentials, cfg=cfg, now=now)
        self._streamer = ChatStreamer(client, credentials, speaker=speaker, cfg=cfg, output=output)
        self._images = ImageGenerator(client, credentials, cfg=cfg, output=output)
        self._credential: Optional[str] = None
        self._conversation: Optional[Conversation] = None

    @property
    def conversation(self) -> Optional[Conversation]:
        return self._conversation

    def login(self) -> None:
        self._credential = self._credentials.resolve()

    def start_conversation(self, seed_prompt: str = "") -> Conversation:
        conv, self._credential = self._sessions.create(self._require_credential(), seed_prompt)
        self._conversation = conv
        return conv

    def ask(self, prompt: str, opts: RunOptions) -> ChatReply:
        if self._conversation is None:
            raise ValidationError(code="NO_CONVERSATION", message="Conversation has not been started")
        reply, self._credential = self._streamer.send(
            self._require_credential(),
            self._conversation.id,
            prompt,
            resolve_model(opts, self._settings),
            opts.max_words or self._settings.max_words,
            quiet=opts.quiet,
            voice_enabled=opts.voice_output,
        )
        return reply

    def generate_image(self, job: ImageJob) -> Path:
        path, self._credential = self._images.generate(self._require_credential(), job)
        return path

    def _require_credential(self) -> str:
        if self._credential is None:
            self.login()
        return self._credential  # type: ignore[return-value]
