"""配置管理模块。

支持从环境变量（AI_CLI_ 前缀）、.env 以及 config.yaml 加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("AI_CLI_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path.home() / ".config" / "ai-cli" / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- 服务端 ----
    api_base_url: str = Field(
        default="https://api.1min.ai/api",
        description="1min.ai API 基础URL",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="显式提供的 API 密钥；为空时从 keyring 读取",
    )
    http_timeout: float = Field(default=300.0, ge=1.0, description="HTTP 超时时间（秒）")
    trust_env: bool = Field(default=False, description="是否读取系统代理等环境配置")
    max_auth_retries: int = Field(
        default=1,
        ge=0,
        le=3,
        description="收到 401 后刷新凭证并重试的最大次数",
    )

    # ---- 对话 ----
    default_model: str = Field(default="o3-mini", description="默认对话模型")
    max_words: int = Field(default=500, ge=1, description="回复字数上限提示")

    # ---- 图片生成 ----
    default_image_model: str = Field(default="dall-e-3", description="默认图片模型")
    default_image_size: str = Field(default="1024x1024", description="1024x1024, 1024x1792, 1792x1024")
    default_image_quality: str = Field(default="standard", description="standard, hd")
    default_image_style: str = Field(default="vivid", description="vivid, natural")
    default_image_filename: str = Field(default="1minAI_output.png", description="无法从 URL 推断时的文件名")
    image_output_dir: str = Field(default=".", description="图片保存目录")

    # ---- 凭证 / 语音 ----
    keyring_service: str = Field(default="ai-cli", description="keyring 服务名")
    keyring_username: str = Field(default="user", description="keyring 用户名")
    speech_command: str = Field(default="say", description="朗读回复使用的命令")

    # ---- 日志 ----
    log_dir: str = Field(
        default_factory=lambda: str(Path.home() / ".ai-cli" / "logs"),
        description="日志目录",
    )
    log_level: str = Field(default="INFO", description="日志级别")
    log_redact_content: bool = Field(default=True, description="是否截断日志中的提示词与回复")

    model_config = SettingsConfigDict(
        env_prefix="AI_CLI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )

    @property
    def conversations_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/conversations"

    @property
    def features_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/features"

    @property
    def streaming_features_url(self) -> str:
        return f"{self.features_url}?isStreaming=true"


settings = Settings()
