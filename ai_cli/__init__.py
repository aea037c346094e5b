"""ai-cli 顶层包。

该包提供 1min.ai 命令行客户端的核心实现，
包括配置加载、领域模型、凭证解析与 401 重试、
会话创建、流式对话与图片生成。
"""

from ai_cli.api.service import AiCliService, RunOptions, validate_flags

__all__ = ["AiCliService", "RunOptions", "validate_flags"]
