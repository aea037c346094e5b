import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import StorageError

REDACT_LIMIT = 64

logger = logging.getLogger("ai_cli")


def redact(text: str, cfg=settings) -> str:
    """按配置截断提示词/回复内容，凭证任何情况下都不应传入日志。"""

    if getattr(cfg, "log_redact_content", True):
        return (text or "")[:REDACT_LIMIT]
    return text or ""


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logger(cfg=settings) -> logging.Logger:
    """为 ai_cli logger 挂载 JSON 行格式的文件 handler（重复调用不会重复挂载）。"""

    logger.setLevel(getattr(logging, cfg.log_level, logging.INFO))
    if any(getattr(h, "_ai_cli_handler", False) for h in logger.handlers):
        return logger
    log_dir = Path(cfg.log_dir).expanduser()
    logger.propagate = False
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / "ai-cli.log", encoding="utf-8")
    except OSError as e:
        # 日志目录不可写时挂一个空 handler，避免日志落到 stderr
        null = logging.NullHandler()
        null._ai_cli_handler = True  # type: ignore[attr-defined]
        logger.addHandler(null)
        raise StorageError(code="LOG_SETUP_ERROR", message=f"Cannot open log directory {log_dir}: {e}", path=str(log_dir))
    fh.setLevel(logger.level)
    fh.setFormatter(JsonFormatter())
    fh._ai_cli_handler = True  # type: ignore[attr-defined]
    logger.addHandler(fh)
    return logger
