import json
import logging

import pytest

from ai_cli.config.settings import Settings
from ai_cli.domain.exceptions import StorageError
from ai_cli.infrastructure.logging.logger import JsonFormatter, logger, redact, setup_logger


def test_endpoint_urls():
    s = Settings(api_base_url="https://api.example.com/api/")
    assert s.conversations_url == "https://api.example.com/api/conversations"
    assert s.features_url == "https://api.example.com/api/features"
    assert s.streaming_features_url == "https://api.example.com/api/features?isStreaming=true"


def test_env_prefix(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AI_CLI_DEFAULT_MODEL", "gpt-4o")
    monkeypatch.setenv("AI_CLI_MAX_AUTH_RETRIES", "2")
    s = Settings()
    assert s.default_model == "gpt-4o"
    assert s.max_auth_retries == 2


def test_yaml_config_file(monkeypatch, tmp_path):
    cfg_file = tmp_path / "ai-cli.yaml"
    cfg_file.write_text("default_image_model: flux\nmax_words: 120\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AI_CLI_CONFIG_FILE", str(cfg_file))
    monkeypatch.delenv("AI_CLI_DEFAULT_IMAGE_MODEL", raising=False)
    s = Settings()
    assert s.default_image_model == "flux"
    assert s.max_words == 120


def test_env_overrides_yaml(monkeypatch, tmp_path):
    cfg_file = tmp_path / "ai-cli.yaml"
    cfg_file.write_text("default_model: from-yaml\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AI_CLI_CONFIG_FILE", str(cfg_file))
    monkeypatch.setenv("AI_CLI_DEFAULT_MODEL", "from-env")
    assert Settings().default_model == "from-env"


def test_blank_api_key_is_ignored():
    assert Settings(api_key="   ").api_key is None


def test_json_formatter_includes_extra():
    record = logging.LogRecord("ai_cli", logging.INFO, __file__, 1, "chat request", None, None)
    record.extra = {"model": "o3-mini"}
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "chat request"
    assert payload["level"] == "INFO"
    assert payload["model"] == "o3-mini"
    assert payload["ts"].endswith("Z")


def test_redact_truncates_when_enabled():
    long_text = "x" * 200
    assert redact(long_text, Settings(log_redact_content=True)) == "x" * 64
    assert redact(long_text, Settings(log_redact_content=False)) == long_text


@pytest.fixture
def clean_logger():
    handlers = list(logger.handlers)
    propagate = logger.propagate
    yield logger
    for h in list(logger.handlers):
        if h not in handlers:
            logger.removeHandler(h)
            h.close()
    logger.propagate = propagate


def test_setup_logger_writes_json_lines(tmp_path, clean_logger):
    setup_logger(Settings(log_dir=str(tmp_path / "logs")))
    setup_logger(Settings(log_dir=str(tmp_path / "logs")))
    clean_logger.info("chat request", extra={"extra": {"model": "o3-mini"}})

    marked = [h for h in clean_logger.handlers if getattr(h, "_ai_cli_handler", False)]
    assert len(marked) == 1
    marked[0].flush()
    line = (tmp_path / "logs" / "ai-cli.log").read_text(encoding="utf-8").splitlines()[-1]
    assert json.loads(line)["model"] == "o3-mini"


def test_setup_logger_unusable_dir(tmp_path, clean_logger):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(StorageError) as exc:
        setup_logger(Settings(log_dir=str(blocker / "logs")))
    assert exc.value.code == "LOG_SETUP_ERROR"
    assert any(isinstance(h, logging.NullHandler) for h in clean_logger.handlers)
