"""401 刷新凭证并重试的统一策略。

每个网络操作都以 ``operation(credential)`` 的形式交给这里执行：
收到 Unauthorized 时刷新一次凭证，用新凭证重新执行同一个操作。
重试次数有上限，用尽后把最后一次的 Unauthorized 抛给调用方。
"""

from typing import Callable, Optional, Tuple, TypeVar

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import Unauthorized
from ai_cli.infrastructure.logging.logger import logger
from ai_cli.providers.base import CredentialProvider


T = TypeVar("T")


def call_with_credential_retry(
    operation: Callable[[str], T],
    credential: str,
    provider: CredentialProvider,
    max_retries: Optional[int] = None,
    name: str = "",
) -> Tuple[T, str]:
    """执行 operation，返回 (结果, 最终使用的凭证)。"""

    retries_left = settings.max_auth_retries if max_retries is None else max_retries
    while True:
        try:
            return operation(credential), credential
        except Unauthorized:
            if retries_left <= 0:
                logger.error("unauthorized, retries exhausted", extra={"extra": {"operation": name}})
                raise
            retries_left -= 1
            logger.info("unauthorized, refreshing credential", extra={"extra": {"operation": name}})
            credential = provider.refresh()
