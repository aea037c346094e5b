from typing import Dict, Optional

import httpx

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import ApiError, Unauthorized


def create_http_client(cfg=settings) -> httpx.Client:
    """整个进程共用一个 httpx.Client，同一时间最多只有一个请求在途。"""

    return httpx.Client(timeout=cfg.http_timeout, trust_env=cfg.trust_env, follow_redirects=True)


def auth_headers(credential: str) -> Dict[str, str]:
    return {
        "API-KEY": credential,
        "Content-Type": "application/json",
    }


def status_line(resp: httpx.Response) -> str:
    phrase = resp.reason_phrase or httpx.codes.get_reason_phrase(resp.status_code)
    return f"{resp.status_code} {phrase}".strip()


def raise_for_api_status(resp: httpx.Response, operation: str, detail: Optional[str] = None) -> None:
    """401 -> Unauthorized；其他非 2xx -> ApiError（原样带上响应体）。

    调用前响应体必须已读取（流式响应需先调用 resp.read()）。
    """

    if resp.is_success:
        return
    body = resp.text
    if resp.status_code == 401:
        raise Unauthorized(operation, detail=body)
    message = body if detail is None else detail
    raise ApiError(
        code="API_ERROR",
        message=f"Error communicating with {operation} API: {status_line(resp)} - {message}",
        http_status=resp.status_code,
        operation=operation,
        detail=message,
    )
