"""图片生成。

流程：

1. 提交 IMAGE_GENERATOR 任务（n=1），服务端直接返回终态任务记录。
2. 状态不是 SUCCESS 或没有 temporaryUrl 时直接失败。
3. 取 URL 路径的最后一段作为文件名（忽略查询串），取不到时使用默认文件名。
4. 提示正在下载，不带 API-KEY 地 GET 下载图片，覆盖写入输出目录下的同名文件。

提交任务收到 401 时刷新凭证并重试整个流程一次；下载请求不参与重试。
"""

import json
import sys
from pathlib import Path
from typing import Optional, TextIO, Tuple
from urllib.parse import unquote, urlsplit

import httpx

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import (
    ApiError,
    ImageJobFailed,
    MissingAssetUrl,
    NetworkError,
    StorageError,
)
from ai_cli.domain.models import ImageJob, ImageRecord
from ai_cli.infrastructure.logging.logger import logger, redact
from ai_cli.providers.base import CredentialProvider
from ai_cli.providers.retry import call_with_credential_retry
from ai_cli.providers.transport import auth_headers, raise_for_api_status, status_line


OPERATION = "image generation"
DOWNLOAD_OPERATION = "image download"
DEFAULT_IMAGE_FILENAME = "1minAI_output.png"


def derive_filename(url: str, default: str = DEFAULT_IMAGE_FILENAME) -> str:
    """取 URL 路径的最后一段作为本地文件名。

    >>> derive_filename("https://host/path/1minAI_output.png?x=1")
    '1minAI_output.png'
    >>> derive_filename("https://host")
    '1minAI_output.png'
    """

    name = unquote(urlsplit(url).path).rsplit("/", 1)[-1]
    if not name or name in {".", ".."}:
        return default
    return name


def extract_error_message(body: str) -> str:
    """从错误响应体中提取 message 字段。

    服务商会在 message 前加数字错误码（如 ``"429 Too many requests"``），
    这里去掉该前缀；无法解析 JSON 或没有 message 时返回原始响应体。
    """

    try:
        data = json.loads(body)
    except ValueError:
        return body
    message = data.get("message") if isinstance(data, dict) else None
    if not isinstance(message, str):
        return body
    head, sep, rest = message.partition(" ")
    if sep and head.isascii() and head.isdigit():
        return rest
    return message


class ImageGenerator:
    def __init__(
        self,
        client: httpx.Client,
        credentials: CredentialProvider,
        cfg=settings,
        output: Optional[TextIO] = None,
    ):
        self._client = client
        self._credentials = credentials
        self._settings = cfg
        self._output = output

    def generate(self, credential: str, job: ImageJob) -> Tuple[Path, str]:
        """生成并下载图片，返回 (保存路径, 最终使用的凭证)。"""

        return call_with_credential_retry(
            lambda key: self._generate_once(key, job),
            credential,
            self._credentials,
            max_retries=self._settings.max_auth_retries,
            name=OPERATION,
        )

    def _generate_once(self, credential: str, job: ImageJob) -> Path:
        logger.info(
            "image request",
            extra={"extra": {"model": job.model, "size": job.size, "prompt": redact(job.prompt, self._settings)}},
        )
        record = self._submit(credential, job)
        if not record.succeeded:
            raise ImageJobFailed(
                code="IMAGE_JOB_FAILED",
                message=f"Image generation failed with status: {record.status}",
                status=record.status,
            )
        if not record.temporary_url:
            raise MissingAssetUrl(code="MISSING_ASSET_URL", message="No image URL found in response")

        default_name = getattr(self._settings, "default_image_filename", DEFAULT_IMAGE_FILENAME)
        target = Path(self._settings.image_output_dir) / derive_filename(record.temporary_url, default_name)
        out = self._output or sys.stdout
        out.write("Image generated successfully. Downloading...\n")
        out.flush()
        self._download(record.temporary_url, target)
        logger.info("image saved", extra={"extra": {"path": str(target)}})
        return target

    def _submit(self, credential: str, job: ImageJob) -> ImageRecord:
        try:
            resp = self._client.post(
                self._settings.features_url,
                json=job.to_payload(),
                headers=auth_headers(credential),
            )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), operation=OPERATION)
        detail = None if resp.is_success else extract_error_message(resp.text)
        raise_for_api_status(resp, OPERATION, detail=detail)
        try:
            return ImageRecord.from_response(resp.json())
        except ValueError as e:
            raise ApiError(
                code="API_ERROR",
                message=f"Unexpected {OPERATION} API response: {e}",
                http_status=resp.status_code,
                operation=OPERATION,
                detail=resp.text,
            )

    def _download(self, url: str, target: Path) -> None:
        try:
            with self._client.stream("GET", url) as resp:
                if not resp.is_success:
                    resp.read()
                    raise ApiError(
                        code="API_ERROR",
                        message=f"Error downloading image: {status_line(resp)}",
                        http_status=resp.status_code,
                        operation=DOWNLOAD_OPERATION,
                        detail=resp.text,
                    )
                target.parent.mkdir(parents=True, exist_ok=True)
                with target.open("wb") as f:
                    for chunk in resp.iter_bytes():
                        f.write(chunk)
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), operation=DOWNLOAD_OPERATION)
        except OSError as e:
            raise StorageError(code="FILE_WRITE_ERROR", message=f"Cannot write {target}: {e}", path=str(target))
