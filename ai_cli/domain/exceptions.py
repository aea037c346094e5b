"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
CLI 层统一捕获后输出 ``Error: <message>`` 并以非零状态退出。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "API_ERROR"）。
        message: 用户可读错误信息。
        http_status: 相关 HTTP 状态码，本地错误默认 400。
        extra: 其他补充字段（例如 operation、detail、status）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class CredentialUnavailable(BusinessError):
    """安全存储（keyring）无法打开或写入。"""


class Unauthorized(BusinessError):
    """服务端返回 401，由重试策略刷新凭证后重试一次。"""

    def __init__(self, operation: str, detail: str = ""):
        super().__init__(
            code="UNAUTHORIZED",
            message=f"Unauthorized while calling {operation} API",
            http_status=401,
            operation=operation,
            detail=detail,
        )


class ApiError(BusinessError):
    """第三方 API 返回非 2xx/401 状态时抛出。"""


class ImageJobFailed(BusinessError):
    """图片生成任务返回了非 SUCCESS 状态。"""


class MissingAssetUrl(BusinessError):
    """图片任务成功但没有返回下载地址。"""


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""


class StorageError(BusinessError):
    """本地文件写入失败。"""


class SpeechError(BusinessError):
    """语音朗读命令执行失败。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""
