"""统一异常体系

所有业务异常继承 NgxBuildError，CLI 层据此输出友好提示并以非零状态退出。
流水线中任何异常都是致命的，不做自动重试。
"""

from __future__ import annotations


class NgxBuildError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(NgxBuildError):
    """配置文件或环境变量内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(NgxBuildError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


class FetchError(NgxBuildError):
    """远程资源下载失败"""

    code = "FETCH_ERROR"


class ToolOutputError(NgxBuildError):
    """外部工具执行失败，携带合并后的输出用于诊断"""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output

    def __str__(self) -> str:
        base = super().__str__()
        if not self.output:
            return base
        return f"{base}\n{self.output.rstrip()}"


class KeyImportError(ToolOutputError):
    """从 keyserver 导入 GPG 公钥失败"""

    code = "KEY_IMPORT_FAILED"


class VerificationError(ToolOutputError):
    """签名校验失败（相关文件已被删除，下次运行会重新下载）"""

    code = "VERIFICATION_FAILED"


class SignatureFormatError(VerificationError):
    """签名文件无法解析（损坏或不是签名）"""

    code = "SIGNATURE_FORMAT"


class SignatureVerificationError(VerificationError):
    """源码包与签名不匹配"""

    code = "SIGNATURE_MISMATCH"


class ExtractionError(NgxBuildError):
    """源码包整体无法解压或无法推导依赖名"""

    code = "EXTRACTION_FAILED"


class CacheError(NgxBuildError):
    """缓存目录无法创建（路径被普通文件占用、无权限等）"""

    code = "CACHE_ERROR"


class ToolNotFoundError(NgxBuildError):
    """configure 脚本或 make 不存在"""

    code = "TOOL_NOT_FOUND"


class ExecutionError(ToolOutputError):
    """外部构建命令返回非零"""

    code = "EXECUTION_FAILED"

    def __init__(
        self, message: str, *,
        command: list[str] | None = None,
        returncode: int = -1,
        output: str = "",
    ) -> None:
        super().__init__(message, output=output)
        self.command = list(command or [])
        self.returncode = returncode


class MakefileParseError(NgxBuildError):
    """autoconf 生成的 Makefile 无法读取"""

    code = "MAKEFILE_PARSE_FAILED"
