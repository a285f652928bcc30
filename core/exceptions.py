"""
异常映射 - 把生成期异常转换为 CLI 退出码并记录日志
"""
from pydantic import ValidationError

from shared.codes import CodegenCode
from core.logging_config import get_logger
from domain.common.exceptions import CodegenException


logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CODEGEN_ERROR = 1
EXIT_USAGE_ERROR = 2
EXIT_SYSTEM_ERROR = 3


def codegen_code_to_exit_status(code: int) -> int:
    """IR/emission problems are the caller's input; output problems are the environment's."""
    try:
        cc = CodegenCode(code)
    except ValueError:
        return EXIT_CODEGEN_ERROR
    if cc == CodegenCode.SUCCESS:
        return EXIT_OK
    if cc >= CodegenCode.OUTPUT_ERROR:
        return EXIT_SYSTEM_ERROR
    return EXIT_CODEGEN_ERROR


def handle_exception(exc: BaseException) -> int:
    """Log a failed generation run and return the process exit status."""
    if isinstance(exc, CodegenException):
        # Concise codegen error log (no stack)
        logger.error(
            "codegen_failed",
            code=int(exc.code),
            error_type=exc.error_type,
            message=exc.message,
            details=exc.details,
        )
        return codegen_code_to_exit_status(exc.code)

    if isinstance(exc, ValidationError):
        logger.error("codegen_config_invalid", errors=exc.errors(include_url=False))
        return EXIT_USAGE_ERROR

    # Unknown/unexpected exception -> log with stack
    logger.error("codegen_unhandled_error", error=str(exc), exc_info=exc)
    return EXIT_SYSTEM_ERROR
