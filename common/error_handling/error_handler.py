"""
統一エラーハンドリングシステム
"""
import logging
import time
from enum import Enum
from functools import wraps
from typing import Any, Callable, Dict, Optional

from .exceptions import (
    ConfigurationError,
    DataValidationError,
    EmptyDraftError,
    ParseError,
    StoreWriteError,
)


class ErrorType(Enum):
    """エラータイプの分類"""
    STORAGE = "storage"
    PARSING = "parsing"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    USER_INPUT = "user_input"
    UNKNOWN = "unknown"


class ErrorHandler:
    """エラーハンドリングの統一クラス"""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> ErrorType:
        """エラーを分類"""
        if isinstance(error, ParseError):
            return ErrorType.PARSING
        if isinstance(error, StoreWriteError):
            return ErrorType.STORAGE
        if isinstance(error, EmptyDraftError):
            return ErrorType.USER_INPUT
        if isinstance(error, DataValidationError):
            return ErrorType.VALIDATION
        if isinstance(error, ConfigurationError):
            return ErrorType.CONFIGURATION
        if isinstance(error, OSError):
            return ErrorType.STORAGE
        return ErrorType.UNKNOWN

    def is_retryable(self, error: Exception, error_type: ErrorType) -> bool:
        """エラーが再試行可能かどうか判定"""
        if isinstance(error, (ParseError, EmptyDraftError, DataValidationError)):
            return False
        # 書き込み失敗は同一内容での再実行が安全
        return error_type == ErrorType.STORAGE

    def log_error(self, error: Exception, context: str = "", error_type: Optional[ErrorType] = None) -> None:
        """エラーを標準化されたフォーマットでログに記録"""
        if error_type is None:
            error_type = self.classify_error(error)

        self.logger.error(f"[{error_type.value.upper()}] {context}: {str(error)}")

        cause = error.__cause__
        if cause is not None:
            self.logger.error(f"原因: {str(cause)}")

    def log_error_with_context(self, error: Exception, context: Dict[str, Any]) -> None:
        """コンテキスト情報付きでエラーをログ出力"""
        context_str = ", ".join([f"{k}={v}" for k, v in context.items()])
        self.logger.error(f"エラー: {str(error)} | コンテキスト: {context_str}")


def _resolve_logger(args) -> logging.Logger:
    # selfからloggerを取得（存在する場合）
    if args and hasattr(args[0], 'logger'):
        return args[0].logger
    return logging.getLogger(__name__)


def retry_on_error(max_retries: int = 3, base_delay: float = 0.1, max_delay: float = 5.0, backoff_factor: float = 2.0):
    """
    指数バックオフによる再試行デコレータ

    Args:
        max_retries: 最大再試行回数
        base_delay: 初期遅延時間（秒）
        max_delay: 最大遅延時間（秒）
        backoff_factor: バックオフ係数
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = _resolve_logger(args)
            error_handler = ErrorHandler(logger)
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)

                except Exception as e:
                    error_type = error_handler.classify_error(e)

                    if attempt == max_retries:
                        error_handler.log_error(e, f"{func.__name__}の実行に失敗（最大再試行回数に到達）", error_type)
                        raise

                    if not error_handler.is_retryable(e, error_type):
                        error_handler.log_error(e, f"{func.__name__}で致命的エラーが発生", error_type)
                        raise

                    logger.warning(f"{func.__name__}の実行に失敗（試行 {attempt + 1}/{max_retries + 1}）: {str(e)}")
                    logger.info(f"{delay:.1f}秒後に再試行します...")

                    time.sleep(delay)
                    delay = min(delay * backoff_factor, max_delay)

        return wrapper
    return decorator


def handle_errors(context: str = ""):
    """
    エラー処理デコレータ（再試行なし）

    Args:
        context: エラーのコンテキスト情報
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                error_handler = ErrorHandler(_resolve_logger(args))
                error_context = context or f"{func.__name__}の実行中"
                error_handler.log_error(e, error_context)
                raise

        return wrapper
    return decorator
