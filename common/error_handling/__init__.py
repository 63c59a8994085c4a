"""
エラーハンドリングパッケージ
"""

from .exceptions import (
    LedgerError,
    ParseError,
    EmptyDraftError,
    StoreWriteError,
    FileProcessingError,
    DataValidationError,
    ConfigurationError,
    EncodingDetectionError
)
from .error_handler import ErrorHandler, ErrorType, retry_on_error, handle_errors

__all__ = [
    'LedgerError',
    'ParseError',
    'EmptyDraftError',
    'StoreWriteError',
    'FileProcessingError',
    'DataValidationError',
    'ConfigurationError',
    'EncodingDetectionError',
    'ErrorHandler',
    'ErrorType',
    'retry_on_error',
    'handle_errors'
]
