"""
共通コンポーネントパッケージ
"""

from .file_handlers.excel_handler import ExcelHandler
from .file_handlers.json_handler import JSONHandler
from .error_handling.exceptions import (
    LedgerError,
    ParseError,
    EmptyDraftError,
    StoreWriteError,
    FileProcessingError,
    DataValidationError,
    ConfigurationError,
    EncodingDetectionError
)
from .error_handling.error_handler import ErrorHandler, ErrorType, retry_on_error, handle_errors
from .logging.unified_logger import UnifiedLogger
from .config.config_manager import ConfigManager
from .utils.encoding_detector import EncodingDetector

__all__ = [
    'ExcelHandler',
    'JSONHandler',
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
    'handle_errors',
    'UnifiedLogger',
    'ConfigManager',
    'EncodingDetector'
]
