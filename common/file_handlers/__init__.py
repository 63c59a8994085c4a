"""
ファイルハンドラーパッケージ
"""

from .excel_handler import ExcelHandler
from .json_handler import JSONHandler

__all__ = ['ExcelHandler', 'JSONHandler']
