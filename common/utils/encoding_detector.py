"""
エンコーディング検出ユーティリティ
"""
import chardet
from pathlib import Path
from typing import List, Optional
from ..error_handling.exceptions import EncodingDetectionError


class EncodingDetector:
    """ファイルのエンコーディングを検出するユーティリティクラス"""

    DEFAULT_ENCODINGS = ['utf-8', 'utf-8-sig', 'cp949', 'euc-kr', 'shift_jis']

    def __init__(self, logger=None):
        self.logger = logger

    def detect_bytes(self, raw_data: bytes) -> str:
        """バイト列のエンコーディングを推定"""
        if raw_data.startswith(b'\xef\xbb\xbf'):
            return 'utf-8-sig'
        # UTF-8として読めるものはchardetの推定より優先する
        try:
            raw_data.decode('utf-8')
            return 'utf-8'
        except UnicodeDecodeError:
            pass

        result = chardet.detect(raw_data)
        if result['encoding']:
            return result['encoding'].lower()
        return 'utf-8'

    def detect_encoding(self, file_path: Path) -> str:
        """ファイルのエンコーディングを検出"""
        try:
            with open(file_path, 'rb') as f:
                raw_data = f.read()
        except OSError as e:
            if self.logger:
                self.logger.error(f"エンコーディング検出エラー: {Path(file_path).name} - {str(e)}")
            raise EncodingDetectionError(f"エンコーディング検出に失敗: {str(e)}") from e

        detected_encoding = self.detect_bytes(raw_data)
        if self.logger:
            self.logger.debug(f"エンコーディング検出: {Path(file_path).name} -> {detected_encoding}")
        return detected_encoding

    def try_encodings(self, file_path: Path, encodings: Optional[List[str]] = None) -> str:
        """複数のエンコーディングを順次試行して最初に成功したものを返す"""
        if encodings is None:
            encodings = self.DEFAULT_ENCODINGS

        for encoding in encodings:
            try:
                with open(file_path, 'r', encoding=encoding) as f:
                    f.read()

                if self.logger:
                    self.logger.debug(f"エンコーディング試行成功: {Path(file_path).name} -> {encoding}")
                return encoding

            except (UnicodeDecodeError, UnicodeError, LookupError):
                continue
            except OSError as e:
                if self.logger:
                    self.logger.error(f"ファイル読み込みエラー: {Path(file_path).name} - {str(e)}")
                raise EncodingDetectionError(f"ファイルを読み込めません: {Path(file_path).name} - {str(e)}") from e

        raise EncodingDetectionError(f"すべてのエンコーディングで読み込みに失敗: {Path(file_path).name}")
