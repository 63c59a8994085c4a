"""
統一JSONハンドラー
"""
import json
from pathlib import Path
from typing import Any
from ..utils.encoding_detector import EncodingDetector
from ..error_handling.exceptions import EncodingDetectionError, FileProcessingError, ParseError


class JSONHandler:
    """JSONファイルの統一処理クラス"""

    def __init__(self, logger=None, error_handler=None):
        self.logger = logger
        self.error_handler = error_handler
        self.encoding_detector = EncodingDetector(logger)

    def read_json_with_encoding_detection(self, file_path: Path) -> Any:
        """エンコーディング自動検出でJSONファイルを読み込み"""
        file_path = Path(file_path)
        try:
            encoding = self.encoding_detector.detect_encoding(file_path)
        except EncodingDetectionError:
            # 検出失敗時は複数エンコーディングを試行
            encoding = self.encoding_detector.try_encodings(file_path)

        try:
            with open(file_path, 'r', encoding=encoding) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"JSONの形式が不正です: {file_path.name} - {str(e)}") from e
        except UnicodeDecodeError as e:
            raise ParseError(f"文字コードを解釈できません: {file_path.name} ({encoding})") from e
        except OSError as e:
            raise FileProcessingError(f"JSON読み込みエラー: {file_path.name} - {str(e)}") from e

        if self.logger:
            self.logger.info(f"JSON読み込み成功: {file_path.name} ({encoding})")
        return data

    def write_json(self, file_path: Path, data: Any) -> Path:
        """JSONファイルをUTF-8で書き出し"""
        file_path = Path(file_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            if self.error_handler:
                self.error_handler.log_error_with_context(e, {'file_path': str(file_path)})
            raise FileProcessingError(f"JSON書き込みエラー: {file_path.name} - {str(e)}") from e

        if self.logger:
            self.logger.info(f"JSON書き込み成功: {file_path.name}")
        return file_path
