"""
共通コンポーネントの統合テスト
"""
import json
import shutil
import unittest
import tempfile
import pandas as pd
from pathlib import Path
import sys

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))

from common import (
    ExcelHandler,
    JSONHandler,
    UnifiedLogger,
    ErrorHandler,
    ErrorType,
    ConfigManager,
    EncodingDetector,
    EncodingDetectionError,
    ConfigurationError,
    FileProcessingError,
    ParseError,
    StoreWriteError,
    EmptyDraftError,
    retry_on_error,
    handle_errors,
)


class TestCommonComponents(unittest.TestCase):
    """共通コンポーネントの統合テスト"""

    def setUp(self):
        """テスト前の準備"""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.logger = UnifiedLogger("test_logger")
        self.error_handler = ErrorHandler(self.logger.logger)
        self.json_handler = JSONHandler(self.logger.logger, self.error_handler)
        self.excel_handler = ExcelHandler(self.logger.logger, self.error_handler)
        self.encoding_detector = EncodingDetector(self.logger.logger)

    def tearDown(self):
        """テスト後のクリーンアップ"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_json_handler_round_trip(self):
        """JSONの書き出しと読み込みテスト"""
        data = {'reports': [{'id': 'r1', 'memo': '닭강정 완판'}]}
        json_file = self.json_handler.write_json(self.temp_dir / "backup.json", data)

        self.assertEqual(self.json_handler.read_json_with_encoding_detection(json_file), data)
        # 非ASCII文字はエスケープせずUTF-8で保存される
        self.assertIn('닭강정', json_file.read_text(encoding='utf-8'))

    def test_json_handler_with_bom(self):
        """BOM付きUTF-8のJSON読み込みテスト"""
        json_file = self.temp_dir / "bom.json"
        json_file.write_bytes(b'\xef\xbb\xbf' + json.dumps([1, 2, 3]).encode('utf-8'))

        self.assertEqual(self.json_handler.read_json_with_encoding_detection(json_file), [1, 2, 3])

    def test_json_handler_invalid_content(self):
        """不正なJSONはParseErrorになる"""
        json_file = self.temp_dir / "invalid.json"
        json_file.write_text("{not json", encoding='utf-8')

        with self.assertRaises(ParseError):
            self.json_handler.read_json_with_encoding_detection(json_file)

    def test_json_handler_missing_file(self):
        """存在しないファイルはFileProcessingErrorになる"""
        with self.assertRaises(FileProcessingError):
            self.json_handler.read_json_with_encoding_detection(self.temp_dir / "missing.json")

    def test_excel_handler_write_sheets(self):
        """複数シートのExcel書き出しテスト"""
        sheets = {
            'Stats': pd.DataFrame({'기간': ['2024-03', '2024-02'], '총 매출': [150000, 90000]}),
            'Platforms': pd.DataFrame({'플랫폼': ['BAEMIN'], '매출': [240000]}),
        }
        excel_file = self.excel_handler.write_sheets(self.temp_dir / "stats.xlsx", sheets)

        self.assertEqual(self.excel_handler.get_sheet_names(excel_file), ['Stats', 'Platforms'])
        df = self.excel_handler.read_excel_safe(excel_file, sheet_name='Stats')
        self.assertIsNotNone(df)
        self.assertEqual(len(df), 2)
        self.assertEqual(int(df['총 매출'].sum()), 240000)

    def test_excel_handler_rejects_empty_workbook(self):
        """シートが無い場合はFileProcessingError"""
        with self.assertRaises(FileProcessingError):
            self.excel_handler.write_sheets(self.temp_dir / "empty.xlsx", {})

    def test_excel_handler_read_missing_file(self):
        """安全な読み込みは失敗時にNoneを返す"""
        self.assertIsNone(self.excel_handler.read_excel_safe(self.temp_dir / "missing.xlsx"))
        self.assertEqual(self.excel_handler.get_sheet_names(self.temp_dir / "missing.xlsx"), [])

    def test_config_manager_defaults(self):
        """ConfigManagerのデフォルト値と設定ファイルのマージ"""
        config_file = self.temp_dir / "sales_ledger_config.json"
        config_file.write_text(json.dumps({'data_dir': str(self.temp_dir / 'data'), 'recent_count': 3}), encoding='utf-8')

        config_manager = ConfigManager(config_file)

        self.assertEqual(config_manager.get_data_dir(), self.temp_dir / 'data')
        self.assertEqual(config_manager.get('recent_count'), 3)
        self.assertEqual(config_manager.get('store.max_retries'), 3)
        self.assertIsNone(config_manager.get('store.missing'))
        self.assertEqual(config_manager.get_logging_settings()['log_level'], 'INFO')
        self.assertEqual(config_manager.get_legacy_keys(['a', 'b']), ['a', 'b'])
        self.assertTrue(config_manager.validate_configuration())

    def test_config_manager_invalid_values(self):
        """不正な設定値はConfigurationError"""
        config_file = self.temp_dir / "config.json"
        config_file.write_text(json.dumps({'log_level': 'LOUD'}), encoding='utf-8')
        config_manager = ConfigManager(config_file)
        with self.assertRaises(ConfigurationError):
            config_manager.validate_configuration()

        config_manager.update_config({'log_level': 'INFO', 'legacy_keys': ['ok', '']})
        with self.assertRaises(ConfigurationError):
            config_manager.validate_configuration()

        config_manager.update_config({'legacy_keys': None, 'store': {'max_retries': -1}})
        with self.assertRaises(ConfigurationError):
            config_manager.validate_configuration()

    def test_config_manager_broken_file(self):
        """壊れた設定ファイルの指定はConfigurationError"""
        config_file = self.temp_dir / "config.json"
        config_file.write_text("[1, 2", encoding='utf-8')
        with self.assertRaises(ConfigurationError):
            ConfigManager(config_file)

    def test_config_manager_save(self):
        """設定の保存と再読み込み"""
        config_file = self.temp_dir / "saved.json"
        config_file.write_text("{}", encoding='utf-8')
        config_manager = ConfigManager(config_file)
        config_manager.update_config({'legacy_keys': ['sales_data']})
        config_manager.save_config()

        reloaded = ConfigManager(config_file)
        self.assertEqual(reloaded.get_legacy_keys(['x']), ['sales_data'])

    def test_encoding_detector(self):
        """EncodingDetectorのテスト"""
        utf8_file = self.temp_dir / "test_utf8.txt"
        with open(utf8_file, 'w', encoding='utf-8') as f:
            f.write("UTF-8テストファイル\n닭강정")

        self.assertEqual(self.encoding_detector.detect_encoding(utf8_file), 'utf-8')
        self.assertEqual(self.encoding_detector.detect_bytes(b'\xef\xbb\xbfabc'), 'utf-8-sig')

        cp949_file = self.temp_dir / "test_cp949.txt"
        cp949_file.write_bytes("배달의민족 매출".encode('cp949'))
        successful_encoding = self.encoding_detector.try_encodings(cp949_file, ['utf-8', 'cp949'])
        self.assertEqual(successful_encoding, 'cp949')

    def test_encoding_detector_missing_file(self):
        """読めないファイルはどちらの検出方法でもEncodingDetectionError"""
        missing = self.temp_dir / "missing.json"
        with self.assertRaises(EncodingDetectionError):
            self.encoding_detector.detect_encoding(missing)
        with self.assertRaises(EncodingDetectionError):
            self.encoding_detector.try_encodings(missing)

    def test_error_handler_classification(self):
        """ErrorHandlerのエラー分類"""
        self.assertEqual(self.error_handler.classify_error(ParseError("x")), ErrorType.PARSING)
        self.assertEqual(self.error_handler.classify_error(StoreWriteError("x")), ErrorType.STORAGE)
        self.assertEqual(self.error_handler.classify_error(EmptyDraftError("x")), ErrorType.USER_INPUT)
        self.assertEqual(self.error_handler.classify_error(PermissionError("x")), ErrorType.STORAGE)
        self.assertEqual(self.error_handler.classify_error(RuntimeError("x")), ErrorType.UNKNOWN)

        self.assertTrue(self.error_handler.is_retryable(OSError("disk"), ErrorType.STORAGE))
        self.assertFalse(self.error_handler.is_retryable(ParseError("bad"), ErrorType.PARSING))

    def test_error_handler_ignores_message_text(self):
        """分類は例外の型だけで決まり、メッセージの語句には左右されない"""
        self.assertEqual(self.error_handler.classify_error(TypeError("format")), ErrorType.UNKNOWN)
        self.assertEqual(self.error_handler.classify_error(ValueError("json decode failed")), ErrorType.UNKNOWN)
        self.assertEqual(self.error_handler.classify_error(KeyError("file")), ErrorType.UNKNOWN)
        self.assertFalse(self.error_handler.is_retryable(KeyError("disk"), ErrorType.UNKNOWN))

    def test_error_handler_log_methods(self):
        """ログ出力メソッドは例外を投げない"""
        test_error = Exception("テストエラー")
        self.error_handler.log_error(test_error, "テストコンテキスト")
        self.error_handler.log_error_with_context(test_error, {'key': 'kh_reports_v26'})

    def test_retry_on_error(self):
        """書き込み系エラーは再試行し、解析エラーは即座に失敗"""
        calls = {'storage': 0, 'parse': 0}

        @retry_on_error(max_retries=3, base_delay=0)
        def flaky_write():
            calls['storage'] += 1
            if calls['storage'] < 3:
                raise OSError("一時的な書き込みエラー")
            return "ok"

        @retry_on_error(max_retries=3, base_delay=0)
        def broken_parse():
            calls['parse'] += 1
            raise ParseError("壊れたデータ")

        self.assertEqual(flaky_write(), "ok")
        self.assertEqual(calls['storage'], 3)
        with self.assertRaises(ParseError):
            broken_parse()
        self.assertEqual(calls['parse'], 1)

    def test_handle_errors_reraises(self):
        """handle_errorsはログ出力後に例外を再送出"""
        @handle_errors("テスト処理")
        def failing():
            raise StoreWriteError("保存失敗")

        with self.assertRaises(StoreWriteError):
            failing()

    def test_unified_logger(self):
        """UnifiedLoggerのテスト"""
        log_file = self.temp_dir / "logs" / "ledger.log"
        logger = UnifiedLogger("test_file_logger", "DEBUG", log_file)
        try:
            logger.info("テスト情報メッセージ")
            logger.warning("テスト警告メッセージ")
            logger.log_consolidation_summary({'統合後レコード数': 3})
            logger.log_platform_results("BAEMIN", {'total_amount': 150000, 'count': 10})
            logger.log_configuration_info({'data_dir': str(self.temp_dir)})
        finally:
            for handler in logger.logger.handlers:
                handler.close()

        content = log_file.read_text(encoding='utf-8')
        self.assertIn("テスト情報メッセージ", content)
        self.assertIn("統合後レコード数: 3", content)
        self.assertIn("total_amount: 150,000", content)


if __name__ == '__main__':
    unittest.main()
