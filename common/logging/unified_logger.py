"""
統一ロギングシステム
"""
import logging
from pathlib import Path
from typing import Dict, Any, Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class UnifiedLogger:
    """統一ロギングシステムクラス"""

    def __init__(self, name: str = "sales_ledger", level: str = "INFO", log_file: Optional[Path] = None):
        self.logger = self.setup_logger(name, level, log_file)

    def setup_logger(self, name: str, level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
        """ロガーをセットアップ"""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # 既存のハンドラーをクリア
        logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger

    def log_consolidation_summary(self, summary: Dict[str, Any]) -> None:
        """統合処理結果サマリーのログ出力"""
        self.logger.info("=" * 50)
        self.logger.info("データ統合結果サマリー")
        for key, value in summary.items():
            self.logger.info(f"  {key}: {value}")
        self.logger.info("=" * 50)

    def log_configuration_info(self, config: Dict[str, Any]) -> None:
        """設定情報のログ出力"""
        self.logger.info("設定情報:")
        for key, value in config.items():
            self.logger.info(f"  {key}: {value}")

    def log_platform_results(self, platform: str, results: Dict[str, Any]) -> None:
        """プラットフォーム別結果のログ出力"""
        self.logger.info(f"[{platform}] 集計結果:")
        for key, value in results.items():
            if isinstance(value, int) and ('amount' in key.lower() or 'fee' in key.lower()):
                self.logger.info(f"  {key}: {value:,}")
            else:
                self.logger.info(f"  {key}: {value}")

    # 既存のロガーメソッドのプロキシ
    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def debug(self, message: str) -> None:
        self.logger.debug(message)
