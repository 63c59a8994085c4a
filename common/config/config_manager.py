"""
中央集約設定管理システム
"""
import json
from pathlib import Path
from typing import Dict, Any, Optional, List
from ..error_handling.exceptions import ConfigurationError


class ConfigManager:
    """設定管理の統一クラス"""

    DEFAULT_CONFIG_FILES = [
        'sales_ledger_config.json',
        'config.json'
    ]

    def __init__(self, config_path: Optional[Path] = None, logger=None):
        self.logger = logger
        self.config_path = Path(config_path) if config_path else None
        self.config_data = {}
        self.load_config(self.config_path)

    def load_config(self, config_path: Optional[Path] = None) -> Dict[str, Any]:
        """設定ファイルを読み込み"""
        self.config_data = self._get_default_config()

        if config_path:
            self.config_data.update(self._load_single_config(config_path))
            return self.config_data

        # デフォルトの設定ファイルを順次試行
        for config_file in self.DEFAULT_CONFIG_FILES:
            candidate = Path(config_file)
            if not candidate.exists():
                continue
            try:
                self.config_data.update(self._load_single_config(candidate))
                self.config_path = candidate
                break
            except ConfigurationError as e:
                if self.logger:
                    self.logger.debug(f"設定ファイル読み込み失敗: {config_file} - {str(e)}")
                continue
        else:
            if self.logger:
                self.logger.info("設定ファイルが見つかりません。デフォルト設定を使用します。")

        return self.config_data

    def _load_single_config(self, config_path: Path) -> Dict[str, Any]:
        """単一の設定ファイルを読み込み"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"設定ファイルが見つかりません: {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"設定ファイルの形式が無効です: {config_path} - {str(e)}")
        except OSError as e:
            raise ConfigurationError(f"設定ファイル読み込みエラー: {config_path} - {str(e)}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"設定ファイルの最上位はオブジェクトである必要があります: {config_path}")

        if self.logger:
            self.logger.info(f"設定ファイル読み込み成功: {Path(config_path).name}")

        return config_data

    def _get_default_config(self) -> Dict[str, Any]:
        """デフォルト設定を取得"""
        return {
            'data_dir': str(Path.cwd() / 'ledger_data'),
            'log_level': 'INFO',
            'log_file': None,
            'legacy_keys': None,
            'recent_count': 5,
            'store': {
                'max_retries': 3,
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """設定値を取得（ドット区切りでネストしたキーを参照）"""
        value = self.config_data
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_data_dir(self) -> Path:
        """台帳データの保存ディレクトリを取得"""
        return Path(self.get('data_dir'))

    def get_logging_settings(self) -> Dict[str, Any]:
        """ログ関連の設定を取得"""
        return {
            'log_level': self.get('log_level', 'INFO'),
            'log_file': self.get('log_file')
        }

    def get_legacy_keys(self, default: List[str]) -> List[str]:
        """旧データのキー一覧を取得（未設定時は既定値）"""
        keys = self.get('legacy_keys')
        return list(keys) if keys else list(default)

    def validate_configuration(self) -> bool:
        """設定の妥当性を検証"""
        missing_fields = [field for field in ['data_dir', 'log_level'] if not self.get(field)]
        if missing_fields:
            error_msg = f"必須設定項目が不足: {missing_fields}"
            if self.logger:
                self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        log_level = str(self.get('log_level')).upper()
        if log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ConfigurationError(f"無効な設定値: log_level = {log_level}")

        recent_count = self.get('recent_count')
        if not isinstance(recent_count, int) or recent_count < 0:
            raise ConfigurationError(f"無効な設定値: recent_count = {recent_count}")

        max_retries = self.get('store.max_retries')
        if not isinstance(max_retries, int) or isinstance(max_retries, bool) or max_retries < 0:
            raise ConfigurationError(f"無効な設定値: store.max_retries = {max_retries}")

        legacy_keys = self.get('legacy_keys')
        if legacy_keys is not None and not (
            isinstance(legacy_keys, list) and all(isinstance(k, str) and k for k in legacy_keys)
        ):
            raise ConfigurationError(f"無効な設定値: legacy_keys = {legacy_keys}")

        if self.logger:
            self.logger.info("設定の妥当性検証完了")

        return True

    def save_config(self, config_path: Optional[Path] = None) -> None:
        """設定をファイルに保存"""
        if config_path is None:
            config_path = self.config_path or Path('sales_ledger_config.json')

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config_data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            error_msg = f"設定ファイル保存エラー: {config_path} - {str(e)}"
            if self.logger:
                self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        if self.logger:
            self.logger.info(f"設定ファイル保存完了: {config_path}")

    def update_config(self, updates: Dict[str, Any]) -> None:
        """設定を更新"""
        self.config_data.update(updates)

        if self.logger:
            self.logger.info(f"設定更新: {list(updates.keys())}")

    def get_all_settings(self) -> Dict[str, Any]:
        """すべての設定を取得"""
        return self.config_data.copy()
