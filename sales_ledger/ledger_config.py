"""
台帳設定モジュール

メニュー一覧とプラットフォーム別手数料率をストアに保存・復元します。
"""

import logging
from typing import Dict, List, Optional

from common.error_handling.exceptions import DataValidationError, ParseError

from .constants import INITIAL_MENUS, INITIAL_PLATFORMS, StorageKeys
from .data_models import PlatformConfig
from .messages import MessageFormatter
from .storage import KeyValueStore, decode_json, encode_json


def default_platforms() -> Dict[str, PlatformConfig]:
    return {
        platform_id: PlatformConfig(id=platform_id, name=name, fee_rate=fee_rate)
        for platform_id, (name, fee_rate) in INITIAL_PLATFORMS.items()
    }


def parse_menus(raw) -> List[str]:
    if not isinstance(raw, list) or not all(isinstance(m, str) and m for m in raw):
        raise ParseError("メニュー一覧は空でない文字列の配列である必要があります")
    return list(dict.fromkeys(raw))


def parse_platforms(raw) -> Dict[str, PlatformConfig]:
    if not isinstance(raw, dict) or not raw:
        raise ParseError("プラットフォーム設定はオブジェクトである必要があります")
    return {platform_id: PlatformConfig.from_dict(value, platform_id) for platform_id, value in raw.items()}


class LedgerConfigRepository:
    """メニュー・プラットフォーム設定の保存クラス"""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.logger = logging.getLogger(__name__)
        self.menus: List[str] = list(INITIAL_MENUS)
        self.platforms: Dict[str, PlatformConfig] = default_platforms()

    def load(self) -> 'LedgerConfigRepository':
        """保存済み設定を読み込み（無い・壊れている場合は既定値）"""
        self.menus = self._load_section(StorageKeys.CONFIG_MENUS, parse_menus, list(INITIAL_MENUS))
        self.platforms = self._load_section(StorageKeys.CONFIG_PLATFORMS, parse_platforms, default_platforms())
        return self

    def _load_section(self, key: str, parser, default):
        raw = self.store.get(key)
        if raw is None:
            return default
        try:
            value = parser(decode_json(raw))
        except ParseError as e:
            self.logger.warning(MessageFormatter.get_config_message("config_corrupt", key=key, error=e))
            return default
        self.logger.debug(MessageFormatter.get_config_message("config_restored", key=key))
        return value

    def _save_menus(self) -> None:
        self.store.set(StorageKeys.CONFIG_MENUS, encode_json(self.menus))

    def _save_platforms(self) -> None:
        self.store.set(StorageKeys.CONFIG_PLATFORMS, encode_json(self.platforms_to_dict()))

    def platforms_to_dict(self) -> Dict[str, dict]:
        return {platform_id: config.to_dict() for platform_id, config in self.platforms.items()}

    def get_platform(self, platform_id: str) -> PlatformConfig:
        try:
            return self.platforms[platform_id]
        except KeyError:
            raise DataValidationError(
                f"未登録のプラットフォームです: {platform_id} (登録済み: {', '.join(self.platforms)})"
            ) from None

    def fee_rate(self, platform_id: str) -> float:
        return self.get_platform(platform_id).fee_rate

    def platform_names(self) -> Dict[str, str]:
        return {platform_id: config.name for platform_id, config in self.platforms.items()}

    def add_menu(self, menu: str) -> List[str]:
        menu = (menu or '').strip()
        if not menu:
            raise DataValidationError("メニュー名が空です")
        if menu in self.menus:
            raise DataValidationError(f"既に登録されているメニューです: {menu}")
        self.menus = self.menus + [menu]
        self._save_menus()
        self.logger.info(MessageFormatter.get_config_message("menu_added", menu=menu))
        return self.menus

    def remove_menu(self, menu: str) -> List[str]:
        if menu not in self.menus:
            raise DataValidationError(f"登録されていないメニューです: {menu}")
        self.menus = [m for m in self.menus if m != menu]
        self._save_menus()
        self.logger.info(MessageFormatter.get_config_message("menu_removed", menu=menu))
        return self.menus

    def update_fee_rate(self, platform_id: str, fee_rate: float) -> PlatformConfig:
        """手数料率を更新（0以上1未満）"""
        current = self.get_platform(platform_id)
        try:
            updated = PlatformConfig(id=current.id, name=current.name, fee_rate=float(fee_rate))
        except ParseError as e:
            raise DataValidationError(str(e)) from e
        self.platforms = {**self.platforms, platform_id: updated}
        self._save_platforms()
        self.logger.info(MessageFormatter.get_config_message("fee_updated", platform=platform_id, rate=fee_rate))
        return updated

    def replace(self, menus: Optional[List[str]] = None,
                platforms: Optional[Dict[str, PlatformConfig]] = None) -> None:
        """取り込んだ設定で上書きして保存"""
        sections = []
        if menus is not None:
            self.menus = list(menus)
            self._save_menus()
            sections.append('menus')
        if platforms is not None:
            self.platforms = dict(platforms)
            self._save_platforms()
            sections.append('platforms')
        if sections:
            self.logger.info(MessageFormatter.get_config_message("config_replaced", sections=', '.join(sections)))
