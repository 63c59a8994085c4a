"""
バックアップ入出力モジュール

全データ（台帳・メニュー・プラットフォーム設定）をJSONファイルに書き出し、
バックアップファイルから復元します。
"""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from common.error_handling.exceptions import ParseError
from common.file_handlers.json_handler import JSONHandler

from .consolidator import Consolidator
from .constants import LedgerConstants
from .data_models import DailyReport, PlatformConfig
from .ledger_config import LedgerConfigRepository, parse_menus, parse_platforms
from .messages import MessageFormatter

logger = logging.getLogger(__name__)


@dataclass
class BackupPayload:
    """取り込み前に検証済みのバックアップ内容"""
    reports: List[DailyReport]
    menus: Optional[List[str]] = None
    platforms: Optional[Dict[str, PlatformConfig]] = None


def default_backup_filename(today: date) -> str:
    return LedgerConstants.BACKUP_FILENAME_FORMAT.format(date=today.strftime(LedgerConstants.DATE_FORMAT))


def build_export_document(reports: Sequence[DailyReport], menus: Sequence[str],
                          platforms: Dict[str, PlatformConfig]) -> Dict[str, Any]:
    return {
        'reports': [report.to_dict() for report in reports],
        'customMenus': list(menus),
        'platformConfigs': {platform_id: config.to_dict() for platform_id, config in platforms.items()},
    }


def export_backup(path: Path, reports: Sequence[DailyReport], menus: Sequence[str],
                  platforms: Dict[str, PlatformConfig]) -> Path:
    """全データをJSONファイルに書き出し"""
    handler = JSONHandler(logger)
    written = handler.write_json(Path(path), build_export_document(reports, menus, platforms))
    logger.info(MessageFormatter.get_file_message("export_complete", path=written, count=len(reports)))
    return written


def parse_backup_document(data: Any) -> BackupPayload:
    """
    バックアップ内容を検証

    レコード配列のみ、または書き出し形式（reports/customMenus/platformConfigs）を受け付ける。
    1件でも不正なレコードがあれば全体をParseErrorとする。
    """
    if isinstance(data, list):
        return BackupPayload(reports=[DailyReport.from_dict(item) for item in data])
    if not isinstance(data, dict):
        raise ParseError(f"バックアップの最上位が配列でもオブジェクトでもありません: {type(data).__name__}")

    reports_raw = data.get('reports') or []
    if not isinstance(reports_raw, list):
        raise ParseError("reports が配列ではありません")

    menus_raw = data.get('customMenus')
    platforms_raw = data.get('platformConfigs')
    return BackupPayload(
        reports=[DailyReport.from_dict(item) for item in reports_raw],
        menus=parse_menus(menus_raw) if menus_raw is not None else None,
        platforms=parse_platforms(platforms_raw) if platforms_raw is not None else None,
    )


def import_backup(path: Path, consolidator: Consolidator, config_repo: LedgerConfigRepository,
                  current_set: Optional[Sequence[DailyReport]] = None) -> List[DailyReport]:
    """
    バックアップファイルを取り込んで台帳と設定を更新

    Raises:
        ParseError: ファイル形式が不正な場合（台帳・設定は変更しない）
        FileProcessingError: ファイルを読めない場合
    """
    path = Path(path)
    handler = JSONHandler(logger)
    try:
        payload = parse_backup_document(handler.read_json_with_encoding_detection(path))
    except ParseError:
        logger.error(MessageFormatter.get_file_message("import_invalid", path=path))
        raise

    merged = consolidator.merge_imported(payload.reports, current_set)
    config_repo.replace(menus=payload.menus, platforms=payload.platforms)

    logger.info(MessageFormatter.get_file_message(
        "import_complete", path=path.name, imported=len(payload.reports), total=len(merged)
    ))
    return merged
