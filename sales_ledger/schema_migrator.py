"""
スキーマ移行モジュール

旧バージョンで保存された売上レコードを正規形のDailyReportに変換します。
ここを通過した後は型付きのデータだけを扱います。
"""

import json
import logging
import uuid
from datetime import date
from typing import Any, Callable, Optional

from common.error_handling.exceptions import ParseError

from .constants import LedgerConstants
from .data_models import DailyReport, PlatformEntry, midnight_epoch_ms, parse_date, to_amount

logger = logging.getLogger(__name__)

# IDを持たない旧レコードに決定的なIDを振るための名前空間
LEGACY_ID_NAMESPACE = uuid.UUID('6f1c3a52-9b0e-4d8e-a7f4-2c5d1e8b9a30')


def legacy_record_id(source_key: str, item: dict, index: int = 0) -> str:
    """旧レコードの読み込み元・位置・内容から再現可能なIDを生成

    同じ内容の売上が複数あっても位置が違えば別のIDになる。
    """
    fingerprint = json.dumps(item, sort_keys=True, ensure_ascii=False, default=str)
    return str(uuid.uuid5(LEGACY_ID_NAMESPACE, f"{source_key}:{index}:{fingerprint}"))


def _is_canonical(item: dict) -> bool:
    entries = item.get('entries')
    return isinstance(entries, list) and len(entries) > 0


def _is_flat_sale(item: dict) -> bool:
    return bool(item.get('platform')) and item.get('totalAmount') is not None


def _convert_flat_sale(item: dict, source_key: str, today: date, index: int) -> DailyReport:
    """単一プラットフォームの旧売上レコードを1エントリのDailyReportに変換"""
    total_amount = to_amount(item['totalAmount'], 'totalAmount')
    fee_amount = item.get('feeAmount')
    settlement_amount = item.get('settlementAmount')
    raw_date = item.get('date')
    report_date = parse_date(raw_date) if raw_date else today

    raw_id = item.get('id')
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        raw_id = str(raw_id)
    report_id = raw_id if isinstance(raw_id, str) and raw_id else legacy_record_id(source_key, item, index)

    created_at = item.get('createdAt')
    platform = item['platform']
    if not isinstance(platform, str):
        raise ParseError(f"platform が文字列ではありません: {platform!r}")

    entry = PlatformEntry(
        platform=platform,
        menu_sales=(),
        platform_total_amount=total_amount,
        platform_total_count=1,
        fee_amount=0 if fee_amount is None else to_amount(fee_amount, 'feeAmount'),
        settlement_amount=total_amount if settlement_amount is None else to_amount(settlement_amount, 'settlementAmount'),
    )
    return DailyReport(
        id=report_id,
        date=report_date,
        entries=(entry,),
        total_amount=total_amount,
        total_count=1,
        memo=LedgerConstants.LEGACY_MEMO_FORMAT.format(source_key=source_key),
        created_at=midnight_epoch_ms(report_date) if created_at is None else to_amount(created_at, 'createdAt'),
    )


def migrate(raw_item: Any, source_key: str, today: Optional[Callable[[], date]] = None,
            index: int = 0) -> Optional[DailyReport]:
    """
    任意の旧データ1件をDailyReportに変換

    Args:
        raw_item: JSONから復元した1レコード
        source_key: 読み込み元のキー（メモに記録）
        today: 日付が無い場合の既定日を返す関数
        index: 読み込み元の配列内の位置

    Returns:
        DailyReport: 変換結果。変換できない場合はNone
    """
    if not isinstance(raw_item, dict):
        logger.debug(f"オブジェクトではないレコードを無視します: {source_key} ({type(raw_item).__name__})")
        return None

    try:
        if _is_canonical(raw_item):
            return DailyReport.from_dict(raw_item)
        if _is_flat_sale(raw_item):
            return _convert_flat_sale(raw_item, source_key, (today or date.today)(), index)
    except ParseError as e:
        logger.warning(f"レコードを変換できません: {source_key} - {e}")
        return None

    return None
