"""
データモデル定義

台帳で扱う売上・精算データのデータクラスを定義します。
JSON上のキー名は保存データとの互換性のためcamelCaseを維持します。
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from common.error_handling.exceptions import ParseError

from .constants import LedgerConstants


def parse_date(value: Any) -> date:
    """日付文字列（時刻部分は切り捨て）を暦日に変換"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ParseError(f"日付が不正です: {value!r}")
    try:
        return datetime.strptime(value.strip().split('T')[0], LedgerConstants.DATE_FORMAT).date()
    except ValueError as e:
        raise ParseError(f"日付が不正です: {value!r}") from e


def to_amount(value: Any, field_name: str) -> int:
    """金額・件数を0以上の整数に正規化"""
    if isinstance(value, bool) or value is None:
        raise ParseError(f"{field_name} が数値ではありません: {value!r}")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as e:
            raise ParseError(f"{field_name} が数値ではありません: {value!r}") from e
    if isinstance(value, float):
        if not value.is_integer():
            raise ParseError(f"{field_name} が整数ではありません: {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise ParseError(f"{field_name} が数値ではありません: {value!r}")
    if value < 0:
        raise ParseError(f"{field_name} が負の値です: {value!r}")
    return value


def midnight_epoch_ms(day: date) -> int:
    """暦日の0時(UTC)をエポックミリ秒で返す"""
    return int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp() * 1000)


def _require_mapping(raw: Any, entity: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ParseError(f"{entity} がオブジェクトではありません: {type(raw).__name__}")
    return raw


def _require_text(raw: Dict[str, Any], key: str, entity: str) -> str:
    value = raw.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value:
        raise ParseError(f"{entity}.{key} が空または不正です: {value!r}")
    return value


@dataclass(frozen=True)
class MenuSale:
    """メニュー別販売実績"""
    menu_name: str
    count: int = 0
    amount: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'menuName': self.menu_name, 'count': self.count, 'amount': self.amount}

    @classmethod
    def from_dict(cls, raw: Any) -> 'MenuSale':
        raw = _require_mapping(raw, 'MenuSale')
        return cls(
            menu_name=_require_text(raw, 'menuName', 'MenuSale'),
            count=to_amount(raw.get('count', 0), 'count'),
            amount=to_amount(raw.get('amount', 0), 'amount'),
        )


@dataclass(frozen=True)
class PlatformEntry:
    """プラットフォーム別の1日分の売上"""
    platform: str
    menu_sales: Tuple[MenuSale, ...] = ()
    platform_total_amount: int = 0
    platform_total_count: int = 0
    fee_amount: int = 0
    settlement_amount: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'platform': self.platform,
            'menuSales': [sale.to_dict() for sale in self.menu_sales],
            'platformTotalAmount': self.platform_total_amount,
            'platformTotalCount': self.platform_total_count,
            'feeAmount': self.fee_amount,
            'settlementAmount': self.settlement_amount,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> 'PlatformEntry':
        raw = _require_mapping(raw, 'PlatformEntry')
        menu_sales = raw.get('menuSales') or []
        if not isinstance(menu_sales, list):
            raise ParseError(f"PlatformEntry.menuSales が配列ではありません: {type(menu_sales).__name__}")
        sales = tuple(MenuSale.from_dict(sale) for sale in menu_sales)

        total_amount = to_amount(raw.get('platformTotalAmount'), 'platformTotalAmount')
        fee_amount = to_amount(raw.get('feeAmount', 0), 'feeAmount')
        settlement = raw.get('settlementAmount')
        return cls(
            platform=_require_text(raw, 'platform', 'PlatformEntry'),
            menu_sales=sales,
            platform_total_amount=total_amount,
            platform_total_count=to_amount(
                raw.get('platformTotalCount', sum(sale.count for sale in sales)), 'platformTotalCount'
            ),
            fee_amount=fee_amount,
            settlement_amount=(
                total_amount - fee_amount if settlement is None else to_amount(settlement, 'settlementAmount')
            ),
        )


@dataclass(frozen=True)
class DailyReport:
    """締め済みの日次精算レコード（台帳の正規形）"""
    id: str
    date: date
    entries: Tuple[PlatformEntry, ...]
    total_amount: int
    total_count: int
    memo: str = ''
    created_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date.strftime(LedgerConstants.DATE_FORMAT),
            'entries': [entry.to_dict() for entry in self.entries],
            'totalAmount': self.total_amount,
            'totalCount': self.total_count,
            'memo': self.memo,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> 'DailyReport':
        raw = _require_mapping(raw, 'DailyReport')
        entries_raw = raw.get('entries')
        if not isinstance(entries_raw, list):
            raise ParseError("DailyReport.entries が配列ではありません")
        entries = tuple(PlatformEntry.from_dict(entry) for entry in entries_raw)

        report_date = parse_date(raw.get('date'))
        memo = raw.get('memo') or ''
        if not isinstance(memo, str):
            raise ParseError(f"DailyReport.memo が文字列ではありません: {memo!r}")
        created_at = raw.get('createdAt')

        return cls(
            id=_require_text(raw, 'id', 'DailyReport'),
            date=report_date,
            entries=entries,
            total_amount=to_amount(
                raw.get('totalAmount', sum(e.platform_total_amount for e in entries)), 'totalAmount'
            ),
            total_count=to_amount(
                raw.get('totalCount', sum(e.platform_total_count for e in entries)), 'totalCount'
            ),
            memo=memo,
            created_at=midnight_epoch_ms(report_date) if created_at is None else to_amount(created_at, 'createdAt'),
        )

    @property
    def total_fee(self) -> int:
        return sum(entry.fee_amount for entry in self.entries)

    @property
    def total_settlement(self) -> int:
        return sum(entry.settlement_amount for entry in self.entries)


@dataclass
class Draft:
    """締め前の作業中データ（1日分）"""
    date: date
    entries: List[PlatformEntry] = field(default_factory=list)
    memo: str = ''

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def to_dict(self) -> Dict[str, Any]:
        return {
            'entries': [entry.to_dict() for entry in self.entries],
            'memo': self.memo,
            'date': self.date.strftime(LedgerConstants.DATE_FORMAT),
        }

    @classmethod
    def from_dict(cls, raw: Any, default_date: date) -> 'Draft':
        raw = _require_mapping(raw, 'Draft')
        entries_raw = raw.get('entries') or []
        if not isinstance(entries_raw, list):
            raise ParseError("Draft.entries が配列ではありません")
        memo = raw.get('memo') or ''
        if not isinstance(memo, str):
            raise ParseError(f"Draft.memo が文字列ではありません: {memo!r}")
        raw_date = raw.get('date')
        return cls(
            date=parse_date(raw_date) if raw_date else default_date,
            entries=[PlatformEntry.from_dict(entry) for entry in entries_raw],
            memo=memo,
        )


@dataclass(frozen=True)
class PlatformConfig:
    """プラットフォーム設定（表示名と手数料率）"""
    id: str
    name: str
    fee_rate: float = 0.0

    def __post_init__(self):
        if not 0 <= self.fee_rate < 1:
            raise ParseError(f"手数料率は0以上1未満である必要があります: {self.id}={self.fee_rate}")

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'feeRate': self.fee_rate}

    @classmethod
    def from_dict(cls, raw: Any, platform_id: Optional[str] = None) -> 'PlatformConfig':
        raw = _require_mapping(raw, 'PlatformConfig')
        fee_rate = raw.get('feeRate', 0)
        if isinstance(fee_rate, bool) or not isinstance(fee_rate, (int, float)):
            raise ParseError(f"PlatformConfig.feeRate が数値ではありません: {fee_rate!r}")
        config_id = raw.get('id') or platform_id
        if not isinstance(config_id, str) or not config_id:
            raise ParseError("PlatformConfig.id が空です")
        return cls(id=config_id, name=str(raw.get('name') or config_id), fee_rate=float(fee_rate))


@dataclass(frozen=True)
class MenuTotal:
    """メニュー別の合計（全プラットフォーム合算）"""
    count: int = 0
    amount: int = 0
