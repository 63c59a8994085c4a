"""
下書き管理モジュール

1日分のプラットフォーム別入力を締め前の下書きとして保持し、
変更のたびに作業用スロットへチェックポイントを保存します。
"""

import logging
from decimal import Decimal, ROUND_FLOOR
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from common.error_handling.exceptions import DataValidationError, ParseError

from .constants import StorageKeys
from .data_models import Draft, MenuSale, MenuTotal, PlatformEntry
from .messages import MessageFormatter
from .storage import KeyValueStore, decode_json, encode_json


def calculate_fee(total_amount: int, fee_rate: float) -> int:
    """手数料（1円未満切り捨て）"""
    if not 0 <= fee_rate < 1:
        raise DataValidationError(f"手数料率は0以上1未満である必要があります: {fee_rate}")
    # 浮動小数点の誤差を避けるため10進数で計算する
    fee = Decimal(total_amount) * Decimal(str(fee_rate))
    return int(fee.to_integral_value(rounding=ROUND_FLOOR))


def build_platform_entry(platform: str, menu_sales: Iterable[MenuSale], fee_rate: float) -> PlatformEntry:
    """メニュー別実績からプラットフォーム別エントリを作成"""
    sales = tuple(sale for sale in menu_sales if sale.count > 0 or sale.amount > 0)
    for sale in sales:
        if not sale.menu_name:
            raise DataValidationError("メニュー名が空です")
        if sale.count < 0 or sale.amount < 0:
            raise DataValidationError(f"件数・金額は0以上である必要があります: {sale.menu_name}")

    total_amount = sum(sale.amount for sale in sales)
    total_count = sum(sale.count for sale in sales)
    fee_amount = calculate_fee(total_amount, fee_rate)

    return PlatformEntry(
        platform=platform,
        menu_sales=sales,
        platform_total_amount=total_amount,
        platform_total_count=total_count,
        fee_amount=fee_amount,
        settlement_amount=total_amount - fee_amount,
    )


def menu_summary(draft: Draft) -> List[Tuple[str, MenuTotal]]:
    """全プラットフォームのメニュー別合計（金額の多い順、同額は出現順）"""
    totals: Dict[str, MenuTotal] = {}
    for entry in draft.entries:
        for sale in entry.menu_sales:
            current = totals.get(sale.menu_name, MenuTotal())
            totals[sale.menu_name] = MenuTotal(current.count + sale.count, current.amount + sale.amount)
    return sorted(totals.items(), key=lambda item: item[1].amount, reverse=True)


class DraftBuilder:
    """締め前の下書きを管理するクラス"""

    def __init__(self, store: KeyValueStore, today: Optional[Callable[[], date]] = None):
        self.store = store
        self.today = today or date.today
        self.logger = logging.getLogger(__name__)
        self.draft = Draft(date=self.today())

    def restore(self) -> Draft:
        """チェックポイントから下書きを復元（無ければ今日の空の下書き）"""
        raw = self.store.get(StorageKeys.DRAFT)
        if raw is None:
            self.draft = Draft(date=self.today())
            return self.draft

        try:
            self.draft = Draft.from_dict(decode_json(raw), default_date=self.today())
        except ParseError as e:
            self.logger.warning(MessageFormatter.get_settlement_message("draft_checkpoint_corrupt", error=e))
            self.draft = Draft(date=self.today())
            return self.draft

        self.logger.info(MessageFormatter.get_settlement_message(
            "draft_restored", date=self.draft.date, entries=len(self.draft.entries)
        ))
        return self.draft

    def _checkpoint(self) -> None:
        self.store.set(StorageKeys.DRAFT, encode_json(self.draft.to_dict()))

    def upsert_platform_entry(self, entry: PlatformEntry) -> Draft:
        """同じプラットフォームのエントリを置き換えて保存"""
        self.draft.entries = [e for e in self.draft.entries if e.platform != entry.platform] + [entry]
        self._checkpoint()
        self.logger.info(MessageFormatter.get_settlement_message(
            "entry_saved", platform=entry.platform,
            amount=f"{entry.platform_total_amount:,}", count=entry.platform_total_count
        ))
        return self.draft

    def set_memo(self, memo: str) -> Draft:
        self.draft.memo = memo
        self._checkpoint()
        return self.draft

    def set_date(self, work_date: date) -> Draft:
        self.draft.date = work_date
        self._checkpoint()
        return self.draft

    def find_entry(self, platform: str) -> Optional[PlatformEntry]:
        """入力済みのプラットフォームエントリを取得"""
        for entry in self.draft.entries:
            if entry.platform == platform:
                return entry
        return None

    def menu_summary(self) -> List[Tuple[str, MenuTotal]]:
        return menu_summary(self.draft)

    def remove_draft(self) -> Draft:
        """入力とメモを消去してチェックポイントを削除"""
        self.draft.entries = []
        self.draft.memo = ''
        self.store.remove(StorageKeys.DRAFT)
        self.logger.info(MessageFormatter.get_settlement_message("draft_cleared"))
        return self.draft
