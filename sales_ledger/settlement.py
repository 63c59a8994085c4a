"""
日次精算の締め処理モジュール
"""

import logging
import time
import uuid
from typing import Callable, List, Optional, Sequence, Tuple

from common.error_handling.exceptions import EmptyDraftError

from .consolidator import Consolidator
from .data_models import DailyReport
from .draft_builder import DraftBuilder
from .messages import MessageFormatter


def _now_ms() -> int:
    return int(time.time() * 1000)


class SettlementFinalizer:
    """下書きを締めて台帳に追加するクラス"""

    def __init__(self, consolidator: Consolidator, clock: Optional[Callable[[], int]] = None,
                 id_factory: Optional[Callable[[], str]] = None):
        self.consolidator = consolidator
        self.clock = clock or _now_ms
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self.logger = logging.getLogger(__name__)

    def build_report(self, draft_builder: DraftBuilder) -> DailyReport:
        """下書きから日次精算レコードを作成"""
        draft = draft_builder.draft
        if draft.is_empty:
            raise EmptyDraftError(MessageFormatter.get_settlement_message("empty_draft"))

        entries = tuple(draft.entries)
        return DailyReport(
            id=self.id_factory(),
            date=draft.date,
            entries=entries,
            total_amount=sum(entry.platform_total_amount for entry in entries),
            total_count=sum(entry.platform_total_count for entry in entries),
            memo=draft.memo,
            created_at=self.clock(),
        )

    def finalize(self, draft_builder: DraftBuilder,
                 current_set: Optional[Sequence[DailyReport]] = None) -> Tuple[DailyReport, List[DailyReport]]:
        """
        下書きを締めて台帳に保存し、下書きを消去

        Args:
            draft_builder: 締める下書き
            current_set: メモリ上の正規セット（省略時はストアから読み込む）

        Returns:
            作成した精算レコードと保存後の正規セット

        Raises:
            EmptyDraftError: 入力が一件もない場合（台帳は変更しない）
            StoreWriteError: 台帳の保存に失敗した場合（下書きは残す）
        """
        report = self.build_report(draft_builder)
        reports = self.consolidator.prepend_report(report, current_set)
        draft_builder.remove_draft()

        self.logger.info(MessageFormatter.get_settlement_message(
            "finalized", date=report.date, amount=f"{report.total_amount:,}", count=report.total_count
        ))
        return report, reports
