"""
台帳コントローラーモジュール

ストア・設定・統合・下書き・締め・集計の各コンポーネントを束ね、
アプリケーションの操作単位を提供します。
"""

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from common.config.config_manager import ConfigManager

from . import aggregator
from .backup import default_backup_filename, export_backup, import_backup
from .consolidator import Consolidator
from .constants import LedgerConstants, StatsPeriod, StorageKeys
from .data_models import DailyReport, MenuSale, MenuTotal, PlatformEntry
from .draft_builder import DraftBuilder, build_platform_entry
from .ledger_config import LedgerConfigRepository
from .settlement import SettlementFinalizer
from .spreadsheet import export_period_stats, write_entry_template
from .storage import FileKeyValueStore, KeyValueStore


class LedgerController:
    """売上台帳のメインコントローラークラス"""

    def __init__(self, config: Optional[ConfigManager] = None, store: Optional[KeyValueStore] = None,
                 today: Optional[Callable[[], date]] = None, clock: Optional[Callable[[], int]] = None):
        self.logger = logging.getLogger(__name__)
        self.config = config or ConfigManager(logger=self.logger)
        self.today = today or date.today

        self.store = store or FileKeyValueStore(
            self.config.get_data_dir(), max_retries=self.config.get('store.max_retries', 3)
        )
        self.config_repo = LedgerConfigRepository(self.store)
        self.consolidator = Consolidator(
            self.store,
            legacy_keys=self.config.get_legacy_keys(StorageKeys.LEGACY),
            today=self.today,
        )
        self.draft_builder = DraftBuilder(self.store, today=self.today)
        self.finalizer = SettlementFinalizer(self.consolidator, clock=clock)
        self.reports: List[DailyReport] = []

    def startup(self) -> List[DailyReport]:
        """設定と下書きを復元し、過去データを統合"""
        self.config_repo.load()
        self.draft_builder.restore()
        return self.scan_and_consolidate()

    def scan_and_consolidate(self) -> List[DailyReport]:
        self.reports = self.consolidator.scan_and_consolidate()
        return self.reports

    # --- 入力 ---

    def save_platform_sales(self, platform: str, sales: Iterable[Tuple[str, int, int]]) -> PlatformEntry:
        """(メニュー名, 件数, 金額) の一覧からプラットフォーム別エントリを一時保存"""
        fee_rate = self.config_repo.fee_rate(platform)
        entry = build_platform_entry(
            platform,
            [MenuSale(menu_name=name, count=count, amount=amount) for name, count, amount in sales],
            fee_rate,
        )
        self.draft_builder.upsert_platform_entry(entry)
        return entry

    def set_draft_memo(self, memo: str) -> None:
        self.draft_builder.set_memo(memo)

    def set_draft_date(self, work_date: date) -> None:
        self.draft_builder.set_date(work_date)

    def discard_draft(self) -> None:
        self.draft_builder.remove_draft()

    def menu_summary(self) -> List[Tuple[str, MenuTotal]]:
        return self.draft_builder.menu_summary()

    def finalize_daily_settlement(self) -> DailyReport:
        """下書きを締めて台帳に追加"""
        report, self.reports = self.finalizer.finalize(self.draft_builder, self.reports)
        return report

    def reset_reports(self) -> None:
        """台帳を全削除"""
        self.reports = self.consolidator.reset()

    # --- 集計 ---

    def home_metrics(self) -> aggregator.HomeMetrics:
        return aggregator.home_metrics(self.reports, self.today())

    def recent_summary(self) -> List[DailyReport]:
        return aggregator.recent(self.reports, self.config.get('recent_count', LedgerConstants.RECENT_COUNT))

    def stats(self, period: StatsPeriod) -> List[aggregator.PeriodBucket]:
        return aggregator.period_buckets(self.reports, period)

    def platform_stats(self) -> List[aggregator.PlatformTotal]:
        return aggregator.platform_summary(self.reports)

    # --- ファイル入出力 ---

    def export_backup(self, path: Optional[Path] = None) -> Path:
        if path is None:
            path = Path(default_backup_filename(self.today()))
        return export_backup(path, self.reports, self.config_repo.menus, self.config_repo.platforms)

    def import_backup(self, path: Path) -> List[DailyReport]:
        self.reports = import_backup(path, self.consolidator, self.config_repo, self.reports)
        return self.reports

    def write_template(self, path: Optional[Path] = None) -> Path:
        return write_entry_template(path or Path(LedgerConstants.TEMPLATE_FILENAME))

    def export_stats(self, path: Path, period: StatsPeriod) -> Path:
        return export_period_stats(path, self.reports, period, self.config_repo.platform_names())

    def summary_for_log(self) -> Dict[str, object]:
        return self.consolidator.last_summary.to_dict()
