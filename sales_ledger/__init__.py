"""
売上台帳パッケージ

プラットフォーム別の日次売上入力、日次精算の締め、旧バージョンの
保存データの統合、期間別の統計を提供します。
"""

from .constants import StatsPeriod, StorageKeys
from .data_models import DailyReport, Draft, MenuSale, MenuTotal, PlatformConfig, PlatformEntry
from .storage import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .schema_migrator import migrate
from .consolidator import Consolidator, merge_reports
from .draft_builder import DraftBuilder, build_platform_entry, calculate_fee
from .settlement import SettlementFinalizer
from .ledger_config import LedgerConfigRepository
from .ledger_controller import LedgerController

__all__ = [
    'StatsPeriod',
    'StorageKeys',
    'DailyReport',
    'Draft',
    'MenuSale',
    'MenuTotal',
    'PlatformConfig',
    'PlatformEntry',
    'KeyValueStore',
    'MemoryKeyValueStore',
    'FileKeyValueStore',
    'migrate',
    'Consolidator',
    'merge_reports',
    'DraftBuilder',
    'build_platform_entry',
    'calculate_fee',
    'SettlementFinalizer',
    'LedgerConfigRepository',
    'LedgerController',
]
