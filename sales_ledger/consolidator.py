"""
データ統合モジュール

現在の台帳と旧バージョンの保存データを1つの正規セットに統合し、
重複排除・日付降順ソートを行ってストアに保存します。
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from common.error_handling.error_handler import handle_errors
from common.error_handling.exceptions import ParseError

from .constants import StorageKeys
from .data_models import DailyReport
from .messages import MessageFormatter
from .schema_migrator import migrate
from .storage import KeyValueStore, decode_json, encode_json

LegacySource = Tuple[str, Optional[bytes]]


@dataclass
class ConsolidationSummary:
    """統合処理の結果サマリー"""
    current_records: int = 0
    sources_scanned: int = 0
    sources_skipped: List[str] = field(default_factory=list)
    records_converted: int = 0
    records_skipped: int = 0
    duplicates_removed: int = 0
    total_records: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            '既存レコード数': self.current_records,
            '走査した旧キー数': self.sources_scanned,
            'スキップした旧キー': ', '.join(self.sources_skipped) or 'なし',
            '変換レコード数': self.records_converted,
            'スキップしたレコード数': self.records_skipped,
            '統合した重複数': self.duplicates_removed,
            '統合後レコード数': self.total_records,
        }


def merge_reports(reports: Iterable[DailyReport]) -> List[DailyReport]:
    """
    IDで重複排除して日付降順に並べる

    同じIDが複数ある場合は最後に現れたものの内容を採用し、
    並び位置は最初に現れた位置を維持する。同じ日付同士は元の順序を保つ。
    """
    unique: Dict[str, DailyReport] = {}
    for report in reports:
        unique[report.id] = report
    return sorted(unique.values(), key=lambda r: r.date, reverse=True)


def serialize_reports(reports: Sequence[DailyReport]) -> bytes:
    return encode_json([report.to_dict() for report in reports])


class Consolidator:
    """台帳データ統合クラス"""

    def __init__(self, store: KeyValueStore, legacy_keys: Optional[Sequence[str]] = None,
                 today: Optional[Callable[[], date]] = None):
        self.store = store
        self.legacy_keys = list(StorageKeys.LEGACY if legacy_keys is None else legacy_keys)
        self.today = today or date.today
        self.logger = logging.getLogger(__name__)
        self.last_summary = ConsolidationSummary()

    def load_reports(self) -> List[DailyReport]:
        """台帳を読み込み（読めない場合は空として扱う）"""
        raw = self.store.get(StorageKeys.REPORTS)
        if raw is None:
            return []

        try:
            items = decode_json(raw)
        except ParseError as e:
            self.logger.warning(MessageFormatter.get_consolidation_message("canonical_unreadable", error=e))
            return []
        if not isinstance(items, list):
            self.logger.warning(MessageFormatter.get_consolidation_message(
                "canonical_unreadable", error="配列形式ではありません"
            ))
            return []

        reports = []
        for index, item in enumerate(items):
            try:
                reports.append(DailyReport.from_dict(item))
            except ParseError as e:
                self.logger.warning(MessageFormatter.get_consolidation_message(
                    "canonical_record_skipped", index=index, reason=e
                ))
        return reports

    def read_legacy_sources(self) -> List[LegacySource]:
        """旧キーの保存データを走査順に取得"""
        return [(key, self.store.get(key)) for key in self.legacy_keys]

    def _collect_source(self, source_key: str, raw: Optional[bytes], summary: ConsolidationSummary) -> List[DailyReport]:
        """旧データ1件分を解析して変換済みレコードを返す"""
        if raw is None:
            self.logger.debug(MessageFormatter.get_consolidation_message("source_missing", key=source_key))
            return []

        summary.sources_scanned += 1
        try:
            items = decode_json(raw)
        except ParseError as e:
            self.logger.warning(MessageFormatter.get_consolidation_message(
                "source_parse_failed", key=source_key, error=e
            ))
            summary.sources_skipped.append(source_key)
            return []

        if not isinstance(items, list):
            self.logger.warning(MessageFormatter.get_consolidation_message("source_not_list", key=source_key))
            summary.sources_skipped.append(source_key)
            return []

        converted = []
        for index, item in enumerate(items):
            report = migrate(item, source_key, self.today, index)
            if report is None:
                summary.records_skipped += 1
                self.logger.warning(MessageFormatter.get_consolidation_message(
                    "record_skipped", key=source_key, index=index, reason="未知の形式または不正な値"
                ))
                continue
            converted.append(report)

        summary.records_converted += len(converted)
        self.logger.info(MessageFormatter.get_consolidation_message(
            "source_loaded", key=source_key, converted=len(converted), total=len(items)
        ))
        return converted

    @handle_errors("データ統合")
    def consolidate(self, current_set: Sequence[DailyReport], legacy_sources: Sequence[LegacySource]) -> List[DailyReport]:
        """
        現在の台帳と旧データを統合して保存

        Args:
            current_set: 現在の正規セット
            legacy_sources: (キー, 保存データ) の走査順リスト

        Returns:
            List[DailyReport]: 統合後の正規セット

        Raises:
            StoreWriteError: 保存に失敗した場合
        """
        summary = ConsolidationSummary(current_records=len(current_set))
        working: List[DailyReport] = list(current_set)

        for source_key, raw in legacy_sources:
            working.extend(self._collect_source(source_key, raw, summary))

        consolidated = merge_reports(working)
        summary.duplicates_removed = len(working) - len(consolidated)
        summary.total_records = len(consolidated)
        if summary.duplicates_removed:
            self.logger.info(MessageFormatter.get_consolidation_message(
                "duplicates_removed", count=summary.duplicates_removed
            ))

        self.store.set(StorageKeys.REPORTS, serialize_reports(consolidated))
        self.last_summary = summary
        self.logger.info(MessageFormatter.get_consolidation_message(
            "consolidation_complete", count=len(consolidated)
        ))
        return consolidated

    def scan_and_consolidate(self) -> List[DailyReport]:
        """ストアの台帳と旧キーを走査して統合"""
        self.logger.info(MessageFormatter.get_consolidation_message("scan_start", count=len(self.legacy_keys)))
        return self.consolidate(self.load_reports(), self.read_legacy_sources())

    def save_reports(self, reports: Iterable[DailyReport]) -> List[DailyReport]:
        """重複排除・ソートして台帳を保存"""
        merged = merge_reports(reports)
        self.store.set(StorageKeys.REPORTS, serialize_reports(merged))
        return merged

    def prepend_report(self, report: DailyReport, current_set: Optional[Sequence[DailyReport]] = None) -> List[DailyReport]:
        """新しいレコードを先頭に追加して保存"""
        if current_set is None:
            current_set = self.load_reports()
        return self.save_reports([report, *current_set])

    def merge_imported(self, imported: Sequence[DailyReport],
                       current_set: Optional[Sequence[DailyReport]] = None) -> List[DailyReport]:
        """取り込んだレコードを台帳に統合（同じIDは取り込み側を採用）"""
        if current_set is None:
            current_set = self.load_reports()
        return self.save_reports([*current_set, *imported])

    def reset(self) -> List[DailyReport]:
        """台帳を空にする"""
        return self.save_reports([])
