"""
Excel出力モジュール

手入力用のテンプレートと統計データのExcelファイルを作成します。
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

import pandas as pd

from common.file_handlers.excel_handler import ExcelHandler

from .aggregator import buckets_to_frame, period_buckets, platform_summary, platform_totals_to_frame
from .constants import SpreadsheetConstants, StatsPeriod
from .data_models import DailyReport
from .messages import MessageFormatter

logger = logging.getLogger(__name__)


def write_entry_template(path: Path) -> Path:
    """日付・プラットフォーム・メニュー・数量・金額の入力テンプレートを作成"""
    df = pd.DataFrame([SpreadsheetConstants.TEMPLATE_SAMPLE_ROW], columns=SpreadsheetConstants.TEMPLATE_COLUMNS)
    written = ExcelHandler(logger).write_sheets(Path(path), {SpreadsheetConstants.TEMPLATE_SHEET: df})
    logger.info(MessageFormatter.get_file_message("template_created", path=written))
    return written


def export_period_stats(path: Path, reports: Sequence[DailyReport], period: StatsPeriod,
                        platform_names: Optional[Dict[str, str]] = None) -> Path:
    """期間別集計とプラットフォーム別集計をExcelに書き出し"""
    sheets = {
        SpreadsheetConstants.STATS_SHEET: buckets_to_frame(period_buckets(reports, period)),
        SpreadsheetConstants.PLATFORM_SHEET: platform_totals_to_frame(platform_summary(reports), platform_names),
    }
    written = ExcelHandler(logger).write_sheets(Path(path), sheets)
    logger.info(MessageFormatter.get_file_message("stats_exported", path=written, period=period.value))
    return written
