"""
集計モジュール

正規セット（日付降順）から期間別・プラットフォーム別の統計を算出します。
すべて読み取り専用です。
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

import pandas as pd
from dateutil.relativedelta import relativedelta

from .constants import LedgerConstants, SpreadsheetConstants, StatsPeriod
from .data_models import DailyReport


@dataclass(frozen=True)
class PeriodBucket:
    """期間別の集計結果"""
    label: str
    total_amount: int
    total_count: int


@dataclass(frozen=True)
class PlatformTotal:
    """プラットフォーム別の集計結果"""
    platform: str
    total_amount: int
    total_count: int
    fee_amount: int
    settlement_amount: int


@dataclass(frozen=True)
class HomeMetrics:
    """当月・前月の累計売上"""
    current_month_sales: int
    previous_month_sales: int


def month_total(reports: Sequence[DailyReport], year: int, month: int) -> int:
    """指定年月の売上合計"""
    return sum(r.total_amount for r in reports if r.date.year == year and r.date.month == month)


def recent(reports: Sequence[DailyReport], n: int = LedgerConstants.RECENT_COUNT) -> List[DailyReport]:
    """直近n件"""
    return list(reports[:max(n, 0)])


def home_metrics(reports: Sequence[DailyReport], today: date) -> HomeMetrics:
    """当月と前月の累計売上"""
    previous = today - relativedelta(months=1)
    return HomeMetrics(
        current_month_sales=month_total(reports, today.year, today.month),
        previous_month_sales=month_total(reports, previous.year, previous.month),
    )


def bucket_label(day: date, period: StatsPeriod) -> str:
    """集計単位ごとのラベル（週は月曜日の日付）"""
    if period is StatsPeriod.DAILY:
        return day.strftime(LedgerConstants.DATE_FORMAT)
    if period is StatsPeriod.WEEKLY:
        return (day - timedelta(days=day.weekday())).strftime(LedgerConstants.DATE_FORMAT)
    if period is StatsPeriod.MONTHLY:
        return day.strftime(LedgerConstants.MONTH_LABEL_FORMAT)
    if period is StatsPeriod.YEARLY:
        return day.strftime(LedgerConstants.YEAR_LABEL_FORMAT)
    raise ValueError(f"未知の集計単位です: {period}")


def period_buckets(reports: Sequence[DailyReport], period: StatsPeriod) -> List[PeriodBucket]:
    """
    期間別に売上・件数を合計

    バケットの並びは入力内で最初に現れた順（正規セットなら新しい順）。
    """
    if not reports:
        return []

    df = pd.DataFrame({
        'label': [bucket_label(r.date, period) for r in reports],
        'amount': [r.total_amount for r in reports],
        'count': [r.total_count for r in reports],
    })
    grouped = df.groupby('label', sort=False)[['amount', 'count']].sum()

    return [
        PeriodBucket(label=str(label), total_amount=int(row['amount']), total_count=int(row['count']))
        for label, row in grouped.iterrows()
    ]


def platform_summary(reports: Sequence[DailyReport]) -> List[PlatformTotal]:
    """プラットフォーム別の売上・手数料・精算額（初出順）"""
    rows = [
        {
            'platform': entry.platform,
            'amount': entry.platform_total_amount,
            'count': entry.platform_total_count,
            'fee': entry.fee_amount,
            'settlement': entry.settlement_amount,
        }
        for report in reports
        for entry in report.entries
    ]
    if not rows:
        return []

    grouped = pd.DataFrame(rows).groupby('platform', sort=False).sum()
    return [
        PlatformTotal(
            platform=str(platform),
            total_amount=int(row['amount']),
            total_count=int(row['count']),
            fee_amount=int(row['fee']),
            settlement_amount=int(row['settlement']),
        )
        for platform, row in grouped.iterrows()
    ]


def buckets_to_frame(buckets: Sequence[PeriodBucket]) -> pd.DataFrame:
    """期間別集計をExcel出力用のDataFrameに変換"""
    columns = SpreadsheetConstants.STATS_COLUMNS
    return pd.DataFrame(
        [[b.label, b.total_amount, b.total_count] for b in buckets],
        columns=columns,
    )


def platform_totals_to_frame(totals: Sequence[PlatformTotal], names: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """プラットフォーム別集計をExcel出力用のDataFrameに変換"""
    names = names or {}
    return pd.DataFrame(
        [
            [names.get(t.platform, t.platform), t.total_amount, t.total_count, t.fee_amount, t.settlement_amount]
            for t in totals
        ],
        columns=SpreadsheetConstants.PLATFORM_COLUMNS,
    )
