"""
定数定義モジュール
"""

from enum import Enum
from typing import Dict, List


class StorageKeys:
    """ストアの論理キー"""
    REPORTS = "kh_reports_v26"
    CONFIG_MENUS = "kh_config_menus_v26"
    CONFIG_PLATFORMS = "kh_config_platforms_v26"
    DRAFT = "kh_draft_v26"

    # 旧バージョンのデータ保存先（この順序で走査する）
    LEGACY: List[str] = [
        "kh_sales_v25",
        "kh_sales_v24_final",
        "kh_sales_v24",
        "sales_data",
    ]


class StatsPeriod(Enum):
    """統計の集計単位"""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class LedgerConstants:
    """台帳処理に関する定数"""
    DATE_FORMAT = "%Y-%m-%d"
    MONTH_LABEL_FORMAT = "%Y-%m"
    YEAR_LABEL_FORMAT = "%Y"
    LEGACY_MEMO_FORMAT = "Converted from legacy data ({source_key})"
    BACKUP_FILENAME_FORMAT = "kyunghee-backup-{date}.json"
    TEMPLATE_FILENAME = "kyunghee_template.xlsx"
    RECENT_COUNT = 5
    STORE_FILE_SUFFIX = ".json"


class SpreadsheetConstants:
    """Excel出力に関する定数"""
    TEMPLATE_SHEET = "Template"
    TEMPLATE_COLUMNS: List[str] = ["날짜", "플랫폼", "메뉴", "수량", "금액"]
    TEMPLATE_SAMPLE_ROW: Dict[str, object] = {
        "날짜": "2024-01-01",
        "플랫폼": "BAEMIN",
        "메뉴": "닭강정",
        "수량": 10,
        "금액": 150000,
    }
    STATS_SHEET = "Stats"
    STATS_COLUMNS: List[str] = ["기간", "총 매출", "주문수"]
    PLATFORM_SHEET = "Platforms"
    PLATFORM_COLUMNS: List[str] = ["플랫폼", "매출", "건수", "수수료", "정산금액"]


# 初期プラットフォーム設定（id -> (表示名, 手数料率)）
INITIAL_PLATFORMS: Dict[str, tuple] = {
    "BAEMIN": ("배달의민족", 0.068),
    "COUPANG": ("쿠팡이츠", 0.098),
    "YOGIYO": ("요기요", 0.125),
    "STORE": ("매장", 0.0),
}

INITIAL_MENUS: List[str] = [
    "닭강정",
    "순한맛 닭강정",
    "매운맛 닭강정",
    "반반 닭강정",
    "음료",
]
