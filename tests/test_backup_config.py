"""
バックアップ入出力・台帳設定・Excel出力のテスト
"""
import json
import shutil
import tempfile
import unittest
from datetime import date
from pathlib import Path
import sys

import pandas as pd

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.error_handling.exceptions import DataValidationError, ParseError
from common.file_handlers.excel_handler import ExcelHandler
from sales_ledger.backup import default_backup_filename, export_backup, import_backup, parse_backup_document
from sales_ledger.constants import INITIAL_MENUS, SpreadsheetConstants, StatsPeriod, StorageKeys
from sales_ledger.consolidator import Consolidator
from sales_ledger.data_models import DailyReport, PlatformEntry
from sales_ledger.ledger_config import LedgerConfigRepository
from sales_ledger.spreadsheet import export_period_stats, write_entry_template
from sales_ledger.storage import MemoryKeyValueStore, decode_json, encode_json


def make_report(report_id, day, amount, memo=''):
    entry = PlatformEntry(platform='BAEMIN', platform_total_amount=amount, platform_total_count=1,
                          settlement_amount=amount)
    return DailyReport(id=report_id, date=date.fromisoformat(day), entries=(entry,),
                       total_amount=amount, total_count=1, memo=memo, created_at=1)


class TestLedgerConfigRepository(unittest.TestCase):
    """メニュー・手数料設定のテスト"""

    def setUp(self):
        self.store = MemoryKeyValueStore()
        self.repo = LedgerConfigRepository(self.store).load()

    def test_defaults(self):
        self.assertEqual(self.repo.menus, INITIAL_MENUS)
        self.assertEqual(self.repo.fee_rate('BAEMIN'), 0.068)
        self.assertEqual(self.repo.fee_rate('STORE'), 0.0)
        self.assertEqual(self.repo.platform_names()['COUPANG'], '쿠팡이츠')

    def test_add_and_remove_menu_persist(self):
        self.repo.add_menu('치즈 닭강정')
        self.repo.remove_menu('음료')

        reloaded = LedgerConfigRepository(self.store).load()
        self.assertIn('치즈 닭강정', reloaded.menus)
        self.assertNotIn('음료', reloaded.menus)

    def test_menu_validation(self):
        with self.assertRaises(DataValidationError):
            self.repo.add_menu('닭강정')
        with self.assertRaises(DataValidationError):
            self.repo.add_menu('   ')
        with self.assertRaises(DataValidationError):
            self.repo.remove_menu('없는 메뉴')

    def test_update_fee_rate(self):
        updated = self.repo.update_fee_rate('YOGIYO', 0.1)
        self.assertEqual(updated.fee_rate, 0.1)
        self.assertEqual(LedgerConfigRepository(self.store).load().fee_rate('YOGIYO'), 0.1)

        with self.assertRaises(DataValidationError):
            self.repo.update_fee_rate('YOGIYO', 1.5)
        with self.assertRaises(DataValidationError):
            self.repo.fee_rate('UNKNOWN')

    def test_corrupt_config_falls_back_to_defaults(self):
        self.store.set(StorageKeys.CONFIG_MENUS, b'not json')
        self.store.set(StorageKeys.CONFIG_PLATFORMS, encode_json({'BAEMIN': {'feeRate': 2}}))

        repo = LedgerConfigRepository(self.store).load()
        self.assertEqual(repo.menus, INITIAL_MENUS)
        self.assertEqual(repo.fee_rate('BAEMIN'), 0.068)


class TestBackup(unittest.TestCase):
    """バックアップの書き出しと取り込みのテスト"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = MemoryKeyValueStore()
        self.consolidator = Consolidator(self.store, legacy_keys=[])
        self.config_repo = LedgerConfigRepository(self.store).load()
        self.current = self.consolidator.save_reports([
            make_report('keep', '2024-03-04', 20000),
            make_report('shared', '2024-03-01', 30000, memo='before'),
        ])

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_default_filename(self):
        self.assertEqual(default_backup_filename(date(2024, 3, 5)), 'kyunghee-backup-2024-03-05.json')

    def test_export_document(self):
        path = export_backup(self.temp_dir / 'backup.json', self.current,
                             self.config_repo.menus, self.config_repo.platforms)
        document = json.loads(path.read_text(encoding='utf-8'))

        self.assertEqual([r['id'] for r in document['reports']], ['keep', 'shared'])
        self.assertEqual(document['customMenus'], INITIAL_MENUS)
        self.assertEqual(document['platformConfigs']['BAEMIN']['feeRate'], 0.068)

    def test_import_duplicate_id_does_not_grow(self):
        """既存IDを含むファイルの取り込みは件数を増やさず取り込み側の値を採用"""
        imported = make_report('shared', '2024-03-01', 99000, memo='after')
        path = self.temp_dir / 'import.json'
        path.write_text(json.dumps({'reports': [imported.to_dict()]}), encoding='utf-8')

        merged = import_backup(path, self.consolidator, self.config_repo, self.current)

        self.assertEqual(len(merged), len(self.current))
        shared = [r for r in merged if r.id == 'shared'][0]
        self.assertEqual(shared.total_amount, 99000)
        self.assertEqual(shared.memo, 'after')
        self.assertEqual(self.consolidator.load_reports(), merged)

    def test_import_replaces_config(self):
        path = self.temp_dir / 'import.json'
        path.write_text(json.dumps({
            'reports': [],
            'customMenus': ['후라이드'],
            'platformConfigs': {'BAEMIN': {'id': 'BAEMIN', 'name': '배민', 'feeRate': 0.05}},
        }), encoding='utf-8')

        import_backup(path, self.consolidator, self.config_repo, self.current)

        reloaded = LedgerConfigRepository(self.store).load()
        self.assertEqual(reloaded.menus, ['후라이드'])
        self.assertEqual(reloaded.fee_rate('BAEMIN'), 0.05)

    def test_import_bare_list(self):
        path = self.temp_dir / 'list.json'
        path.write_text(json.dumps([make_report('new', '2024-03-10', 1000).to_dict()]), encoding='utf-8')

        merged = import_backup(path, self.consolidator, self.config_repo)
        self.assertEqual([r.id for r in merged], ['new', 'keep', 'shared'])

    def test_invalid_import_changes_nothing(self):
        """不正なファイルはParseErrorで台帳・設定は変わらない"""
        before = self.store.get(StorageKeys.REPORTS)
        path = self.temp_dir / 'bad.json'
        path.write_text(json.dumps({
            'reports': [make_report('ok', '2024-03-10', 1).to_dict(), {'id': 'broken'}],
            'customMenus': ['후라이드'],
        }), encoding='utf-8')

        with self.assertRaises(ParseError):
            import_backup(path, self.consolidator, self.config_repo, self.current)
        self.assertEqual(self.store.get(StorageKeys.REPORTS), before)
        self.assertEqual(self.config_repo.menus, INITIAL_MENUS)

        path.write_text('{"reports": [', encoding='utf-8')
        with self.assertRaises(ParseError):
            import_backup(path, self.consolidator, self.config_repo, self.current)

    def test_parse_backup_document_types(self):
        with self.assertRaises(ParseError):
            parse_backup_document("text")
        with self.assertRaises(ParseError):
            parse_backup_document({'reports': {'id': 'x'}})
        self.assertEqual(parse_backup_document({}).reports, [])


class TestSpreadsheet(unittest.TestCase):
    """Excel出力のテスト"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_entry_template(self):
        path = write_entry_template(self.temp_dir / 'kyunghee_template.xlsx')
        df = pd.read_excel(path, sheet_name=SpreadsheetConstants.TEMPLATE_SHEET, engine='openpyxl')

        self.assertEqual(list(df.columns), SpreadsheetConstants.TEMPLATE_COLUMNS)
        self.assertEqual(len(df), 1)
        self.assertEqual(df.iloc[0]['플랫폼'], 'BAEMIN')
        self.assertEqual(int(df.iloc[0]['금액']), 150000)

    def test_period_stats_export(self):
        reports = [
            make_report('b', '2024-03-05', 150000),
            make_report('a', '2024-02-10', 50000),
        ]
        path = export_period_stats(self.temp_dir / 'stats.xlsx', reports, StatsPeriod.MONTHLY,
                                   {'BAEMIN': '배달의민족'})

        self.assertEqual(ExcelHandler().get_sheet_names(path),
                         [SpreadsheetConstants.STATS_SHEET, SpreadsheetConstants.PLATFORM_SHEET])
        stats = pd.read_excel(path, sheet_name=SpreadsheetConstants.STATS_SHEET, engine='openpyxl')
        self.assertEqual(list(stats['기간']), ['2024-03', '2024-02'])
        self.assertEqual(list(stats['총 매출']), [150000, 50000])
        platforms = pd.read_excel(path, sheet_name=SpreadsheetConstants.PLATFORM_SHEET, engine='openpyxl')
        self.assertEqual(platforms.iloc[0]['플랫폼'], '배달의민족')
        self.assertEqual(int(platforms.iloc[0]['매출']), 200000)


if __name__ == '__main__':
    unittest.main()
