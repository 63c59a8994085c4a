#!/usr/bin/env python3
"""
売上台帳システム メイン実行スクリプト

使用方法:
    python run_sales_ledger.py scan
    python run_sales_ledger.py add BAEMIN "닭강정=3:45000" "음료=2:4000"
    python run_sales_ledger.py finalize
    python run_sales_ledger.py stats --period MONTHLY
"""

import sys
import argparse
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Tuple

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent))

from common.config.config_manager import ConfigManager
from common.error_handling.exceptions import DataValidationError, LedgerError
from common.logging.unified_logger import UnifiedLogger
from sales_ledger.constants import LedgerConstants, StatsPeriod
from sales_ledger.ledger_controller import LedgerController


def parse_arguments(argv: Optional[List[str]] = None):
    """コマンドライン引数を解析"""
    parser = argparse.ArgumentParser(
        description="売上台帳（日次精算・過去データ統合・統計）",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用例:
  %(prog)s scan                                  # 過去データを統合して件数を表示
  %(prog)s add BAEMIN "닭강정=3:45000"            # 배달의민족の売上を一時保存
  %(prog)s memo "雨のため客足少なめ"               # 下書きにメモを設定
  %(prog)s finalize                              # 日次精算を締める
  %(prog)s stats --period WEEKLY                 # 週別統計を表示
  %(prog)s platforms                             # プラットフォーム別の累計を表示
  %(prog)s export backup.json                    # 全データを書き出し
  %(prog)s import backup.json                    # バックアップを復元
  %(prog)s reset --yes                           # 台帳を全削除
        """
    )

    parser.add_argument('--config', type=Path, help='設定ファイルのパス')
    parser.add_argument('--data-dir', type=Path, help='台帳データの保存ディレクトリ')
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='ログレベル（デフォルト: 設定ファイルの値）'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('scan', help='過去データを統合')

    add_parser = subparsers.add_parser('add', help='プラットフォーム別の売上を一時保存')
    add_parser.add_argument('platform', help='プラットフォームID（例: BAEMIN）')
    add_parser.add_argument('sales', nargs='+', help='メニュー名=件数:金額')

    memo_parser = subparsers.add_parser('memo', help='下書きのメモを設定')
    memo_parser.add_argument('text')

    date_parser = subparsers.add_parser('date', help='下書きの営業日を設定')
    date_parser.add_argument('work_date', help='YYYY-MM-DD')

    subparsers.add_parser('show-draft', help='下書きの内容を表示')
    subparsers.add_parser('finalize', help='日次精算を締める')
    subparsers.add_parser('discard-draft', help='下書きを破棄')

    stats_parser = subparsers.add_parser('stats', help='期間別統計を表示')
    stats_parser.add_argument('--period', choices=[p.value for p in StatsPeriod], default=StatsPeriod.DAILY.value)

    subparsers.add_parser('recent', help='当月・前月の売上と直近の精算を表示')
    subparsers.add_parser('platforms', help='プラットフォーム別の累計売上・手数料を表示')

    export_parser = subparsers.add_parser('export', help='全データをJSONに書き出し')
    export_parser.add_argument('path', nargs='?', type=Path)

    import_parser = subparsers.add_parser('import', help='バックアップJSONを復元')
    import_parser.add_argument('path', type=Path)

    template_parser = subparsers.add_parser('template', help='入力テンプレート(Excel)を作成')
    template_parser.add_argument('path', nargs='?', type=Path)

    export_stats_parser = subparsers.add_parser('export-stats', help='統計をExcelに書き出し')
    export_stats_parser.add_argument('path', type=Path)
    export_stats_parser.add_argument('--period', choices=[p.value for p in StatsPeriod], default=StatsPeriod.DAILY.value)

    reset_parser = subparsers.add_parser('reset', help='台帳を全削除')
    reset_parser.add_argument('--yes', action='store_true', help='確認なしで削除')

    menus_parser = subparsers.add_parser('menus', help='メニューの一覧・追加・削除')
    menus_parser.add_argument('action', choices=['list', 'add', 'remove'])
    menus_parser.add_argument('name', nargs='?')

    fee_parser = subparsers.add_parser('fee', help='手数料率を変更')
    fee_parser.add_argument('platform')
    fee_parser.add_argument('rate', type=float)

    return parser.parse_args(argv)


def parse_menu_sales(pairs: List[str]) -> List[Tuple[str, int, int]]:
    """「メニュー名=件数:金額」の並びを解析"""
    sales = []
    for pair in pairs:
        name, sep, values = pair.rpartition('=')
        count, colon, amount = values.partition(':')
        if not sep or not colon or not name.strip():
            raise DataValidationError(f"入力形式が正しくありません（メニュー名=件数:金額）: {pair}")
        try:
            sales.append((name.strip(), int(count), int(amount)))
        except ValueError:
            raise DataValidationError(f"件数・金額は整数で指定してください: {pair}") from None
    return sales


def parse_work_date(value: str) -> date:
    try:
        return datetime.strptime(value, LedgerConstants.DATE_FORMAT).date()
    except ValueError:
        raise DataValidationError(f"日付はYYYY-MM-DD形式で指定してください: {value}") from None


def build_controller(args) -> Tuple[LedgerController, UnifiedLogger]:
    """設定を読み込んでコントローラーを起動"""
    config = ConfigManager(args.config)
    if args.data_dir:
        config.update_config({'data_dir': str(args.data_dir)})
    if args.log_level:
        config.update_config({'log_level': args.log_level})
    config.validate_configuration()

    settings = config.get_logging_settings()
    unified_logger = UnifiedLogger("sales_ledger", settings['log_level'], settings['log_file'])
    config.logger = unified_logger.logger
    unified_logger.log_configuration_info(config.get_all_settings())

    controller = LedgerController(config=config)
    controller.startup()
    unified_logger.log_consolidation_summary(controller.summary_for_log())
    return controller, unified_logger


def print_draft(controller: LedgerController) -> None:
    draft = controller.draft_builder.draft
    print(f"営業日: {draft.date.strftime(LedgerConstants.DATE_FORMAT)}")
    print(f"メモ: {draft.memo or '-'}")
    if draft.is_empty:
        print("入力済みのプラットフォームはありません")
        return
    for entry in draft.entries:
        print(f"  {entry.platform}: {entry.platform_total_amount:,} ({entry.platform_total_count} 件)"
              f" 手数料 {entry.fee_amount:,} / 精算 {entry.settlement_amount:,}")
    print("メニュー別合計:")
    for menu, total in controller.menu_summary():
        print(f"  {menu}: {total.amount:,} ({total.count} 件)")


def run_command(controller: LedgerController, args, unified_logger: UnifiedLogger) -> int:
    """サブコマンドを実行して終了コードを返す"""
    command = args.command

    if command == 'scan':
        print(f"統合後の精算件数: {len(controller.reports)}")

    elif command == 'add':
        entry = controller.save_platform_sales(args.platform, parse_menu_sales(args.sales))
        print(f"{entry.platform}: {entry.platform_total_amount:,} ({entry.platform_total_count} 件)"
              f" 手数料 {entry.fee_amount:,} / 精算 {entry.settlement_amount:,}")

    elif command == 'memo':
        controller.set_draft_memo(args.text)

    elif command == 'date':
        controller.set_draft_date(parse_work_date(args.work_date))

    elif command == 'show-draft':
        print_draft(controller)

    elif command == 'finalize':
        report = controller.finalize_daily_settlement()
        print(f"締め完了: {report.date.strftime(LedgerConstants.DATE_FORMAT)}"
              f" 合計 {report.total_amount:,} ({report.total_count} 件) id={report.id}")

    elif command == 'discard-draft':
        controller.discard_draft()

    elif command == 'stats':
        buckets = controller.stats(StatsPeriod(args.period))
        if not buckets:
            print("データがありません")
        for bucket in buckets:
            print(f"{bucket.label}\t{bucket.total_amount:,}\t{bucket.total_count}")

    elif command == 'recent':
        metrics = controller.home_metrics()
        print(f"当月売上: {metrics.current_month_sales:,}")
        print(f"前月売上: {metrics.previous_month_sales:,}")
        for report in controller.recent_summary():
            print(f"  {report.date.strftime(LedgerConstants.DATE_FORMAT)}\t{report.total_amount:,}"
                  f"\t{report.total_count}\t手数料 {report.total_fee:,}\t精算 {report.total_settlement:,}\t{report.memo}")

    elif command == 'platforms':
        totals = controller.platform_stats()
        if not totals:
            print("データがありません")
        for total in totals:
            print(f"{total.platform}\t{total.total_amount:,}\t{total.total_count}"
                  f"\t手数料 {total.fee_amount:,}\t精算 {total.settlement_amount:,}")
            unified_logger.log_platform_results(total.platform, {
                'total_amount': total.total_amount,
                'total_count': total.total_count,
                'fee_amount': total.fee_amount,
                'settlement_amount': total.settlement_amount,
            })

    elif command == 'export':
        print(f"書き出し: {controller.export_backup(args.path)}")

    elif command == 'import':
        reports = controller.import_backup(args.path)
        print(f"復元後の精算件数: {len(reports)}")

    elif command == 'template':
        print(f"テンプレート作成: {controller.write_template(args.path)}")

    elif command == 'export-stats':
        print(f"統計書き出し: {controller.export_stats(args.path, StatsPeriod(args.period))}")

    elif command == 'reset':
        if not args.yes:
            print("台帳を全削除するには --yes を指定してください")
            return 1
        controller.reset_reports()
        print("台帳を全削除しました")

    elif command == 'menus':
        if args.action == 'list':
            menus = controller.config_repo.menus
        elif not args.name:
            raise DataValidationError("メニュー名を指定してください")
        elif args.action == 'add':
            menus = controller.config_repo.add_menu(args.name)
        else:
            menus = controller.config_repo.remove_menu(args.name)
        for menu in menus:
            print(menu)

    elif command == 'fee':
        config = controller.config_repo.update_fee_rate(args.platform, args.rate)
        print(f"{config.id} ({config.name}): {config.fee_rate}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """メイン関数"""
    args = parse_arguments(argv)
    try:
        controller, unified_logger = build_controller(args)
        return run_command(controller, args, unified_logger)

    except LedgerError as e:
        print(f"エラー: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\n処理が中断されました。")
        return 1


if __name__ == '__main__':
    sys.exit(main())
