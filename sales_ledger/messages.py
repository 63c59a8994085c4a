"""
メッセージテンプレートモジュール
ログメッセージとエラーメッセージをテンプレート化
"""


class MessageTemplates:
    """メッセージテンプレート定義クラス"""

    # データ統合メッセージ
    CONSOLIDATION_MESSAGES = {
        "scan_start": "過去データのスキャンを開始します（旧キー {count} 件）",
        "source_missing": "旧データが存在しません: {key}",
        "source_parse_failed": "旧データの解析に失敗したためスキップします: {key} - {error}",
        "source_not_list": "旧データが配列形式ではないためスキップします: {key}",
        "source_loaded": "旧データを読み込みました: {key} ({converted}/{total} 件変換)",
        "record_skipped": "変換できないレコードをスキップしました: {key}[{index}] - {reason}",
        "canonical_unreadable": "台帳データを読み込めないため空として扱います: {error}",
        "canonical_record_skipped": "台帳内の不正なレコードをスキップしました: [{index}] - {reason}",
        "duplicates_removed": "重複IDを {count} 件統合しました",
        "consolidation_complete": "データ統合が完了しました: {count} 件",
    }

    # 下書き・締め処理メッセージ
    SETTLEMENT_MESSAGES = {
        "draft_restored": "下書きを復元しました: {date} ({entries} プラットフォーム)",
        "draft_checkpoint_corrupt": "下書きのチェックポイントが壊れているため破棄します: {error}",
        "entry_saved": "{platform} のデータを一時保存しました: {amount} ({count} 件)",
        "draft_cleared": "下書きを削除しました",
        "empty_draft": "入力されたデータがありません",
        "finalized": "日次精算を締めました: {date} 合計 {amount} ({count} 件)",
    }

    # ファイル入出力メッセージ
    FILE_MESSAGES = {
        "export_complete": "全データを書き出しました: {path} ({count} 件)",
        "import_complete": "バックアップを復元しました: {path} (取込 {imported} 件, 合計 {total} 件)",
        "import_invalid": "ファイル形式が正しくありません: {path}",
        "template_created": "入力テンプレートを作成しました: {path}",
        "stats_exported": "統計データを書き出しました: {path} ({period})",
    }

    # 設定関連メッセージ
    CONFIG_MESSAGES = {
        "config_restored": "保存済み設定を読み込みました: {key}",
        "config_corrupt": "保存済み設定が壊れているため既定値を使用します: {key} - {error}",
        "menu_added": "メニューを追加しました: {menu}",
        "menu_removed": "メニューを削除しました: {menu}",
        "fee_updated": "手数料率を更新しました: {platform} = {rate}",
        "config_replaced": "設定を置き換えました: {sections}",
    }


class MessageFormatter:
    """メッセージフォーマッタークラス"""

    @staticmethod
    def format_message(template: str, **kwargs) -> str:
        """テンプレートをフォーマットしてメッセージを生成"""
        try:
            return template.format(**kwargs)
        except KeyError as e:
            return f"メッセージテンプレートエラー: 変数 {e} が見つかりません - {template}"

    @staticmethod
    def get_consolidation_message(message_key: str, **kwargs) -> str:
        """統合処理関連メッセージを取得"""
        template = MessageTemplates.CONSOLIDATION_MESSAGES.get(message_key, f"Unknown consolidation message: {message_key}")
        return MessageFormatter.format_message(template, **kwargs)

    @staticmethod
    def get_settlement_message(message_key: str, **kwargs) -> str:
        """下書き・締め処理関連メッセージを取得"""
        template = MessageTemplates.SETTLEMENT_MESSAGES.get(message_key, f"Unknown settlement message: {message_key}")
        return MessageFormatter.format_message(template, **kwargs)

    @staticmethod
    def get_file_message(message_key: str, **kwargs) -> str:
        """ファイル関連メッセージを取得"""
        template = MessageTemplates.FILE_MESSAGES.get(message_key, f"Unknown file message: {message_key}")
        return MessageFormatter.format_message(template, **kwargs)

    @staticmethod
    def get_config_message(message_key: str, **kwargs) -> str:
        """設定関連メッセージを取得"""
        template = MessageTemplates.CONFIG_MESSAGES.get(message_key, f"Unknown config message: {message_key}")
        return MessageFormatter.format_message(template, **kwargs)
