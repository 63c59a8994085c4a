"""
統一例外クラス定義
"""


class LedgerError(Exception):
    """売上台帳システムの基本例外クラス"""
    pass


class ParseError(LedgerError):
    """保存データ・取込ファイルの形式不正"""
    pass


class EmptyDraftError(LedgerError):
    """入力が一件もない下書きを締めようとした"""
    pass


class StoreWriteError(LedgerError):
    """ストアへの書き込み・削除の失敗"""
    pass


class FileProcessingError(LedgerError):
    """ファイル処理関連のエラー"""
    pass


class DataValidationError(LedgerError):
    """データ検証関連のエラー"""
    pass


class ConfigurationError(LedgerError):
    """設定関連のエラー"""
    pass


class EncodingDetectionError(FileProcessingError):
    """エンコーディング検出関連のエラー"""
    pass
