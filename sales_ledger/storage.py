"""
キーバリューストアモジュール

台帳はバイト列を保存するキーバリューストアだけを前提とします。
保存媒体（ファイル、DBなど）はこのインターフェースの実装で差し替えます。
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from common.error_handling.error_handler import retry_on_error
from common.error_handling.exceptions import ParseError, StoreWriteError

from .constants import LedgerConstants


class KeyValueStore(ABC):
    """論理キーでバイト列を読み書きするストアの基底クラス"""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """キーの値を取得（存在しなければNone）"""

    @abstractmethod
    def set(self, key: str, data: bytes) -> None:
        """キーに値を保存（失敗時はStoreWriteError）"""

    @abstractmethod
    def remove(self, key: str) -> None:
        """キーを削除（存在しなくてもエラーにしない）"""


class MemoryKeyValueStore(KeyValueStore):
    """メモリ上のストア"""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, data: bytes) -> None:
        if not isinstance(data, bytes):
            raise StoreWriteError(f"保存データはbytesである必要があります: {key}")
        self._data[key] = data

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class FileKeyValueStore(KeyValueStore):
    """ディレクトリ内にキーごとのファイルとして保存するストア"""

    def __init__(self, directory: Path, max_retries: int = 3, base_delay: float = 0.1):
        self.directory = Path(directory)
        self.logger = logging.getLogger(__name__)
        self.max_retries = max_retries
        self._write_with_retry = retry_on_error(max_retries=max_retries, base_delay=base_delay)(self._write_atomic)

    def _path_for(self, key: str) -> Path:
        if not key or any(sep in key for sep in ('/', '\\')) or key.startswith('.'):
            raise ValueError(f"不正なキーです: {key!r}")
        return self.directory / f"{key}{LedgerConstants.STORE_FILE_SUFFIX}"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            self.logger.warning(f"ストア読み込みエラー: {path.name} - {e}")
            return None

    def set(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        try:
            self._write_with_retry(path, data)
        except OSError as e:
            raise StoreWriteError(f"ストアへの保存に失敗しました: {key} - {e}") from e

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StoreWriteError(f"ストアからの削除に失敗しました: {key} - {e}") from e

    def _write_atomic(self, path: Path, data: bytes) -> None:
        """一時ファイルに書いてから置き換える"""
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


def encode_json(payload: Any) -> bytes:
    """JSON互換データをUTF-8バイト列に変換"""
    return json.dumps(payload, ensure_ascii=False).encode('utf-8')


def decode_json(data: bytes) -> Any:
    """UTF-8バイト列をJSONとして解釈"""
    try:
        return json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"保存データを解析できません: {e}") from e
