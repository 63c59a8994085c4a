"""
統一Excelハンドラー
"""
import pandas as pd
import openpyxl
from openpyxl.utils import get_column_letter
from pathlib import Path
from typing import Dict, List, Optional
from ..error_handling.exceptions import FileProcessingError


class ExcelHandler:
    """Excelファイルの統一処理クラス"""

    DEFAULT_ENGINE = 'openpyxl'
    MAX_COLUMN_WIDTH = 40

    def __init__(self, logger=None, error_handler=None):
        self.logger = logger
        self.error_handler = error_handler

    def write_sheets(self, file_path: Path, sheets: Dict[str, pd.DataFrame]) -> Path:
        """複数シートのExcelファイルを書き出し"""
        file_path = Path(file_path)
        if not sheets:
            raise FileProcessingError(f"書き出すシートがありません: {file_path.name}")

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with pd.ExcelWriter(file_path, engine=self.DEFAULT_ENGINE) as writer:
                for sheet_name, df in sheets.items():
                    df.to_excel(writer, sheet_name=sheet_name, index=False)
            self._autofit_columns(file_path)
        except (OSError, ValueError) as e:
            if self.error_handler:
                self.error_handler.log_error_with_context(e, {'file_path': str(file_path)})
            raise FileProcessingError(f"Excel書き込みエラー: {file_path.name} - {str(e)}") from e

        if self.logger:
            self.logger.info(f"Excel書き込み成功: {file_path.name} ({len(sheets)}シート)")
        return file_path

    def _autofit_columns(self, file_path: Path) -> None:
        """列幅をセル内容に合わせて調整"""
        workbook = openpyxl.load_workbook(file_path)
        try:
            for worksheet in workbook.worksheets:
                for index, column in enumerate(worksheet.iter_cols(), 1):
                    width = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
                    worksheet.column_dimensions[get_column_letter(index)].width = min(width * 2 + 2, self.MAX_COLUMN_WIDTH)
            workbook.save(file_path)
        finally:
            workbook.close()

    def read_excel_safe(self, file_path: Path, **kwargs) -> Optional[pd.DataFrame]:
        """安全なExcel読み込み（エラー時はNoneを返す）"""
        file_path = Path(file_path)
        try:
            return pd.read_excel(file_path, engine=self.DEFAULT_ENGINE, **kwargs)
        except Exception as e:
            if self.error_handler:
                self.error_handler.log_error_with_context(e, {'file_path': str(file_path)})
            elif self.logger:
                self.logger.error(f"Excel読み込みエラー: {file_path.name} - {str(e)}")
            return None

    def get_sheet_names(self, file_path: Path) -> List[str]:
        """Excelファイルのシート名一覧を取得"""
        try:
            workbook = openpyxl.load_workbook(file_path, read_only=True)
        except Exception as e:
            if self.logger:
                self.logger.error(f"シート名取得エラー: {Path(file_path).name} - {str(e)}")
            return []
        try:
            return list(workbook.sheetnames)
        finally:
            workbook.close()
