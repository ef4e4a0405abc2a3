from __future__ import annotations

from pathlib import Path
from typing import Iterable

from powersnap.domain.exceptions import SourceFormatError
from powersnap.infra.sources.csv_reader import read_csv_sheet
from powersnap.infra.sources.models import SourceSheet
from powersnap.infra.sources.workbook_reader import read_workbook_sheets

CSV_EXTENSIONS = (".csv",)
WORKBOOK_EXTENSIONS = (".xlsx", ".xlsm")


def read_source_sheets(path: str, sheet_names: Iterable[str] | None = None) -> list[SourceSheet]:
    """
    Назначение:
        Выбрать читатель по расширению файла.

    Ошибки:
        SourceFormatError для неподдерживаемого расширения (в т.ч. старого .xls).
    """
    extension = Path(path).suffix.lower()
    if extension in CSV_EXTENSIONS:
        return [read_csv_sheet(path)]
    if extension in WORKBOOK_EXTENSIONS:
        return read_workbook_sheets(path, sheet_names)
    if extension == ".xls":
        raise SourceFormatError(path=path, message="legacy .xls workbooks are not supported, save as .xlsx")
    raise SourceFormatError(path=path, message=f"unsupported file extension '{extension}'")
