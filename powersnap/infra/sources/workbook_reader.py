from __future__ import annotations

import zipfile
from datetime import date, datetime, time
from typing import Any, Iterable

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from powersnap.domain.exceptions import SourceFormatError
from powersnap.infra.sources.models import SourceRow, SourceSheet


def cell_text(value: Any) -> str:
    """
    Назначение:
        Привести значение ячейки к строке так, как его показал бы экспорт.

    Алгоритм:
        None -> ""; целое float -> без ".0"; даты -> ISO; прочее -> str и trim.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value).strip()


def read_workbook_sheets(path: str, sheet_names: Iterable[str] | None = None) -> list[SourceSheet]:
    """
    Назначение:
        Прочитать все (или выбранные) листы книги .xlsx/.xlsm.

    Входные данные:
        sheet_names: имена листов для чтения (без учёта регистра); None -> все.

    Ограничения:
        Формулы не вычисляются: берутся сохранённые значения (data_only=True).

    Ошибки:
        SourceFormatError, если файл не является корректной книгой.
    """
    wanted = {name.casefold() for name in sheet_names} if sheet_names else None
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        raise SourceFormatError(path=path, message=f"cannot open workbook: {exc}") from exc

    sheets: list[SourceSheet] = []
    try:
        for worksheet in workbook.worksheets:
            if wanted is not None and worksheet.title.casefold() not in wanted:
                continue
            rows = tuple(
                SourceRow(line_no=row_no, cells=tuple(cell_text(value) for value in values))
                for row_no, values in enumerate(worksheet.iter_rows(values_only=True), start=1)
            )
            sheets.append(SourceSheet(name=worksheet.title, rows=rows))
    finally:
        workbook.close()
    return sheets
