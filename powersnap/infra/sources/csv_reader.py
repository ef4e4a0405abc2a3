from __future__ import annotations

import csv
from pathlib import Path

from powersnap.domain.exceptions import SourceFormatError
from powersnap.infra.sources.models import SourceRow, SourceSheet


def read_csv_sheet(path: str) -> SourceSheet:
    """
    Назначение:
        Прочитать CSV целиком как один "лист" строк.

    Контракт:
        - Кодировка utf-8 (BOM допускается), разделитель ",".
        - Строки могут иметь разную длину: файл может содержать несколько таблиц.
        - Значения тримятся, пустые ячейки -> "".

    Ошибки:
        SourceFormatError при ошибке декодирования или разбора CSV.
    """
    rows: list[SourceRow] = []
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f, delimiter=",")
            for csv_line_no, row in enumerate(reader, start=1):
                rows.append(SourceRow(line_no=csv_line_no, cells=tuple((value or "").strip() for value in row)))
    except UnicodeDecodeError as exc:
        raise SourceFormatError(path=path, message=f"not UTF-8 text: {exc}") from exc
    except csv.Error as exc:
        raise SourceFormatError(path=path, message=str(exc)) from exc
    return SourceSheet(name=Path(path).stem, rows=tuple(rows))
