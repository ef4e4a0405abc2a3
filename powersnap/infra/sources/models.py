from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceRow:
    """
    Назначение:
        Строка листа/файла: номер строки (с 1) и значения ячеек (тримленные строки).
    """

    line_no: int
    cells: tuple[str, ...]

    @property
    def is_blank(self) -> bool:
        return all(cell == "" for cell in self.cells)


@dataclass(frozen=True)
class SourceSheet:
    name: str
    rows: tuple[SourceRow, ...]


@dataclass
class TableSection:
    """
    Назначение:
        Таблица внутри листа: строка заголовков и следующие за ней строки данных.
    """

    sheet_name: str
    header_line: int
    headers: tuple[str, ...]
    rows: list[SourceRow] = field(default_factory=list)
