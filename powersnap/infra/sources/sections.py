from __future__ import annotations

from typing import Collection

from powersnap.infra.sources.models import SourceSheet, TableSection

MIN_HEADER_MATCHES = 2


def is_header_row(cells: tuple[str, ...], known_headers: Collection[str], first_row: bool) -> bool:
    matches = len({cell for cell in cells if cell and cell in known_headers})
    if matches >= MIN_HEADER_MATCHES:
        return True
    return first_row and matches >= 1


def split_sections(sheet: SourceSheet, known_headers: Collection[str]) -> list[TableSection]:
    """
    Назначение:
        Разбить лист на таблицы по строкам заголовков.

    Алгоритм:
        - Пустые строки пропускаются.
        - Строка заголовков: содержит >= 2 известных заголовка маппинга,
          либо это первая непустая строка листа и в ней есть хотя бы один.
        - Остальные строки относятся к последней найденной таблице;
          строки до первой таблицы игнорируются.
    """
    sections: list[TableSection] = []
    current: TableSection | None = None
    seen_content = False
    for row in sheet.rows:
        if row.is_blank:
            continue
        first_row = not seen_content
        seen_content = True
        if is_header_row(row.cells, known_headers, first_row):
            current = TableSection(sheet_name=sheet.name, header_line=row.line_no, headers=row.cells)
            sections.append(current)
            continue
        if current is not None:
            current.rows.append(row)
    return sections
