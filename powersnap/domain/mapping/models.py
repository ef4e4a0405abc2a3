from __future__ import annotations

from dataclasses import dataclass

from powersnap.domain.models import Severity


@dataclass(frozen=True)
class MappingEntry:
    """
    Назначение:
        Одна декларация "заголовок колонки -> свойство типа".

    Поля:
        target_type/property_name: куда попадает значение
        column_header: ожидаемый заголовок колонки
        required: колонка обязательна
        severity: уровень диагностики при отсутствии колонки
        aliases: альтернативные заголовки (дрейф между версиями ПО)
        default_value: значение, если колонка отсутствует
    """

    target_type: str
    property_name: str
    column_header: str
    required: bool = False
    severity: Severity = Severity.INFO
    aliases: tuple[str, ...] = ()
    default_value: str | None = None

    def headers(self) -> tuple[str, ...]:
        """Основной заголовок и алиасы без пустых значений и повторов."""
        result: list[str] = []
        for header in (self.column_header, *self.aliases):
            if header and header not in result:
                result.append(header)
        return tuple(result)


@dataclass(frozen=True)
class MappingDocument:
    """
    Назначение:
        Пользовательский документ маппинга. Движок его не изменяет.
    """

    software_version: str = ""
    map_version: str = ""
    entries: tuple[MappingEntry, ...] = ()
    source_path: str | None = None
