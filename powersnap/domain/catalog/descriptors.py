from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PropertyDescriptor:
    """
    Назначение:
        Описание одного объявленного свойства типа записи.

    Поля:
        name: имя свойства (регистр значим)
        category: группа для отображения (Identity, Electrical, ...)
        units: единицы измерения, если известны
        is_key: свойство входит в идентичность записи
        is_scenario: свойство несёт имя сценария (всегда также is_key)
        deprecated: свойство оставлено для совместимости и не сравнивается в diff
    """

    name: str
    category: str = "General"
    units: str | None = None
    is_key: bool = False
    is_scenario: bool = False
    deprecated: bool = False


@dataclass(frozen=True)
class RecordTypeDescriptor:
    """
    Назначение:
        Неизменяемое описание типа записи: свойства и компоненты составного ключа.

    Инварианты/гарантии:
        - Порядок key_components совпадает с порядком объявления свойств
          и задаёт порядок компонентов CompositeKey.
        - Признак "компонент ключа" определяется только маркерами дескриптора,
          никакое имя свойства не обрабатывается особым образом.
    """

    name: str
    properties: tuple[PropertyDescriptor, ...]
    display_name: str = ""
    source_class: str = ""
    category: str = "equipment"

    @property
    def property_names(self) -> tuple[str, ...]:
        return tuple(prop.name for prop in self.properties)

    @property
    def key_components(self) -> tuple[str, ...]:
        return tuple(prop.name for prop in self.properties if prop.is_key)

    @property
    def scenario_property(self) -> str | None:
        for prop in self.properties:
            if prop.is_scenario:
                return prop.name
        return None

    @property
    def scenario_index(self) -> int | None:
        """Позиция компонента сценария внутри CompositeKey (или None)."""
        scenario = self.scenario_property
        if scenario is None:
            return None
        return self.key_components.index(scenario)

    @property
    def has_scenarios(self) -> bool:
        return self.scenario_property is not None

    @property
    def comparable_properties(self) -> tuple[str, ...]:
        return tuple(prop.name for prop in self.properties if not prop.deprecated)

    @property
    def non_key_properties(self) -> tuple[str, ...]:
        return tuple(prop.name for prop in self.properties if not prop.is_key and not prop.deprecated)

    def get_property(self, name: str) -> PropertyDescriptor | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def has_property(self, name: str) -> bool:
        return self.get_property(name) is not None

    def key_description(self) -> str:
        return f"{self.name} key: ({', '.join(self.key_components)})"
