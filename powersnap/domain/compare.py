from __future__ import annotations

import math
import re

DEFAULT_TOLERANCE = 1e-6

# Longest first so that "kA" is stripped whole rather than as "A".
UNIT_SUFFIXES: tuple[str, ...] = tuple(
    sorted(
        (
            "cal/cm^2",
            "cal/cm2",
            "cal/cm²",
            "cal·cm⁻²",
            "cal·cm-2",
            "MVAR",
            "kVAR",
            "MVA",
            "kVA",
            "kV",
            "kA",
            "kW",
            "MW",
            "HP",
            "Hz",
            "pu",
            "mm",
            "in",
            "ft",
            "mi",
            "%",
            "A",
            "V",
            "s",
        ),
        key=len,
        reverse=True,
    )
)

_NUMBER_RE = re.compile(r"^[+-]?(?:(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def strip_units(value: str) -> str:
    """
    Назначение:
        Убрать один известный суффикс единиц измерения в конце строки
        (без учёта регистра) и окружающие пробелы.

    Контракт:
        Суффикс снимается только после числа: "Main" остаётся "Main".
    """
    text = value.strip()
    lowered = text.lower()
    for suffix in UNIT_SUFFIXES:
        if not lowered.endswith(suffix.lower()) or len(text) <= len(suffix):
            continue
        rest = text[: -len(suffix)].rstrip()
        if rest[-1:].isdigit() or rest.endswith("."):
            return rest
    return text


def parse_number(value: str | None) -> float | None:
    """
    Назначение:
        Разобрать значение как число после снятия единиц.

    Контракт:
        - Допускаются разделители тысяч ("1,200.5").
        - Возвращает None, если строка не является конечным числом.
    """
    if value is None:
        return None
    text = strip_units(value)
    if not text or not any(ch.isdigit() for ch in text):
        return None
    if not _NUMBER_RE.match(text):
        return None
    number = float(text.replace(",", ""))
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def values_equal(old: str | None, new: str | None, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """
    Назначение:
        Сравнение значений свойства.

    Алгоритм:
        1) Совпадение строк -> равны.
        2) Оба пустые (или только пробелы) -> равны.
        3) Оба разбираются как числа -> |a-b| <= tolerance * max(1, |a|, |b|).
        4) Иначе не равны (строки различаются с учётом регистра).
    """
    left = old or ""
    right = new or ""
    if left == right:
        return True
    if not left.strip() and not right.strip():
        return True
    a = parse_number(left)
    b = parse_number(right)
    if a is not None and b is not None:
        return abs(a - b) <= tolerance * max(1.0, abs(a), abs(b))
    return False
