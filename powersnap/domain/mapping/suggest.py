from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from rapidfuzz.distance import Levenshtein

FUZZY_SIMILARITY_FLOOR = 0.70

_NORMALIZE_RE = re.compile(r"[\s_\-]+")


class MatchReason(str, Enum):
    """
    Назначение:
        Почему заголовок предложен для свойства (в порядке убывания доверия).
    """

    EXACT = "exact"
    NORMALIZED = "normalized"
    FUZZY = "fuzzy"


_REASON_RANK = {MatchReason.EXACT: 0, MatchReason.NORMALIZED: 1, MatchReason.FUZZY: 2}


@dataclass(frozen=True)
class MappingSuggestion:
    header: str
    property_name: str
    score: float
    reason: MatchReason


def normalize_header(value: str) -> str:
    """Убирает пробелы, '_' и '-' и приводит к нижнему регистру."""
    return _NORMALIZE_RE.sub("", value or "").lower()


def score_pair(header: str, property_name: str, similarity_floor: float = FUZZY_SIMILARITY_FLOOR) -> tuple[float, MatchReason] | None:
    """
    Назначение:
        Оценить пару header/property.

    Выходные данные:
        (score, reason) или None, если сходство ниже порога.

    Алгоритм:
        1) совпадение без учёта регистра -> 1.0
        2) совпадение после нормализации -> 0.95
        3) нормализованное сходство Левенштейна >= similarity_floor
    """
    if not header or not property_name:
        return None
    if header.casefold() == property_name.casefold():
        return 1.0, MatchReason.EXACT
    left = normalize_header(header)
    right = normalize_header(property_name)
    if not left or not right:
        return None
    if left == right:
        return 0.95, MatchReason.NORMALIZED
    similarity = Levenshtein.normalized_similarity(left, right)
    if similarity >= similarity_floor:
        return round(similarity, 4), MatchReason.FUZZY
    return None


def suggest_mappings(
    properties: Sequence[str],
    headers: Sequence[str],
    similarity_floor: float = FUZZY_SIMILARITY_FLOOR,
) -> list[MappingSuggestion]:
    """
    Назначение:
        Предложить пары header -> property для автосопоставления.

    Контракт:
        - Каждый заголовок и каждое свойство участвуют не более чем в одной паре.
        - Результат упорядочен: exact, normalized, fuzzy; внутри по убыванию score,
          далее по позиции заголовка.
        - Ничего не сохраняет: решение принимает вызывающая сторона.
    """
    candidates: list[tuple[int, float, int, int, MappingSuggestion]] = []
    for header_index, header in enumerate(headers):
        for property_index, property_name in enumerate(properties):
            scored = score_pair(header, property_name, similarity_floor)
            if scored is None:
                continue
            score, reason = scored
            candidates.append(
                (
                    _REASON_RANK[reason],
                    -score,
                    header_index,
                    property_index,
                    MappingSuggestion(header=header, property_name=property_name, score=score, reason=reason),
                )
            )
    candidates.sort(key=lambda item: item[:4])

    used_headers: set[int] = set()
    used_properties: set[int] = set()
    result: list[MappingSuggestion] = []
    for _, _, header_index, property_index, suggestion in candidates:
        if header_index in used_headers or property_index in used_properties:
            continue
        used_headers.add(header_index)
        used_properties.add(property_index)
        result.append(suggestion)
    return result
