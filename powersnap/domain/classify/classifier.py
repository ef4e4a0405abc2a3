from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.mapping.models import MappingDocument
from powersnap.domain.mapping.resolver import MappingResolver

MIN_MATCH_THRESHOLD = 30.0


@dataclass(frozen=True)
class TypeScore:
    """
    Назначение:
        Оценка совпадения строки заголовков с одним типом записи.
    """

    record_type: str
    match_count: int
    total: int
    matched_headers: tuple[str, ...]

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return self.match_count / self.total * 100


@dataclass(frozen=True)
class ClassificationResult:
    """
    Назначение:
        Итог классификации: не более одного активированного типа.

    Поля:
        record_type: выбранный тип или None
        winner: оценка победителя (есть и при отказе из-за ключевых колонок)
        scores: все оценки, прошедшие порог, в порядке выбора
        reason: причина отказа, если тип не активирован
    """

    record_type: str | None
    winner: TypeScore | None
    scores: tuple[TypeScore, ...]
    reason: str | None = None

    @property
    def activated(self) -> bool:
        return self.record_type is not None


class ColumnSignatureClassifier:
    """
    Назначение/ответственность:
        Определить тип записи по неразмеченной строке заголовков.

    Алгоритм:
        1) Для каждого типа каталога с записями маппинга:
           match_count = число его заголовков в строке (точное сравнение с учётом регистра),
           percentage = match_count / total * 100.
        2) Отбросить кандидатов с percentage < threshold.
        3) Победитель: max match_count, затем max percentage,
           затем порядок объявления в каталоге.
        4) Если ни одна колонка компонентов ключа победителя не присутствует,
           классификация отклоняется целиком (без перехода ко второму кандидату).

    Инварианты/гарантии:
        - На одну строку заголовков активируется не более одного типа.
        - Результат детерминирован.
    """

    def __init__(self, catalog: RecordTypeCatalog, threshold: float = MIN_MATCH_THRESHOLD) -> None:
        self.catalog = catalog
        self.threshold = threshold

    def score(self, headers: Sequence[str], mapping: MappingResolver) -> list[TypeScore]:
        present = {header for header in headers if header}
        scores: list[TypeScore] = []
        for record_type in mapping.mapped_types():
            if record_type not in self.catalog:
                continue
            expected = mapping.mapped_headers(record_type)
            if not expected:
                continue
            matched = tuple(header for header in expected if header in present)
            scores.append(
                TypeScore(
                    record_type=record_type,
                    match_count=len(matched),
                    total=len(expected),
                    matched_headers=matched,
                )
            )
        return scores

    def classify(
        self,
        headers: Sequence[str],
        mapping: MappingResolver | MappingDocument,
    ) -> ClassificationResult:
        if isinstance(mapping, MappingDocument):
            mapping = MappingResolver(mapping, self.catalog)

        survivors = [
            score
            for score in self.score(headers, mapping)
            if score.match_count > 0 and score.percentage >= self.threshold
        ]
        survivors.sort(
            key=lambda s: (-s.match_count, -s.percentage, self.catalog.declaration_index(s.record_type))
        )
        if not survivors:
            return ClassificationResult(
                record_type=None,
                winner=None,
                scores=(),
                reason=f"no record type reached {self.threshold:g}% of its mapped headers",
            )

        winner = survivors[0]
        descriptor = self.catalog.require(winner.record_type)
        present = set(headers)
        key_headers = [mapping.column_for(winner.record_type, component) for component in descriptor.key_components]
        if not any(header is not None and header in present for header in key_headers):
            return ClassificationResult(
                record_type=None,
                winner=winner,
                scores=tuple(survivors),
                reason=(
                    f"best match {winner.record_type} ({winner.percentage:.1f}%) has none of its key columns "
                    f"({', '.join(descriptor.key_components)})"
                ),
            )

        return ClassificationResult(record_type=winner.record_type, winner=winner, scores=tuple(survivors))
