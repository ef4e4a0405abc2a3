from __future__ import annotations

from powersnap.datasets.registry import build_default_catalog
from powersnap.domain.mapping.models import MappingDocument
from powersnap.domain.mapping.resolver import MappingResolver
from powersnap.domain.mapping.suggest import MatchReason, normalize_header, score_pair, suggest_mappings


def test_normalize_header_strips_separators_and_case():
    assert normalize_header(" Base_kV - Nominal ") == "basekvnominal"


def test_score_pair_ranks_match_kinds():
    assert score_pair("basekv", "BaseKV") == (1.0, MatchReason.EXACT)
    assert score_pair("Base kV", "BaseKV") == (0.95, MatchReason.NORMALIZED)
    fuzzy = score_pair("Base kVs", "BaseKV")
    assert fuzzy is not None and fuzzy[1] is MatchReason.FUZZY
    assert score_pair("Manufacturer", "BaseKV") is None


def test_suggestions_are_ordered_and_one_to_one():
    suggestions = suggest_mappings(
        properties=["Id", "BaseKV", "NoOfPhases", "Manufacturer"],
        headers=["No_of-Phases", "Base kV", "id", "Manufactrer", "Comment"],
    )

    pairs = [(s.header, s.property_name, s.reason) for s in suggestions]
    assert pairs == [
        ("id", "Id", MatchReason.EXACT),
        ("No_of-Phases", "NoOfPhases", MatchReason.NORMALIZED),
        ("Base kV", "BaseKV", MatchReason.NORMALIZED),
        ("Manufactrer", "Manufacturer", MatchReason.FUZZY),
    ]


def test_fuzzy_floor_filters_weak_matches():
    assert suggest_mappings(["Manufacturer"], ["Manuf"], similarity_floor=0.7) == []
    assert suggest_mappings(["Manufacturer"], ["Manuf"], similarity_floor=0.4)[0].reason is MatchReason.FUZZY


def test_resolver_suggest_does_not_change_document():
    catalog = build_default_catalog()
    document = MappingDocument(software_version="10.4")
    resolver = MappingResolver(document, catalog)

    suggestions = resolver.suggest(catalog.require("Bus"), ["Base kV", "Area"])

    assert {s.property_name for s in suggestions} == {"BaseKV", "Area"}
    assert resolver.document.entries == ()
