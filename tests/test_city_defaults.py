from __future__ import annotations

import pytest

from rbf.core.city_defaults import (
    CITY_DEFAULTS,
    CityDefaults,
    apply_city_defaults,
    build_city_change_summary,
    city_options,
    city_patch_values,
)


def test_bundled_cities() -> None:
    assert len(CITY_DEFAULTS) == 13
    assert CITY_DEFAULTS["SAO_PAULO"].label == "São Paulo"


def test_options_sorted_accent_insensitive() -> None:
    labels = [label for _key, label in city_options()]
    assert labels[0] == "Belo Horizonte - MG"
    assert labels[1] == "Brasília - DF"
    assert labels.index("Fortaleza - CE") < labels.index("Goiânia - GO") < labels.index("Porto Alegre - RS")
    assert labels.index("Salvador - BA") < labels.index("São Paulo - SP") < labels.index("Sorocaba - SP")


def test_patch_values_derive_rent() -> None:
    patch = city_patch_values("RECIFE", 300_000.0)
    assert patch["monthly_rent"] == pytest.approx(2_094.0)
    assert patch["selected_city"] == "RECIFE"


def test_patch_unknown_city() -> None:
    assert city_patch_values("ATLANTIS", 300_000.0) is None
    assert city_patch_values(None, 300_000.0) is None


def test_apply_does_not_mutate_input() -> None:
    cfg = {"property_value": 500_000.0, "iptu_rate": 0.01}
    out, changes = apply_city_defaults(cfg, "BRASILIA")
    assert cfg == {"property_value": 500_000.0, "iptu_rate": 0.01}
    assert out["iptu_rate"] == pytest.approx(0.003)
    assert {c["key"] for c in changes} >= {"iptu_rate", "monthly_rent", "selected_city"}


def test_apply_unknown_clears_city() -> None:
    out, changes = apply_city_defaults({"selected_city": "SAO_PAULO", "iptu_rate": 0.01}, "ATLANTIS")
    assert out["selected_city"] is None
    assert out["iptu_rate"] == 0.01
    assert changes == []


def test_injected_lookup() -> None:
    lookup = {"TEST": CityDefaults("Testville", "TS", 0.001, 0.0, 0.01, 0.01, 0.0)}
    out, _ = apply_city_defaults({"property_value": 100_000.0}, "TEST", lookup=lookup)
    assert out["monthly_rent"] == pytest.approx(1_000.0)
    assert out["itbi_rate"] == pytest.approx(0.01)


def test_change_summary() -> None:
    changes = [{"key": "iptu_rate", "before": 0.006, "after": 0.004}]
    assert build_city_change_summary(changes) == ["IPTU rate: 0.60% → 0.40%"]


def test_change_summary_truncates() -> None:
    changes = [{"key": f"k{i}", "before": "a", "after": "b"} for i in range(10)]
    lines = build_city_change_summary(changes, max_items=8)
    assert len(lines) == 9
    assert lines[-1] == "+2 more"
