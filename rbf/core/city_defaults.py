"""City-specific starting values for a scenario cfg.

The table only pre-fills inputs before a run; the engine never reads it.
Callers pass the lookup explicitly (``lookup=``) so tests and integrations
can supply their own dataset. ``CITY_DEFAULTS`` is the bundled default.

Sources: FipeZAP Dec/2025 (rental yields, appreciation, rent adjustment),
municipal legislation verified Feb/2026 (IPTU effective rates, ITBI rates).
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple


@dataclass(frozen=True)
class CityDefaults:
    label: str
    state: str
    #: Effective IPTU rate, fraction of market value per year
    iptu_rate: float
    #: Real appreciation per year, above inflation
    property_appreciation_rate: float
    itbi_rate: float
    #: Monthly rent as a fraction of property value
    rent_to_price: float
    #: Annual rent adjustment for existing contracts
    rent_adjustment_rate: float


CITY_DEFAULTS: Mapping[str, CityDefaults] = MappingProxyType(
    {
        "SAO_PAULO": CityDefaults("São Paulo", "SP", 0.006, 0.02, 0.03, 0.00523, 0.055),
        "RIO_DE_JANEIRO": CityDefaults("Rio de Janeiro", "RJ", 0.005, 0.015, 0.03, 0.00493, 0.05),
        "BELO_HORIZONTE": CityDefaults("Belo Horizonte", "MG", 0.007, 0.03, 0.03, 0.00426, 0.055),
        "CURITIBA": CityDefaults("Curitiba", "PR", 0.004, 0.035, 0.027, 0.00379, 0.055),
        "PORTO_ALEGRE": CityDefaults("Porto Alegre", "RS", 0.004, 0.02, 0.03, 0.00581, 0.05),
        "BRASILIA": CityDefaults("Brasília", "DF", 0.003, 0.015, 0.02, 0.00529, 0.045),
        "SALVADOR": CityDefaults("Salvador", "BA", 0.005, 0.035, 0.03, 0.00593, 0.06),
        "RECIFE": CityDefaults("Recife", "PE", 0.006, 0.02, 0.03, 0.00698, 0.055),
        "FORTALEZA": CityDefaults("Fortaleza", "CE", 0.005, 0.03, 0.04, 0.00386, 0.055),
        "GOIANIA": CityDefaults("Goiânia", "GO", 0.005, 0.02, 0.02, 0.00498, 0.045),
        "FLORIANOPOLIS": CityDefaults("Florianópolis", "SC", 0.004, 0.03, 0.02, 0.00467, 0.055),
        "CAMPINAS": CityDefaults("Campinas", "SP", 0.005, 0.025, 0.027, 0.0057, 0.05),
        "SOROCABA": CityDefaults("Sorocaba", "SP", 0.006, 0.02, 0.025, 0.00458, 0.045),
    }
)


def _sort_key(label: str) -> str:
    # Accent-insensitive ordering (e.g. "Goiânia" sorts with "Goiania").
    decomposed = unicodedata.normalize("NFKD", label)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def city_options(lookup: Mapping[str, CityDefaults] = CITY_DEFAULTS) -> List[Tuple[str, str]]:
    """(key, "Label - ST") pairs sorted by display label."""
    opts = [(key, f"{city.label} - {city.state}") for key, city in lookup.items()]
    return sorted(opts, key=lambda kv: _sort_key(kv[1]))


def city_patch_values(
    key: str | None,
    property_value: float,
    lookup: Mapping[str, CityDefaults] = CITY_DEFAULTS,
) -> Dict[str, Any] | None:
    """cfg fields a city pre-fills, or None for an unknown/empty key."""
    if not key:
        return None
    city = lookup.get(str(key))
    if city is None:
        return None
    return {
        "iptu_rate": city.iptu_rate,
        "property_appreciation_rate": city.property_appreciation_rate,
        "itbi_rate": city.itbi_rate,
        "rent_adjustment_rate": city.rent_adjustment_rate,
        "monthly_rent": round(float(property_value) * city.rent_to_price, 2),
        "selected_city": str(key),
    }


def _values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return bool(a) is bool(b)
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return abs(float(a) - float(b)) <= 1e-12
    return a == b


def apply_city_defaults(
    cfg: Mapping[str, Any],
    key: str | None,
    *,
    lookup: Mapping[str, CityDefaults] = CITY_DEFAULTS,
) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Return a copy of ``cfg`` with the city's values applied, plus the changed fields.

    Changes are rows of ``{key, before, after}``. Unknown keys leave the cfg
    untouched apart from clearing ``selected_city``.
    """
    out = dict(cfg)
    patch = city_patch_values(key, float(out.get("property_value", 0.0) or 0.0), lookup)
    if not patch:
        out["selected_city"] = None
        return out, []

    changes: List[Dict[str, Any]] = []
    for k, v_new in patch.items():
        v_old = out.get(k)
        if not _values_equal(v_old, v_new):
            changes.append({"key": k, "before": v_old, "after": v_new})
        out[k] = v_new
    return out, changes


def build_city_change_summary(changes: List[Dict[str, Any]], *, max_items: int = 8) -> List[str]:
    """Human-readable lines for applied city changes."""
    if not changes:
        return []
    labels = {
        "iptu_rate": "IPTU rate",
        "property_appreciation_rate": "Real appreciation",
        "itbi_rate": "ITBI rate",
        "rent_adjustment_rate": "Rent adjustment",
        "monthly_rent": "Monthly rent",
        "selected_city": "City",
    }

    def _fmt(v: Any) -> str:
        if v is None:
            return "—"
        if isinstance(v, bool):
            return "ON" if v else "OFF"
        if isinstance(v, (int, float)):
            x = float(v)
            if abs(x) < 1.0:
                return f"{x * 100:.2f}%"
            return f"{x:,.0f}"
        return str(v)

    out: List[str] = []
    for row in changes[: max(1, int(max_items))]:
        k = str(row.get("key", ""))
        out.append(f"{labels.get(k, k)}: {_fmt(row.get('before'))} → {_fmt(row.get('after'))}")
    if len(changes) > max_items:
        out.append(f"+{len(changes) - int(max_items)} more")
    return out
