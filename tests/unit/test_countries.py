from __future__ import annotations

from pathlib import Path

import pytest

from src.transforms.countries import (
    Country,
    countries_by_code,
    find_country,
    find_country_by_name,
    load_countries,
    resolve_region,
)


def test_reference_table_is_loaded() -> None:
    countries = load_countries()
    assert len(countries) >= 240
    assert len({c.id for c in countries}) == len(countries)
    assert all(len(c.id) == 2 and c.id.isupper() for c in countries)


def test_find_country_is_case_insensitive() -> None:
    assert find_country("id") == countries_by_code()["ID"]
    assert find_country(" US ").name == "United States"
    assert find_country("ZZ") is None
    assert find_country(None) is None


def test_norway_code_is_not_read_as_boolean() -> None:
    assert find_country("NO").name == "Norway"


def test_flag_is_derived_from_code() -> None:
    assert Country("US", "United States", "North America", "+1", "USD").flag == "\U0001F1FA\U0001F1F8"


def test_resolve_region_accepts_name_or_code() -> None:
    assert resolve_region("Indonesia").id == "ID"
    assert resolve_region("indonesia").id == "ID"
    assert resolve_region("gb").name == "United Kingdom"
    assert find_country_by_name("Atlantis") is None
    assert resolve_region("Atlantis") is None


def test_load_countries_rejects_bad_rows(tmp_path: Path) -> None:
    bad = tmp_path / "countries.yaml"
    bad.write_text('countries:\n  - ["IDN", "Indonesia", "Asia", "+62", "IDR"]\n', encoding="utf-8")
    with pytest.raises(ValueError):
        load_countries(str(bad))

    short = tmp_path / "short.yaml"
    short.write_text('countries:\n  - ["ID", "Indonesia"]\n', encoding="utf-8")
    with pytest.raises(ValueError):
        load_countries(str(short))
