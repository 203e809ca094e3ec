from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import yaml
from pydantic import BaseModel, Field


COUNTRIES_FILE = Path(__file__).resolve().parent / "data" / "countries.yaml"


@dataclass(frozen=True)
class Country:
    id: str
    name: str
    continent: str
    phone_code: str
    currency_id: str

    @property
    def flag(self) -> str:
        # Regional indicator symbols: "ID" -> 🇮🇩
        return "".join(chr(0x1F1E6 + ord(ch) - ord("A")) for ch in self.id.upper() if "A" <= ch <= "Z")


class CountryIn(BaseModel):
    id: str = Field(min_length=2, max_length=2)
    name: str
    continent: str = ""
    phoneCode: str = ""
    currencyId: str = ""


COLUMNS = ("id", "name", "continent", "phoneCode", "currencyId")


def _parse_row(row: list[str]) -> Country:
    if len(row) != len(COLUMNS):
        raise ValueError(f"Country row must have {len(COLUMNS)} columns, got {row!r}")
    c = CountryIn.model_validate({k: (v or "") for k, v in zip(COLUMNS, row)})
    return Country(
        id=c.id.upper(),
        name=c.name,
        continent=c.continent,
        phone_code=c.phoneCode,
        currency_id=c.currencyId,
    )


@lru_cache(maxsize=1)
def load_countries(path: str | None = None) -> tuple[Country, ...]:
    cfg_path = Path(path) if path else COUNTRIES_FILE
    raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    return tuple(_parse_row(row) for row in raw.get("countries") or [])


@lru_cache(maxsize=1)
def countries_by_code() -> Mapping[str, Country]:
    return MappingProxyType({c.id: c for c in load_countries()})


@lru_cache(maxsize=1)
def _countries_by_name() -> Mapping[str, Country]:
    return MappingProxyType({c.name.lower(): c for c in load_countries()})


def find_country(code: str | None) -> Country | None:
    if not code:
        return None
    return countries_by_code().get(code.strip().upper())


def find_country_by_name(name: str | None) -> Country | None:
    if not name:
        return None
    return _countries_by_name().get(name.strip().lower())


def resolve_region(value: str | None) -> Country | None:
    """Trending accepts either a country name ("Indonesia") or its code ("id")."""
    return find_country_by_name(value) or find_country(value)
