from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

import pycountry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Country:
    country_code: str  # ISO3
    name: str
    numeric_code: str

    def to_dict(self) -> Dict[str, str]:
        return {"country_code": self.country_code, "name": self.name, "numeric_code": self.numeric_code}


@dataclass(frozen=True)
class Product:
    hs6code: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"hs6code": self.hs6code, "description": self.description}


class ReferenceData:
    """
    Jedna, niezmienna tabela krajów i produktów – ładowana raz
    i przekazywana dalej przez referencję.
    """

    def __init__(self, countries: Iterable[Country], products: Iterable[Product] = ()) -> None:
        self._countries: Mapping[str, Country] = MappingProxyType({c.country_code: c for c in countries})
        self._products: Mapping[str, Product] = MappingProxyType({p.hs6code: p for p in products})

    @property
    def countries(self) -> Mapping[str, Country]:
        return self._countries

    @property
    def products(self) -> Mapping[str, Product]:
        return self._products

    def country(self, code: str) -> Optional[Country]:
        return self._countries.get((code or "").upper())

    def country_name(self, code: str) -> str:
        c = self.country(code)
        return c.name if c else code

    def country_name_map(self, codes: Iterable[str]) -> Dict[str, str]:
        return {code.upper(): self.country_name(code) for code in codes if code}

    def numeric_code(self, code: str) -> Optional[str]:
        c = self.country(code)
        return c.numeric_code if c else None

    def sorted_countries(self) -> List[Country]:
        return sorted(self._countries.values(), key=lambda c: c.name)

    def sorted_products(self) -> List[Product]:
        return sorted(self._products.values(), key=lambda p: p.hs6code)

    # ----------------- loading -----------------

    @classmethod
    def from_pycountry(cls) -> "ReferenceData":
        countries = [
            Country(country_code=c.alpha_3.upper(), name=c.name, numeric_code=c.numeric)
            for c in pycountry.countries
        ]
        return cls(countries)

    @classmethod
    def from_json(cls, path: Path) -> "ReferenceData":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        countries = [
            Country(
                country_code=str(row["country_code"]).upper(),
                name=str(row.get("name") or row["country_code"]),
                numeric_code=str(row.get("numeric_code") or ""),
            )
            for row in data.get("countries", [])
        ]
        products = [
            Product(hs6code=str(row["hs6code"]), description=str(row.get("description") or ""))
            for row in data.get("products", [])
            if row.get("hs6code")
        ]
        if not countries:
            # plik może zawierać same produkty
            countries = list(cls.from_pycountry().countries.values())
        return cls(countries, products)

    @classmethod
    def load(cls, path: str | Path) -> "ReferenceData":
        p = Path(path)
        if p.exists():
            ref = cls.from_json(p)
            logger.info("Reference data loaded from %s (%d countries, %d products)", p, len(ref.countries), len(ref.products))
            return ref
        logger.warning("Reference data file %s missing, using pycountry countries only", p)
        return cls.from_pycountry()
