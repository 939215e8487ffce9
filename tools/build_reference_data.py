# tools/build_reference_data.py
"""
Buduje wspólną tabelę referencyjną (kraje + produkty HS6) dla aplikacji.

Wejście:
    - plik z produktami (.csv albo .xlsx) z kolumnami HS6 i opisu
      (np. "ProductCode" / "ProductDescription" z eksportu WITS)
    - kraje: pycountry (ISO3, nazwa, kod numeryczny)

Wyjście:
    - data/reference_data.json
      Struktura:
      {
        "countries": [{"country_code": "USA", "name": "United States", "numeric_code": "840"}, ...],
        "products":  [{"hs6code": "290110", "description": "Saturated acyclic hydrocarbons"}, ...]
      }

Użycie:
    python -m tools.build_reference_data products.xlsx [data/reference_data.json]
"""

from __future__ import annotations

import json
import logging
import re
import sys
from pathlib import Path
from typing import Dict, List

import pandas as pd
import pycountry

logger = logging.getLogger(__name__)

OUTPUT_JSON = Path("data/reference_data.json")

CODE_COLUMNS = ("ProductCode", "hs6code", "HS6", "Code")
DESCRIPTION_COLUMNS = ("ProductDescription", "description", "Description", "Product Description")

# nazwy WITS, których pycountry nie zna 1:1
NAME_OVERRIDES = {
    "USA": "United States",
    "GBR": "United Kingdom",
    "KOR": "Korea, Republic of",
    "VNM": "Vietnam",
    "TWN": "Taiwan, China",
}


def _pick_column(df: pd.DataFrame, candidates) -> str:
    for c in candidates:
        if c in df.columns:
            return c
    raise ValueError(f"Brakuje kolumny z {candidates}. Kolumny dostępne: {list(df.columns)}")


def normalize_hs6(raw) -> str | None:
    """'2901.10' / 290110 / ' 290110 ' -> '290110'; None, jeśli to nie HS6."""
    if raw is None or pd.isna(raw):
        return None
    text = str(raw).strip()
    if re.fullmatch(r"\d+\.0", text):
        # float z Excela
        text = text[:-2]
    digits = re.sub(r"\D", "", text)
    if not digits:
        return None
    # Excel gubi zera wiodące (010121 -> 10121)
    if len(digits) == 5:
        digits = "0" + digits
    return digits if len(digits) == 6 else None


def products_from_frame(df: pd.DataFrame) -> List[Dict[str, str]]:
    code_col = _pick_column(df, CODE_COLUMNS)
    desc_col = _pick_column(df, DESCRIPTION_COLUMNS)

    products: Dict[str, str] = {}
    for _, row in df.iterrows():
        code = normalize_hs6(row[code_col])
        if code is None:
            continue
        desc = row[desc_col]
        if pd.isna(desc) or not str(desc).strip():
            continue
        # pierwszy opis wygrywa
        products.setdefault(code, str(desc).strip())

    return [{"hs6code": code, "description": desc} for code, desc in sorted(products.items())]


def countries_from_pycountry() -> List[Dict[str, str]]:
    out = []
    for c in pycountry.countries:
        iso3 = c.alpha_3.upper()
        out.append({
            "country_code": iso3,
            "name": NAME_OVERRIDES.get(iso3, c.name),
            "numeric_code": c.numeric,
        })
    return sorted(out, key=lambda r: r["country_code"])


def read_products(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Plik wejściowy {path} nie istnieje – popraw ścieżkę.")
    if path.suffix.lower() in {".xlsx", ".xls"}:
        return pd.read_excel(path, dtype=str)
    return pd.read_csv(path, dtype=str)


def build_reference_data(products_path: Path, output: Path = OUTPUT_JSON) -> Dict[str, List[Dict[str, str]]]:
    logger.info("Wczytuję produkty: %s", products_path)
    df = read_products(products_path)

    data = {
        "countries": countries_from_pycountry(),
        "products": products_from_frame(df),
    }
    logger.info("Krajów: %d, produktów HS6: %d", len(data["countries"]), len(data["products"]))

    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info("Tabela zapisana do: %s", output.resolve())
    return data


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    if len(sys.argv) < 2:
        sys.exit("usage: python -m tools.build_reference_data <products.csv|xlsx> [output.json]")
    out = Path(sys.argv[2]) if len(sys.argv) > 2 else OUTPUT_JSON
    build_reference_data(Path(sys.argv[1]), out)
