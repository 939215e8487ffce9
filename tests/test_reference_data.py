import json

import pandas as pd
import pytest

from domain.reference_data import ReferenceData
from tools.build_reference_data import build_reference_data, normalize_hs6, products_from_frame


def test_country_lookups(reference):
    assert reference.country_name("chn") == "China"
    assert reference.country_name("XXX") == "XXX"
    assert reference.numeric_code("USA") == "840"
    assert reference.country_name_map(["MEX", "deu"]) == {"MEX": "Mexico", "DEU": "Germany"}


def test_tables_are_read_only(reference):
    with pytest.raises(TypeError):
        reference.countries["FRA"] = None


def test_pycountry_fallback_when_file_missing(tmp_path):
    ref = ReferenceData.load(tmp_path / "missing.json")

    assert ref.numeric_code("DEU") == "276"
    assert ref.products == {}


def test_load_from_json(tmp_path):
    path = tmp_path / "ref.json"
    path.write_text(json.dumps({
        "countries": [{"country_code": "usa", "name": "United States", "numeric_code": "840"}],
        "products": [{"hs6code": "290110", "description": "Saturated acyclic hydrocarbons"}, {"hs6code": ""}],
    }), encoding="utf-8")

    ref = ReferenceData.load(path)

    assert list(ref.countries) == ["USA"]
    assert [p.hs6code for p in ref.sorted_products()] == ["290110"]


@pytest.mark.parametrize(
    "raw, expected",
    [("290110", "290110"), ("2901.10", "290110"), ("10121", "010121"), ("10121.0", "010121"), ("29", None), ("2901101", None), (None, None), ("", None)],
)
def test_normalize_hs6(raw, expected):
    assert normalize_hs6(raw) == expected


def test_products_from_frame_dedupes_and_skips_blank():
    df = pd.DataFrame({
        "ProductCode": ["290110", "290110", "290121", "abc"],
        "ProductDescription": ["Saturated", "Duplicate", None, "x"],
    })

    assert products_from_frame(df) == [{"hs6code": "290110", "description": "Saturated"}]


def test_build_reference_data_writes_json(tmp_path):
    src = tmp_path / "products.csv"
    src.write_text("hs6code,description\n290511,Methanol\n", encoding="utf-8")
    out = tmp_path / "out" / "reference_data.json"

    build_reference_data(src, out)

    ref = ReferenceData.load(out)
    assert ref.products["290511"].description == "Methanol"
    assert ref.country_name("USA") == "United States"
