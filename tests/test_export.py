import csv
import io

from application.comparison import compare_results
from application.export import COMPARISON_HEADERS, comparison_to_csv, year_series_to_csv
from domain.models import ComparisonCandidate, RateClass, RateComponents, RateQuoteResult, YearSeriesPoint


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def test_comparison_csv_rows():
    result = RateQuoteResult(
        hs6="290110",
        importer_code="USA",
        exporter_code="CHN",
        transaction_date="2024-01-10",
        trade_original=1000,
        trade_final=1065,
        components=RateComponents(mfn_rate=6.5),
        freight_cost=120,
        freight_type="ocean",
        total_landed_cost=1185,
    )
    cheaper = RateQuoteResult(
        hs6="290110",
        importer_code="USA",
        exporter_code="MEX",
        transaction_date="2024-01-10",
        trade_original=1000,
        trade_final=1000,
        components=RateComponents(preferential_rate=0),
    )
    analysis = compare_results(
        [ComparisonCandidate("CHN", result), ComparisonCandidate("MEX", cheaper)],
        {"CHN": "China", "MEX": "Mexico, United Mexican States"},
    )

    rows = _rows(comparison_to_csv(analysis, "United States", "290110"))

    assert rows[0] == COMPARISON_HEADERS
    assert rows[1][:4] == ["1", "Mexico, United Mexican States", "MEX", "290110"]
    assert rows[1][7] == "0"  # preferential
    assert rows[1][-1] == "0.00"
    assert rows[2][6] == "6.5"
    assert rows[2][10] == "65"  # duty
    assert rows[2][11:13] == ["120", "ocean"]
    assert rows[2][15] == "1185"
    assert rows[2][16] == "18.50"


def test_comparison_csv_quotes_commas():
    text = comparison_to_csv(
        compare_results([ComparisonCandidate("KOR", RateQuoteResult("290110", "USA", "2024-01-01", 10, 10))], {"KOR": "Korea, Republic of"}),
        "United States",
        "290110",
    )
    assert '"Korea, Republic of"' in text


def test_empty_comparison_has_only_header():
    assert _rows(comparison_to_csv(compare_results([]), "X", "Y")) == [COMPARISON_HEADERS]


def test_year_series_csv():
    point = YearSeriesPoint(
        year=2021,
        rate_percent=0.0,
        classification=RateClass.SUSPENDED,
        label="Suspended (0%)",
        is_suspended=True,
        duty_amount=0.0,
        transaction_date="2021-03-15",
    )
    rows = _rows(year_series_to_csv([point]))
    assert rows[1] == ["2021", "2021-03-15", "0.0000", "Suspended (0%)", "yes", "0.00"]
