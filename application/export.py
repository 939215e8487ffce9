from __future__ import annotations
import csv
import io
from typing import Iterable, Optional

from domain.models import ComparisonAnalysis, YearSeriesPoint

COMPARISON_HEADERS = [
    "Rank",
    "Source Country",
    "Country Code",
    "Product Code",
    "Destination",
    "Product Value (USD)",
    "MFN Rate (%)",
    "Preferential Rate (%)",
    "Suspension Rate (%)",
    "Specific Duty (per kg)",
    "Duty Amount (USD)",
    "Freight Cost (USD)",
    "Freight Type",
    "Insurance Cost (USD)",
    "Insurance Rate (%)",
    "Total Landed Cost (USD)",
    "Percent Difference (%)",
]

YEAR_SERIES_HEADERS = ["Year", "Transaction Date", "Rate (%)", "Rate Type", "Suspended", "Duty Amount (USD)"]


def _opt(value: Optional[float]) -> str:
    return "" if value is None else f"{value:g}"


def comparison_to_csv(analysis: ComparisonAnalysis, destination: str, product_code: str) -> str:
    """Tabela rankingu jako CSV (nagłówek + jeden wiersz na kraj)."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(COMPARISON_HEADERS)
    for row in analysis.ranked_results:
        r = row.result
        c = r.components
        writer.writerow([
            row.rank,
            row.country_name,
            row.country_code,
            product_code,
            destination,
            f"{r.trade_original:g}",
            _opt(c.mfn_rate),
            _opt(c.preferential_rate),
            _opt(c.suspension_rate),
            _opt(c.specific_rate_per_kg),
            f"{r.duty_amount:g}",
            f"{r.freight_cost or 0:g}",
            r.freight_type or "",
            f"{r.insurance_cost or 0:g}",
            f"{r.insurance_rate or 0:g}",
            f"{r.total_cost:g}",
            f"{row.percent_diff_from_best:.2f}",
        ])
    return buf.getvalue()


def year_series_to_csv(series: Iterable[YearSeriesPoint]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(YEAR_SERIES_HEADERS)
    for p in series:
        writer.writerow([
            p.year,
            p.transaction_date,
            f"{p.rate_percent:.4f}",
            p.label,
            "yes" if p.is_suspended else "no",
            f"{p.duty_amount:.2f}",
        ])
    return buf.getvalue()
