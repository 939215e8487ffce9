from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from core.errors import InvalidRequest, RateOracleError
from domain.models import MissingYear
from domain.reference_data import ReferenceData
from integration.wits_adapter import WITSAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportedRatePoint:
    year: int
    rate_percent: float


@dataclass
class ReportedHistory:
    reporter: str
    product: str
    series: List[ReportedRatePoint] = field(default_factory=list)
    missing_years: List[MissingYear] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reporter": self.reporter,
            "product": self.product,
            "source": "WITS TRN (reported, partner=World)",
            "series": [{"year": p.year, "ratePercent": p.rate_percent} for p in self.series],
            "missingYears": [m.to_dict() for m in self.missing_years],
        }


def year_steps(start_year: int, end_year: int, interval: int = 1) -> List[int]:
    if interval < 1:
        raise InvalidRequest("interval must be >= 1")
    return list(range(start_year, end_year + 1, interval))


class TariffHistoryService:
    """
    Historia raportowanych stawek (WITS) dla kraju i produktu –
    rok po roku, braki zbierane obok serii.
    """

    def __init__(self, reference: ReferenceData, wits: Optional[WITSAdapter] = None) -> None:
        self._reference = reference
        self._wits = wits or WITSAdapter()

    def reported_history(self, reporter_iso3: str, product: str, years: Iterable[int]) -> ReportedHistory:
        numeric = self._reference.numeric_code(reporter_iso3)
        if not numeric:
            raise InvalidRequest(f"Unknown reporter country '{reporter_iso3}'")

        history = ReportedHistory(reporter=reporter_iso3.upper(), product=product)
        for year in years:
            try:
                rate = self._wits.get_reported_rate(numeric, product, year)
            except RateOracleError as e:
                logger.warning("WITS: no reported rate for %s/%s in %s: %s", reporter_iso3, product, year, e.reason)
                history.missing_years.append(MissingYear(year=year, reason=e.reason))
                continue
            history.series.append(ReportedRatePoint(year=year, rate_percent=rate))
        return history
