from __future__ import annotations
import itertools
import logging
import threading
from typing import Dict, Iterable, List, Optional

from application.rate_resolver import resolve_result
from application.suspension_windows import build_year_date_map
from core.errors import CalculationSuperseded, RateOracleError
from domain.models import (
    MissingYear,
    RateQuoteRequest,
    SuspensionInterval,
    YearSeries,
    YearSeriesPoint,
)
from integration.rate_oracle import RateOracleClient
from integration.suspension_directory import SuspensionDirectoryClient

logger = logging.getLogger(__name__)

TIME_RANGE_YEARS = {"5y": 5, "3y": 3, "1y": 1}


class CalculationGenerations:
    """
    Licznik „pokoleń” obliczeń per klient. Nowe obliczenie dostaje wyższy
    token; starsze, wciąż trwające pętle zauważają to i kończą się.

    Tokeny są globalnie rosnące, więc wpis klienta można usunąć po
    zakończonym obliczeniu (release) bez ryzyka powtórzenia tokenu.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self._current: Dict[str, int] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._current)

    def issue(self, client_key: str) -> int:
        with self._lock:
            token = next(self._counter)
            self._current[client_key] = token
            return token

    def release(self, client_key: str, token: int) -> None:
        with self._lock:
            if self._current.get(client_key) == token:
                del self._current[client_key]

    def is_current(self, client_key: str, token: int) -> bool:
        with self._lock:
            return self._current.get(client_key) == token


class YearSeriesCalculator:
    """
    Seria stawek rok po roku dla jednej trasy (importer, eksporter, HS6).

    Jedno zapytanie do Rate Oracle na rok, ściśle po kolei. Błąd jednego
    roku trafia do missing_years i nie przerywa reszty.
    """

    def __init__(
        self,
        oracle: RateOracleClient,
        suspensions: Optional[SuspensionDirectoryClient] = None,
        generations: Optional[CalculationGenerations] = None,
    ) -> None:
        self._oracle = oracle
        self._suspensions = suspensions
        self._generations = generations

    def compute_year_series(
        self,
        base_request: RateQuoteRequest,
        intervals: Iterable[SuspensionInterval],
        start_year: int,
        end_year: int,
        client_key: Optional[str] = None,
        token: Optional[int] = None,
    ) -> YearSeries:
        year_dates = build_year_date_map(intervals, start_year, end_year)
        result = YearSeries()

        for year in range(start_year, end_year + 1):
            self._check_generation(client_key, token)

            transaction_date = year_dates[year]
            try:
                quote = self._oracle.quote(base_request.with_date(transaction_date))
            except RateOracleError as e:
                logger.warning("No rate for %s/%s in %s: %s", base_request.importer_code, base_request.hs6, year, e.reason)
                result.missing_years.append(MissingYear(year=year, reason=e.reason))
                continue

            effective = resolve_result(quote)
            result.series.append(
                YearSeriesPoint(
                    year=year,
                    rate_percent=effective.rate_percent,
                    classification=effective.classification,
                    label=effective.label,
                    is_suspended=effective.is_suspended,
                    duty_amount=quote.duty_amount,
                    transaction_date=transaction_date,
                )
            )
            result.last_result = quote

        # wynik mógł się zdezaktualizować podczas ostatniego zapytania
        self._check_generation(client_key, token)
        return result

    def compute_for_route(
        self,
        base_request: RateQuoteRequest,
        start_year: int,
        end_year: int,
        client_key: Optional[str] = None,
        token: Optional[int] = None,
    ) -> YearSeries:
        """Jak compute_year_series, ale zawieszenia pobiera z katalogu.

        SuspensionDirectoryUnavailable leci do wywołującego – bez listy
        zawieszeń nie wyznaczymy dat zapytań.
        """
        if self._suspensions is None:
            raise RuntimeError("YearSeriesCalculator has no suspension directory configured")
        intervals = self._suspensions.list_intervals(
            importer_code=base_request.importer_code,
            hs6=base_request.hs6,
            start_year=start_year,
            end_year=end_year,
        )
        return self.compute_year_series(base_request, intervals, start_year, end_year, client_key, token)

    def _check_generation(self, client_key: Optional[str], token: Optional[int]) -> None:
        if self._generations is None or client_key is None or token is None:
            return
        if not self._generations.is_current(client_key, token):
            logger.info("Discarding superseded calculation %s for %s", token, client_key)
            raise CalculationSuperseded(client_key, token)


def filter_series_by_time_range(series: List[YearSeriesPoint], time_range: str) -> List[YearSeriesPoint]:
    """Ostatnie N lat względem najnowszego punktu; "all" lub nieznany klucz – bez zmian."""
    if time_range == "all" or not series:
        return list(series)
    year_count = TIME_RANGE_YEARS.get(time_range)
    if not year_count:
        return list(series)
    cutoff = series[-1].year - year_count + 1
    return [p for p in series if p.year >= cutoff]
