from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Sequence

from core.errors import ComparisonFailed, RateOracleError
from domain.models import (
    ChartEntry,
    ComparisonAnalysis,
    ComparisonCandidate,
    RankedComparisonResult,
    RateQuoteRequest,
)
from integration.rate_oracle import RateOracleClient

logger = logging.getLogger(__name__)

BEST_COLOR = "#10b981"
WORST_COLOR = "#ef4444"
DEFAULT_COLOR = "#3b82f6"


def _color_for_rank(rank: int, total: int) -> str:
    if rank == 1:
        return BEST_COLOR
    if rank == total:
        return WORST_COLOR
    return DEFAULT_COLOR


def compare_results(
    candidates: Sequence[ComparisonCandidate],
    country_name_map: Optional[Mapping[str, str]] = None,
) -> ComparisonAnalysis:
    """
    Ranking krajów źródłowych po całkowitym koszcie (rosnąco).

    Sortowanie stabilne – przy równym koszcie zostaje kolejność wejściowa.
    Różnica procentowa liczona względem najtańszego; przy najtańszym
    koszcie równym 0 wszystkie różnice to 0.
    """
    names = country_name_map or {}
    if not candidates:
        return ComparisonAnalysis()

    ordered = sorted(candidates, key=lambda c: c.result.total_cost)
    cheapest = ordered[0].result.total_cost
    total = len(ordered)

    ranked: List[RankedComparisonResult] = []
    chart: List[ChartEntry] = []
    for position, candidate in enumerate(ordered, start=1):
        cost = candidate.result.total_cost
        diff = 0.0 if cheapest == 0 else (cost - cheapest) / cheapest * 100
        name = names.get(candidate.country_code) or candidate.country_name or candidate.country_code
        ranked.append(
            RankedComparisonResult(
                rank=position,
                country_code=candidate.country_code,
                country_name=name,
                result=candidate.result,
                percent_diff_from_best=diff,
            )
        )
        chart.append(ChartEntry(country_name=name, cost=cost, color=_color_for_rank(position, total)))

    return ComparisonAnalysis(
        ranked_results=ranked,
        chart_data=chart,
        best_index=0,
        worst_index=total - 1,
    )


class ComparisonService:
    """
    Pobiera wyceny dla wielu krajów źródłowych (równolegle – zapytania są
    niezależne) i dopiero po komplecie przekazuje je do rankingu.
    Wszystko albo nic: jeden błąd = jeden ComparisonFailed, bez częściowej tabeli.
    """

    def __init__(self, oracle: RateOracleClient, max_workers: int = 4) -> None:
        self._oracle = oracle
        self._max_workers = max(1, max_workers)

    def fetch_candidates(self, base_request: RateQuoteRequest, source_countries: Sequence[str]) -> List[ComparisonCandidate]:
        # zachowujemy kolejność krajów z żądania – od niej zależy remis w rankingu
        codes = list(dict.fromkeys(c.upper() for c in source_countries if c))
        if not codes:
            return []

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(codes))) as pool:
            futures = {
                code: pool.submit(self._oracle.quote, base_request.with_exporter(code))
                for code in codes
            }
            candidates: List[ComparisonCandidate] = []
            for code in codes:
                try:
                    quote = futures[code].result()
                except RateOracleError as e:
                    logger.error("Comparison quote failed for %s: %s", code, e.reason)
                    for f in futures.values():
                        f.cancel()
                    raise ComparisonFailed(code, e.reason) from e
                candidates.append(ComparisonCandidate(country_code=code, result=quote))
        return candidates

    def compare(
        self,
        base_request: RateQuoteRequest,
        source_countries: Sequence[str],
        country_name_map: Optional[Dict[str, str]] = None,
    ) -> ComparisonAnalysis:
        candidates = self.fetch_candidates(base_request, source_countries)
        return compare_results(candidates, country_name_map)
