"""Test doubles for the external collaborators (Rate Oracle, suspension directory)."""

from typing import Callable, Dict, List, Optional, Union

from core.errors import RateNotFound
from domain.models import RateComponents, RateQuoteRequest, RateQuoteResult


def make_result(
    trade_original: float = 1000.0,
    trade_final: Optional[float] = None,
    transaction_date: str = "2022-07-01",
    exporter_code: Optional[str] = "CHN",
    total_landed_cost: Optional[float] = None,
    net_weight: Optional[float] = None,
    **components,
) -> RateQuoteResult:
    return RateQuoteResult(
        hs6="290110",
        importer_code="USA",
        exporter_code=exporter_code,
        transaction_date=transaction_date,
        trade_original=trade_original,
        trade_final=trade_original if trade_final is None else trade_final,
        net_weight=net_weight,
        components=RateComponents(**components),
        total_landed_cost=total_landed_cost,
    )


class FakeOracle:
    """
    Deterministyczny Rate Oracle. `responses` mapuje datę transakcji albo
    kod eksportera na wynik lub wyjątek; brak wpisu → RateNotFound.
    """

    def __init__(self, responses: Dict[str, Union[RateQuoteResult, Exception]], key: str = "date") -> None:
        self.responses = responses
        self.key = key
        self.calls: List[RateQuoteRequest] = []
        self.on_call: Optional[Callable[[RateQuoteRequest], None]] = None

    def quote(self, request: RateQuoteRequest) -> RateQuoteResult:
        self.calls.append(request)
        if self.on_call:
            self.on_call(request)
        k = request.transaction_date if self.key == "date" else request.exporter_code
        value = self.responses.get(k)
        if value is None:
            raise RateNotFound(f"No applicable rate found for {k}")
        if isinstance(value, Exception):
            raise value
        return value


class FakeSuspensionDirectory:
    def __init__(self, intervals=None, error: Optional[Exception] = None) -> None:
        self.intervals = intervals or []
        self.error = error
        self.calls = []

    def list_intervals(self, importer_code, hs6, start_year, end_year):
        self.calls.append((importer_code, hs6, start_year, end_year))
        if self.error:
            raise self.error
        return list(self.intervals)
