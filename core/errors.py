from __future__ import annotations
from typing import Optional


class LandedCostError(Exception):
    """Bazowy wyjątek aplikacji."""


class InvalidRequest(LandedCostError):
    """Niepoprawne dane wejściowe z API (→ HTTP 400)."""


class RateOracleError(LandedCostError):
    """Rate Oracle nie zwrócił wyceny. `reason` trafia do listy brakujących lat."""

    def __init__(self, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class RateNotFound(RateOracleError):
    """Brak stawki dla (trasa, produkt, data)."""


class TransportError(RateOracleError):
    """Błąd sieci / HTTP przy wołaniu zewnętrznego serwisu."""


class SuspensionDirectoryUnavailable(LandedCostError):
    """Bez listy zawieszeń nie da się wyznaczyć dat zapytań – przerywamy przed pętlą."""


class ComparisonFailed(LandedCostError):
    def __init__(self, country_code: str, reason: str) -> None:
        super().__init__(f"Comparison failed for {country_code}: {reason}")
        self.country_code = country_code
        self.reason = reason


class CalculationSuperseded(LandedCostError):
    """Nowsze obliczenie tego samego klienta wyprzedziło bieżące."""

    def __init__(self, client_key: str, token: int) -> None:
        super().__init__(f"Calculation {token} for '{client_key}' was superseded")
        self.client_key = client_key
        self.token = token
