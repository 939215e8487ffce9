from __future__ import annotations
from typing import Any, Dict, Optional
import logging
import requests

from core.config import Config
from core.errors import RateNotFound, TransportError
from domain.models import RateQuoteRequest, RateQuoteResult

logger = logging.getLogger(__name__)


class RateOracleClient:
    """
    Klient serwisu wyceny (Rate Oracle):
      POST {base}/api/calculate  – JSON camelCase, odpowiedź = RateQuoteResult

    Błędy:
      404, 422 / error=RATE_NOT_FOUND / "no applicable rate" → RateNotFound
      sieć, timeout, inne 4xx/5xx       → TransportError
    Powód (reason) bierzemy z pola "message"/"error" odpowiedzi, inaczej "HTTP <status>".
    """

    CALCULATE_PATH = "/api/calculate"
    NOT_FOUND_STATUSES = (404, 422)

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        api_key: Optional[str] = None,
    ) -> None:
        self.base_url = (base_url or Config.RATE_ORACLE_URL).rstrip("/")
        self.s = session or requests.Session()
        self.timeout = timeout if timeout is not None else Config.RATE_ORACLE_TIMEOUT
        self.api_key = api_key if api_key is not None else Config.RATE_ORACLE_API_KEY

    # ----------------- HTTP helpers -----------------

    def _headers(self) -> Dict[str, str]:
        h = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            h["Authorization"] = f"Bearer {self.api_key}"
        return h

    @staticmethod
    def _error_reason(r: requests.Response) -> str:
        reason = f"HTTP {r.status_code}"
        try:
            body = r.json()
        except ValueError:
            text = (r.text or "").strip()
            return text[:500] if text else reason
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or reason)
        if isinstance(body, str) and body:
            return body
        return reason

    @classmethod
    def _is_rate_not_found(cls, r: requests.Response, reason: str) -> bool:
        if r.status_code in cls.NOT_FOUND_STATUSES:
            return True
        try:
            body = r.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error") == "RATE_NOT_FOUND":
            return True
        return "no applicable rate" in reason.lower() or "no rate found" in reason.lower()

    # ----------------- API -----------------

    def quote(self, request: RateQuoteRequest) -> RateQuoteResult:
        url = self.base_url + self.CALCULATE_PATH
        try:
            r = self.s.post(url, headers=self._headers(), json=request.to_payload(), timeout=self.timeout)
        except requests.Timeout as e:
            raise TransportError(f"Rate Oracle timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise TransportError(str(e) or e.__class__.__name__) from e

        if r.status_code >= 400:
            reason = self._error_reason(r)
            logger.debug("Rate Oracle %s for %s: %s", r.status_code, request.transaction_date, reason)
            if self._is_rate_not_found(r, reason):
                raise RateNotFound(reason, status_code=r.status_code)
            raise TransportError(reason, status_code=r.status_code)

        try:
            data: Any = r.json()
        except ValueError as e:
            raise TransportError("Invalid JSON from Rate Oracle", status_code=r.status_code) from e
        if not isinstance(data, dict):
            raise TransportError("Unexpected Rate Oracle payload", status_code=r.status_code)
        try:
            return RateQuoteResult.from_payload(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed Rate Oracle payload: {e}", status_code=r.status_code) from e
