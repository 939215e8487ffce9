from __future__ import annotations
from typing import Any, Dict, List, Optional
import requests

from core.config import Config
from core.errors import SuspensionDirectoryUnavailable
from domain.models import SuspensionInterval


class SuspensionDirectoryClient:
    """
    Katalog zawieszeń stawek:
      GET {base}/api/suspensions?importerCode=..&productCode=..&startYear=..&endYear=..

    Odpowiedź: lista (lub {"suspensions": [...]}) obiektów z valid_from / valid_to.
    Każdy błąd → SuspensionDirectoryUnavailable.
    """

    SUSPENSIONS_PATH = "/api/suspensions"

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or Config.SUSPENSION_DIRECTORY_URL).rstrip("/")
        self.s = session or requests.Session()
        self.timeout = timeout if timeout is not None else Config.RATE_ORACLE_TIMEOUT

    def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            r = self.s.get(url, params=params, headers={"Accept": "application/json"}, timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except (requests.RequestException, ValueError) as e:
            raise SuspensionDirectoryUnavailable(f"Suspension directory unavailable: {e}") from e

    def list_intervals(self, importer_code: str, hs6: str, start_year: int, end_year: int) -> List[SuspensionInterval]:
        data = self._get_json(
            self.base_url + self.SUSPENSIONS_PATH,
            params={
                "importerCode": importer_code,
                "productCode": hs6,
                "startYear": start_year,
                "endYear": end_year,
            },
        )
        if isinstance(data, list):
            rows = data
        elif isinstance(data, dict):
            rows = data.get("suspensions") or []
        else:
            rows = []

        intervals: List[SuspensionInterval] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                intervals.append(SuspensionInterval.from_dict(row))
            except ValueError as e:
                raise SuspensionDirectoryUnavailable(f"Malformed suspension record {row!r}: {e}") from e
        intervals.sort(key=lambda i: i.valid_from)
        return intervals
