from __future__ import annotations
from typing import Dict, Iterable, Optional
import os
import re
import requests
import xml.etree.ElementTree as ET

from core.errors import RateNotFound, TransportError


class WITSAdapter:
    """
    Adapter do WITS – historyczne (raportowane) stawki z TRN (SDMX XML):
      /API/V1/SDMX/V21/datasource/TRN/reporter/{reporter}/partner/{partner}/product/{product}/year/{year}/datatype/reported

    reporter = kod numeryczny kraju (np. 840 dla USA), partner 000 = świat.
    Wartość stawki szukamy w atrybutach węzłów Series / Obs.
    """

    BASE = "https://wits.worldbank.org"

    TRN_DATA_URL = (
        BASE
        + "/API/V1/SDMX/V21/datasource/TRN/reporter/{reporter}/partner/{partner}/product/{product}/year/{year}/datatype/{datatype}"
    )

    WORLD_PARTNER = "000"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 60,
        api_key: Optional[str] = None,
    ) -> None:
        self.s = session or requests.Session()
        # WITS zwykle nie wymaga klucza, ale zostawiam hook:
        self.api_key = api_key if api_key is not None else os.environ.get("WITS_API_KEY", "")
        self.timeout = timeout

    # ----------------- HTTP helpers -----------------

    def _headers(self) -> Dict[str, str]:
        h: Dict[str, str] = {"Accept": "application/xml"}
        if self.api_key:
            h["Authorization"] = f"Bearer {self.api_key}"
        return h

    def _get_xml_root(self, url: str) -> ET.Element:
        try:
            r = self.s.get(url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"WITS request failed: {e}") from e
        if r.status_code == 404:
            raise RateNotFound(f"WITS has no data ({r.status_code})", status_code=r.status_code)
        if r.status_code >= 400:
            raise TransportError(f"WITS API error: {r.status_code} {r.reason}", status_code=r.status_code)
        try:
            return ET.fromstring(r.content)
        except ET.ParseError as e:
            raise TransportError(f"XML parse error at {url}: {e}")

    # ----------------- parsing -----------------

    @staticmethod
    def _local(tag: str) -> str:
        # "{namespace}Series" -> "Series"
        return tag.rsplit("}", 1)[-1]

    @staticmethod
    def _rate_from_attrs(attrib: Dict[str, str], keys: Iterable[str]) -> Optional[float]:
        for name, value in attrib.items():
            lname = name.lower()
            if not value or not any(k in lname for k in keys):
                continue
            try:
                return float(value)
            except ValueError:
                continue
        return None

    @classmethod
    def extract_tariff_rate(cls, root: ET.Element) -> Optional[float]:
        """Pierwsza liczbowa wartość z Series (value/rate/average), potem z Obs (value/rate)."""
        series = [n for n in root.iter() if cls._local(n.tag) == "Series"]
        for node in series:
            rate = cls._rate_from_attrs(node.attrib, ("value", "rate", "average"))
            if rate is not None:
                return rate
            for obs in node.iter():
                if cls._local(obs.tag) != "Obs":
                    continue
                rate = cls._rate_from_attrs(obs.attrib, ("value", "rate"))
                if rate is not None:
                    return rate

        for obs in root.iter():
            if cls._local(obs.tag) != "Obs":
                continue
            rate = cls._rate_from_attrs(obs.attrib, ("value", "rate"))
            if rate is not None:
                return rate
        return None

    # ----------------- API -----------------

    def get_reported_rate(
        self,
        reporter_numeric: str,
        product: str,
        year: int | str,
        partner: str = WORLD_PARTNER,
        datatype: str = "reported",
    ) -> float:
        if not re.fullmatch(r"\d{1,3}", str(reporter_numeric)):
            raise ValueError(f"WITS/TRN: reporter must be a numeric country code, got '{reporter_numeric}'.")
        url = self.TRN_DATA_URL.format(
            reporter=str(reporter_numeric).zfill(3),
            partner=partner,
            product=product,
            year=year,
            datatype=datatype,
        )
        root = self._get_xml_root(url)
        rate = self.extract_tariff_rate(root)
        if rate is None:
            raise RateNotFound(f"No reported tariff rate in WITS response for {year}")
        return rate
