from __future__ import annotations
from typing import Any, Dict, Optional

from flask import Blueprint, Response, current_app, jsonify, request

from application.comparison import ComparisonService
from application.export import comparison_to_csv, year_series_to_csv
from application.tariff_history_service import TariffHistoryService, year_steps
from application.year_series import CalculationGenerations, YearSeriesCalculator, filter_series_by_time_range
from core.errors import (
    CalculationSuperseded,
    ComparisonFailed,
    InvalidRequest,
    SuspensionDirectoryUnavailable,
)
from domain.models import RateQuoteRequest, SuspensionInterval
from domain.reference_data import ReferenceData

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _services() -> Dict[str, Any]:
    return current_app.extensions["landed_cost"]


# --------- obsługa błędów ----------

@api_bp.errorhandler(InvalidRequest)
def _invalid_request(e: InvalidRequest):
    return jsonify({"error": str(e)}), 400


@api_bp.errorhandler(SuspensionDirectoryUnavailable)
def _directory_unavailable(e: SuspensionDirectoryUnavailable):
    current_app.logger.error("Suspension directory unavailable: %s", e)
    return jsonify({"error": str(e)}), 503


@api_bp.errorhandler(ComparisonFailed)
def _comparison_failed(e: ComparisonFailed):
    return jsonify({"error": str(e), "country": e.country_code}), 502


@api_bp.errorhandler(CalculationSuperseded)
def _superseded(e: CalculationSuperseded):
    return jsonify({"error": str(e)}), 409


# --------- parsowanie wejścia ----------

def _num(v, name: str, default: Optional[float] = None, required: bool = False) -> Optional[float]:
    if v is None or v == "":
        if required:
            raise InvalidRequest(f"Missing '{name}'")
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        raise InvalidRequest(f"'{name}' must be a number")


def _int(v, name: str, default: Optional[int] = None) -> int:
    if v is None or v == "":
        if default is None:
            raise InvalidRequest(f"Missing '{name}'")
        return default
    try:
        return int(v)
    except (TypeError, ValueError):
        raise InvalidRequest(f"'{name}' must be an integer")


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off", ""}


def _bool(v, name: str) -> bool:
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if isinstance(v, str) and v.strip().lower() in _TRUE | _FALSE:
        return v.strip().lower() in _TRUE
    raise InvalidRequest(f"'{name}' must be a boolean")


def _str(payload: Dict[str, Any], *keys: str, required: bool = True) -> Optional[str]:
    for k in keys:
        v = (payload.get(k) or "")
        if isinstance(v, str) and v.strip():
            return v.strip()
    if required:
        raise InvalidRequest(f"Missing '{keys[0]}'")
    return None


def _base_request(payload: Dict[str, Any], importer_key: str = "importerCode") -> RateQuoteRequest:
    trade_original = _num(payload.get("tradeOriginal", payload.get("tradeValue")), "tradeOriginal", required=True)
    if trade_original < 0:
        raise InvalidRequest("'tradeOriginal' must not be negative")
    exporter = _str(payload, "exporterCode", required=False)
    return RateQuoteRequest(
        importer_code=_str(payload, importer_key, "importerCode").upper(),
        exporter_code=exporter.upper() if exporter else None,
        hs6=_str(payload, "hs6", "productCode"),
        trade_original=trade_original,
        transaction_date=str(payload.get("transactionDate") or ""),
        net_weight=_num(payload.get("netWeight"), "netWeight"),
        include_freight=_bool(payload.get("includeFreight"), "includeFreight"),
        freight_mode=payload.get("freightMode") or None,
        include_insurance=_bool(payload.get("includeInsurance"), "includeInsurance"),
        insurance_rate=_num(payload.get("insuranceRate"), "insuranceRate"),
    )


def _year_range(start_raw, end_raw) -> tuple:
    cfg = current_app.config
    start_year = _int(start_raw, "startYear", cfg["DEFAULT_START_YEAR"])
    end_year = _int(end_raw, "endYear", cfg["DEFAULT_END_YEAR"])
    if start_year > end_year:
        raise InvalidRequest("'startYear' must not be after 'endYear'")
    if end_year - start_year + 1 > cfg["MAX_YEAR_SPAN"]:
        raise InvalidRequest(f"Year range longer than {cfg['MAX_YEAR_SPAN']} years")
    return start_year, end_year


# --------- dane referencyjne ----------

@api_bp.route("/countries")
def get_countries():
    ref: ReferenceData = _services()["reference"]
    return jsonify({"countries": [c.to_dict() for c in ref.sorted_countries()]})


@api_bp.route("/products")
def get_products():
    ref: ReferenceData = _services()["reference"]
    return jsonify({"products": [p.to_dict() for p in ref.sorted_products()]})


# --------- seria wieloletnia ----------

@api_bp.route("/year-series", methods=["POST"])
def year_series():
    """
    Stawka efektywna rok po roku dla jednej trasy.

    Body JSON:
      - importerCode, hs6, tradeOriginal [wymagane]
      - exporterCode, netWeight, includeFreight, freightMode, includeInsurance, insuranceRate (opc.)
      - startYear, endYear (opc., domyślnie z konfiguracji)
      - suspensions: [{valid_from, valid_to}] (opc.; brak → katalog zawieszeń)
      - clientId (opc.) – nowsze obliczenie tego klienta unieważnia starsze
      - timeRange: all|5y|3y|1y (opc.) → chartSeries
      - ?format=csv → CSV zamiast JSON
    """
    payload = request.get_json(silent=True) or {}
    base = _base_request(payload)
    start_year, end_year = _year_range(payload.get("startYear"), payload.get("endYear"))

    svc = _services()
    calculator: YearSeriesCalculator = svc["year_series"]
    generations: CalculationGenerations = svc["generations"]

    client_key = _str(payload, "clientId", required=False)
    token = generations.issue(client_key) if client_key else None

    raw_suspensions = payload.get("suspensions")
    try:
        if raw_suspensions is None:
            result = calculator.compute_for_route(base, start_year, end_year, client_key, token)
        else:
            if not isinstance(raw_suspensions, list):
                raise InvalidRequest("'suspensions' must be a list")
            try:
                intervals = [SuspensionInterval.from_dict(s) for s in raw_suspensions]
            except (AttributeError, ValueError) as e:
                raise InvalidRequest(f"Invalid suspension interval: {e}")
            result = calculator.compute_year_series(base, intervals, start_year, end_year, client_key, token)
    finally:
        if client_key:
            generations.release(client_key, token)

    time_range = payload.get("timeRange") or "all"
    # timeRange zawęża tylko widok wykresu; series i missingYears zostają pełne
    chart_series = filter_series_by_time_range(result.series, time_range)

    if request.args.get("format") == "csv":
        return Response(
            year_series_to_csv(result.series),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=tariff-year-series.csv"},
        )
    body = result.to_dict()
    body["chartSeries"] = [p.to_dict() for p in chart_series]
    body["timeRange"] = time_range
    body.update({"startYear": start_year, "endYear": end_year})
    return jsonify(body)


# --------- porównanie krajów ----------

@api_bp.route("/compare", methods=["POST"])
def compare():
    """
    Porównanie kosztu całkowitego z wielu krajów źródłowych.

    Body JSON:
      - destinationCountry, sourceCountries[], productCode, tradeValue, transactionDate [wymagane]
      - netWeight, includeFreight, freightMode, includeInsurance, insuranceRate (opc.)
      - ?format=csv → CSV zamiast JSON
    """
    payload = request.get_json(silent=True) or {}
    sources = payload.get("sourceCountries")
    if not isinstance(sources, list) or not sources:
        raise InvalidRequest("'sourceCountries' must be a non-empty list")
    if not payload.get("transactionDate"):
        raise InvalidRequest("Missing 'transactionDate'")
    base = _base_request(payload, importer_key="destinationCountry")

    svc = _services()
    ref: ReferenceData = svc["reference"]
    comparison: ComparisonService = svc["comparison"]

    analysis = comparison.compare(base, [str(s) for s in sources], ref.country_name_map(str(s) for s in sources))

    if request.args.get("format") == "csv":
        csv_text = comparison_to_csv(analysis, ref.country_name(base.importer_code), base.hs6)
        return Response(
            csv_text,
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=tariff-comparison.csv"},
        )

    body = analysis.to_dict()
    body["destinationCountry"] = {"code": base.importer_code, "name": ref.country_name(base.importer_code)}
    body["productCode"] = base.hs6
    return jsonify(body)


# --------- historia stawek (WITS) ----------

@api_bp.route("/tariff-history")
def tariff_history():
    """
    Raportowane stawki WITS dla kraju i produktu.

    Parametry:
      ?reporter=USA&product=290110[&startYear=2006&endYear=2022&interval=2]
    """
    reporter = (request.args.get("reporter") or "").upper().strip()
    product = (request.args.get("product") or "").strip()
    if not reporter or not product:
        return jsonify({"error": "Missing required parameters: reporter and product"}), 400

    start_year, end_year = _year_range(request.args.get("startYear"), request.args.get("endYear"))
    interval = _int(request.args.get("interval"), "interval", 1)

    history: TariffHistoryService = _services()["tariff_history"]
    result = history.reported_history(reporter, product, year_steps(start_year, end_year, interval))
    return jsonify(result.to_dict())
