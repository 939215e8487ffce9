from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union


def _num(value: Any) -> Optional[float]:
    # Rate Oracle zwraca BigDecimal – JSON number albo string
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Składniki stawki i ich wariant
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Suspended:
    rate: float


@dataclass(frozen=True)
class Preferential:
    rate: float


@dataclass(frozen=True)
class Compound:
    mfn: float
    specific: float


@dataclass(frozen=True)
class MfnOnly:
    rate: float


@dataclass(frozen=True)
class SpecificOnly:
    rate_per_kg: float


@dataclass(frozen=True)
class NoRate:
    pass


RateVariant = Union[Suspended, Preferential, Compound, MfnOnly, SpecificOnly, NoRate]


@dataclass(frozen=True)
class RateComponents:
    suspension_rate: Optional[float] = None
    preferential_rate: Optional[float] = None
    mfn_rate: Optional[float] = None
    specific_rate_per_kg: Optional[float] = None

    @classmethod
    def from_applied_rate(cls, applied: Optional[Dict[str, Any]]) -> "RateComponents":
        applied = applied or {}
        if not isinstance(applied, dict):
            raise ValueError(f"appliedRate must be an object, got {type(applied).__name__}")
        return cls(
            suspension_rate=_num(applied.get("suspension")),
            preferential_rate=_num(applied.get("prefAdval")),
            mfn_rate=_num(applied.get("mfnAdval")),
            specific_rate_per_kg=_num(applied.get("specific")),
        )

    def to_applied_rate(self) -> Dict[str, float]:
        out: Dict[str, float] = {}
        if self.suspension_rate is not None:
            out["suspension"] = self.suspension_rate
        if self.preferential_rate is not None:
            out["prefAdval"] = self.preferential_rate
        if self.mfn_rate is not None:
            out["mfnAdval"] = self.mfn_rate
        if self.specific_rate_per_kg is not None:
            out["specific"] = self.specific_rate_per_kg
        return out

    def variant(self) -> RateVariant:
        """Wybiera dokładnie jeden aktywny wariant wg pierwszeństwa."""
        if self.suspension_rate is not None:
            return Suspended(self.suspension_rate)
        if self.preferential_rate is not None:
            return Preferential(self.preferential_rate)
        if self.mfn_rate is not None and self.specific_rate_per_kg is not None:
            return Compound(self.mfn_rate, self.specific_rate_per_kg)
        if self.mfn_rate is not None:
            return MfnOnly(self.mfn_rate)
        if self.specific_rate_per_kg is not None:
            return SpecificOnly(self.specific_rate_per_kg)
        return NoRate()


class RateClass(str, Enum):
    SUSPENDED = "Suspended"
    PREFERENTIAL = "Preferential"
    COMPOUND = "Compound (MFN+Specific)"
    MFN = "MFN"
    SPECIFIC = "Specific Duty"
    NO_RATE = "No Rate"


@dataclass(frozen=True)
class EffectiveRate:
    rate_percent: float
    classification: RateClass
    label: str
    is_suspended: bool = False


# ---------------------------------------------------------------------------
# Rate Oracle – żądanie i odpowiedź
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RateQuoteRequest:
    importer_code: str
    hs6: str
    trade_original: float
    transaction_date: str = ""
    exporter_code: Optional[str] = None
    net_weight: Optional[float] = None
    include_freight: bool = False
    freight_mode: Optional[str] = None
    include_insurance: bool = False
    insurance_rate: Optional[float] = None

    def with_date(self, transaction_date: str) -> "RateQuoteRequest":
        return replace(self, transaction_date=transaction_date)

    def with_exporter(self, exporter_code: str) -> "RateQuoteRequest":
        return replace(self, exporter_code=exporter_code)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "importerCode": self.importer_code,
            "exporterCode": self.exporter_code,
            "hs6": self.hs6,
            "tradeOriginal": self.trade_original,
            "transactionDate": self.transaction_date,
            "netWeight": self.net_weight,
            "includeFreight": self.include_freight,
            "includeInsurance": self.include_insurance,
        }
        if self.freight_mode:
            payload["freightMode"] = self.freight_mode
        if self.insurance_rate is not None:
            payload["insuranceRate"] = self.insurance_rate
        return payload


@dataclass(frozen=True)
class RateQuoteResult:
    hs6: str
    importer_code: str
    transaction_date: str
    trade_original: float
    trade_final: float
    components: RateComponents = field(default_factory=RateComponents)
    exporter_code: Optional[str] = None
    net_weight: Optional[float] = None
    warnings: tuple = ()
    freight_cost: Optional[float] = None
    freight_type: Optional[str] = None
    insurance_rate: Optional[float] = None
    insurance_cost: Optional[float] = None
    total_landed_cost: Optional[float] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "RateQuoteResult":
        warnings = data.get("warnings") or []
        if data.get("warning"):
            warnings = list(warnings) + [data["warning"]]
        return cls(
            hs6=str(data.get("hs6") or ""),
            importer_code=str(data.get("importerCode") or ""),
            exporter_code=data.get("exporterCode"),
            transaction_date=str(data.get("transactionDate") or ""),
            trade_original=_num(data.get("tradeOriginal")) or 0.0,
            trade_final=_num(data.get("tradeFinal")) or 0.0,
            net_weight=_num(data.get("netWeight")),
            components=RateComponents.from_applied_rate(data.get("appliedRate")),
            warnings=tuple(str(w) for w in warnings),
            freight_cost=_num(data.get("freightCost")),
            freight_type=data.get("freightType"),
            insurance_rate=_num(data.get("insuranceRate")),
            insurance_cost=_num(data.get("insuranceCost")),
            total_landed_cost=_num(data.get("totalLandedCost")),
        )

    @property
    def duty_amount(self) -> float:
        return self.trade_final - self.trade_original

    @property
    def total_cost(self) -> float:
        # koszt całkowity; bez frachtu/ubezpieczenia to wartość po cle
        if self.total_landed_cost is not None:
            return self.total_landed_cost
        return self.trade_final

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hs6": self.hs6,
            "importerCode": self.importer_code,
            "exporterCode": self.exporter_code,
            "transactionDate": self.transaction_date,
            "tradeOriginal": self.trade_original,
            "tradeFinal": self.trade_final,
            "netWeight": self.net_weight,
            "appliedRate": self.components.to_applied_rate(),
            "warnings": list(self.warnings),
            "freightCost": self.freight_cost,
            "freightType": self.freight_type,
            "insuranceRate": self.insurance_rate,
            "insuranceCost": self.insurance_cost,
            "totalLandedCost": self.total_landed_cost,
        }


# ---------------------------------------------------------------------------
# Seria wieloletnia
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SuspensionInterval:
    valid_from: date
    valid_to: Optional[date] = None  # None = bezterminowo

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SuspensionInterval":
        raw_from = data.get("valid_from") or data.get("validFrom")
        raw_to = data.get("valid_to") or data.get("validTo")
        if not raw_from:
            raise ValueError("Suspension interval without valid_from")
        return cls(
            valid_from=date.fromisoformat(str(raw_from)[:10]),
            valid_to=date.fromisoformat(str(raw_to)[:10]) if raw_to else None,
        )

    def is_active_during(self, year: int) -> bool:
        return self.valid_from <= date(year, 12, 31) and (
            self.valid_to is None or self.valid_to >= date(year, 1, 1)
        )


YearDateMap = Dict[int, str]


@dataclass(frozen=True)
class YearSeriesPoint:
    year: int
    rate_percent: float
    classification: RateClass
    label: str
    is_suspended: bool
    duty_amount: float
    transaction_date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "ratePercent": self.rate_percent,
            "classification": self.classification.value,
            "label": self.label,
            "isSuspended": self.is_suspended,
            "dutyAmount": self.duty_amount,
            "transactionDate": self.transaction_date,
        }


@dataclass(frozen=True)
class MissingYear:
    year: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "reason": self.reason}


@dataclass
class YearSeries:
    series: List[YearSeriesPoint] = field(default_factory=list)
    missing_years: List[MissingYear] = field(default_factory=list)
    last_result: Optional[RateQuoteResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "series": [p.to_dict() for p in self.series],
            "missingYears": [m.to_dict() for m in self.missing_years],
            "lastResult": self.last_result.to_dict() if self.last_result else None,
        }


# ---------------------------------------------------------------------------
# Porównanie krajów
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparisonCandidate:
    country_code: str
    result: RateQuoteResult
    country_name: str = ""


@dataclass(frozen=True)
class RankedComparisonResult:
    rank: int
    country_code: str
    country_name: str
    result: RateQuoteResult
    percent_diff_from_best: float

    @property
    def total_cost(self) -> float:
        return self.result.total_cost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "countryCode": self.country_code,
            "countryName": self.country_name,
            "totalCost": self.total_cost,
            "percentDiffFromBest": self.percent_diff_from_best,
            "result": self.result.to_dict(),
        }


@dataclass(frozen=True)
class ChartEntry:
    country_name: str
    cost: float
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {"countryName": self.country_name, "cost": self.cost, "color": self.color}


@dataclass
class ComparisonAnalysis:
    ranked_results: List[RankedComparisonResult] = field(default_factory=list)
    chart_data: List[ChartEntry] = field(default_factory=list)
    best_index: Optional[int] = None
    worst_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rankedResults": [r.to_dict() for r in self.ranked_results],
            "chartData": [c.to_dict() for c in self.chart_data],
            "bestIndex": self.best_index,
            "worstIndex": self.worst_index,
        }
