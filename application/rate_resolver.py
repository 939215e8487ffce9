from __future__ import annotations
import math
from typing import Optional

from domain.models import (
    Compound,
    EffectiveRate,
    MfnOnly,
    NoRate,
    Preferential,
    RateClass,
    RateComponents,
    RateQuoteResult,
    SpecificOnly,
    Suspended,
)


def _non_negative(value: float) -> float:
    if value is None or not math.isfinite(value) or value < 0:
        return 0.0
    return float(value)


def specific_to_percent(rate_per_kg: float, trade_original: float, net_weight: Optional[float]) -> float:
    """Cło specyficzne (kwota/kg) przeliczone na ekwiwalent ad valorem w %.

    Brak wagi liczymy jak 1 kg. Zerowa wartość transakcji daje 0,
    a nie nieskończoność.
    """
    if not trade_original:
        return 0.0
    weight = net_weight or 1
    return (rate_per_kg * weight) / trade_original * 100


def resolve(components: RateComponents, trade_original: float, net_weight: Optional[float] = None) -> EffectiveRate:
    """
    Jedna efektywna stawka z rozłącznych składników, wg pierwszeństwa:
      zawieszenie > preferencja > MFN+specyficzne > MFN > specyficzne > brak.
    Funkcja czysta i totalna – nigdy nie rzuca.
    """
    v = components.variant()

    if isinstance(v, Suspended):
        rate = _non_negative(v.rate)
        label = "Suspended (0%)" if rate == 0 else RateClass.SUSPENDED.value
        return EffectiveRate(rate, RateClass.SUSPENDED, label, is_suspended=True)

    if isinstance(v, Preferential):
        return EffectiveRate(_non_negative(v.rate), RateClass.PREFERENTIAL, RateClass.PREFERENTIAL.value)

    if isinstance(v, Compound):
        # tylko część ad valorem; składnika specyficznego nie doliczamy do %
        return EffectiveRate(_non_negative(v.mfn), RateClass.COMPOUND, RateClass.COMPOUND.value)

    if isinstance(v, MfnOnly):
        return EffectiveRate(_non_negative(v.rate), RateClass.MFN, RateClass.MFN.value)

    if isinstance(v, SpecificOnly):
        rate = specific_to_percent(v.rate_per_kg, trade_original, net_weight)
        return EffectiveRate(_non_negative(rate), RateClass.SPECIFIC, RateClass.SPECIFIC.value)

    if isinstance(v, NoRate):
        return EffectiveRate(0.0, RateClass.NO_RATE, RateClass.NO_RATE.value)

    raise TypeError(f"Unhandled rate variant: {v!r}")


def resolve_result(result: RateQuoteResult) -> EffectiveRate:
    return resolve(result.components, result.trade_original, result.net_weight)
