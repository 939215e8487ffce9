from __future__ import annotations
from datetime import date
from typing import Iterable, List

from domain.models import SuspensionInterval, YearDateMap

# neutralny punkt próbkowania, gdy w danym roku nie ma zawieszenia
DEFAULT_MONTH_DAY = (7, 1)


def build_year_date_map(intervals: Iterable[SuspensionInterval], start_year: int, end_year: int) -> YearDateMap:
    """
    Dla każdego roku z [start_year, end_year] wybiera jedną datę zapytania:
      a) początek zawieszenia, jeśli wypada w tym roku,
      b) max(valid_from, 1 stycznia), jeśli zawieszenie trwa w tym roku,
      c) 1 lipca w pozostałych przypadkach.

    Przy nakładających się przedziałach wygrywa najwcześniejszy valid_from.
    """
    ordered: List[SuspensionInterval] = sorted(intervals, key=lambda i: i.valid_from)
    year_dates: YearDateMap = {}

    for year in range(start_year, end_year + 1):
        starting = next((i for i in ordered if i.valid_from.year == year), None)
        if starting is not None:
            year_dates[year] = starting.valid_from.isoformat()
            continue

        active = next((i for i in ordered if i.is_active_during(year)), None)
        if active is not None:
            year_dates[year] = max(active.valid_from, date(year, 1, 1)).isoformat()
            continue

        year_dates[year] = date(year, *DEFAULT_MONTH_DAY).isoformat()

    return year_dates
