"""Collapse the 3-hour forecast feed into one representative entry per day."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from weather_dashboard.models import ForecastSample
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="dashboard/aggregator")

MAX_DAYS = 5
MIDDAY_FIRST_HOUR = 11
MIDDAY_LAST_HOUR = 14


@dataclass(frozen=True)
class DailyForecast:
    """One day of forecast: a representative sample plus the day's temperature range."""
    date: dt.date
    sample: ForecastSample
    temp_min: Optional[float]
    temp_max: Optional[float]


def local_datetime(timestamp: int, utc_offset_seconds: int = 0) -> dt.datetime:
    """Epoch seconds as a wall-clock time in the city's UTC offset."""
    tz = dt.timezone(dt.timedelta(seconds=utc_offset_seconds))
    return dt.datetime.fromtimestamp(timestamp, tz=tz)


def _is_midday(moment: dt.datetime) -> bool:
    return MIDDAY_FIRST_HOUR <= moment.hour <= MIDDAY_LAST_HOUR


def select_representatives(
    samples: Iterable[ForecastSample],
    utc_offset_seconds: int = 0,
    max_days: int = MAX_DAYS,
) -> List[Tuple[dt.date, ForecastSample]]:
    """
    Pick one sample per calendar day, oldest day first.

    A midday sample (local hour 11-14) is preferred. If that yields fewer than
    `max_days` days (the first day of the feed often starts after midday, and
    the last one ends before it) a second scan fills each missing day with its
    first sample. Days that already have a midday sample keep it.
    """
    ordered = sorted(samples, key=lambda s: s.timestamp)

    chosen: Dict[dt.date, ForecastSample] = {}
    for sample in ordered:
        moment = local_datetime(sample.timestamp, utc_offset_seconds)
        if moment.date() not in chosen and _is_midday(moment):
            chosen[moment.date()] = sample

    if len(chosen) < max_days:
        logger.debug(f"Only {len(chosen)} midday samples; filling remaining days with their first sample")
        for sample in ordered:
            if len(chosen) >= max_days:
                break
            day = local_datetime(sample.timestamp, utc_offset_seconds).date()
            if day not in chosen:
                chosen[day] = sample

    return sorted(chosen.items())[:max_days]


def daily_min_max(
    samples: Sequence[ForecastSample],
    day: dt.date,
    utc_offset_seconds: int = 0,
) -> Tuple[Optional[float], Optional[float]]:
    """Min/max temperature over every sample falling on `day`; (None, None) if none do."""
    temps = [
        s.temperature
        for s in samples
        if local_datetime(s.timestamp, utc_offset_seconds).date() == day
    ]
    if not temps:
        return None, None
    return min(temps), max(temps)


def aggregate_daily(
    samples: Sequence[ForecastSample],
    utc_offset_seconds: int = 0,
    max_days: int = MAX_DAYS,
) -> List[DailyForecast]:
    """Reduce 3-hour samples to at most `max_days` DailyForecast entries."""
    daily: List[DailyForecast] = []
    for day, sample in select_representatives(samples, utc_offset_seconds, max_days):
        temp_min, temp_max = daily_min_max(samples, day, utc_offset_seconds)
        daily.append(DailyForecast(date=day, sample=sample, temp_min=temp_min, temp_max=temp_max))
    return daily
