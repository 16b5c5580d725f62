import math
import re
from typing import List, Optional, Tuple

# Minutes since midnight
TIME_PERIODS = {
    "morning": (360, 660),        # 06:00-11:00
    "afternoon": (660, 840),      # 11:00-14:00
    "lateafternoon": (840, 1020),  # 14:00-17:00
    "evening": (1020, 1320),      # 17:00-22:00
}

_RANGE_RE = re.compile(r"(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})")


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return distance in kilometers."""
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat/2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon/2)**2
    c = 2 * math.asin(math.sqrt(a))
    return c * 6371.0


def parse_opening_hours(hours: Optional[str]) -> List[Tuple[int, int]]:
    """Parse "HH:MM - HH:MM[, HH:MM - HH:MM ...]" into minute ranges.

    A range that closes past midnight ("18:00 - 02:00") is extended to the end
    of the day. Unparseable text yields an empty list.
    """
    if not hours:
        return []
    ranges = []
    for start_h, start_m, end_h, end_m in _RANGE_RE.findall(hours):
        start = int(start_h) * 60 + int(start_m)
        end = int(end_h) * 60 + int(end_m)
        if end <= start:
            end = 24 * 60
        ranges.append((start, end))
    return ranges


def is_open_during(hours: Optional[str], period: str) -> bool:
    period_start, period_end = TIME_PERIODS[period]
    return any(
        start <= period_end and end >= period_start
        for start, end in parse_opening_hours(hours)
    )
