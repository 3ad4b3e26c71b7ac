"""
Prayer time validation.
"""
import re
from collections import Counter
from typing import Any, Dict, List, Mapping

from parser.models import PRAYERS, DailyPrayerTime

TIME_RE = re.compile(r"^\d{2}:\d{2}$")

IQAMA_FIELDS = tuple(f"{p}_iqama" for p in PRAYERS)


def _is_time(value: Any) -> bool:
    return isinstance(value, str) and bool(TIME_RE.match(value))


def validate_prayer_times(times: Mapping[str, Any]) -> bool:
    """True iff all five required prayers are present as zero-padded HH:MM.

    Iqama values are not considered here; see `invalid_iqama_fields`.
    """
    return all(_is_time(times.get(key)) for key in PRAYERS)


def invalid_iqama_fields(times: Mapping[str, Any]) -> List[str]:
    """Iqama fields that are present but not HH:MM."""
    bad = []
    for key in IQAMA_FIELDS:
        value = times.get(key)
        if value is not None and not _is_time(value):
            bad.append(key)
    return bad


def validate_timetable(days: List[DailyPrayerTime]) -> Dict[str, Any]:
    """Summarise problems in an extracted batch without dropping anything.

    Records are never reordered or deduplicated; consumers get the issues
    list and decide for themselves.
    """
    if not days:
        return {"status": "empty", "issues": []}

    issues = []
    for idx, day in enumerate(days):
        values = {f: getattr(day, f) for f in PRAYERS + IQAMA_FIELDS}
        if not validate_prayer_times(values):
            issues.append({
                "index": idx,
                "date": day.date,
                "problem": "invalid_prayer_times",
                "fields": [p for p in PRAYERS if not _is_time(values[p])],
            })
        bad_iqama = invalid_iqama_fields(values)
        if bad_iqama:
            issues.append({
                "index": idx,
                "date": day.date,
                "problem": "invalid_iqama_times",
                "fields": bad_iqama,
            })

    counts = Counter(day.date for day in days)
    for date, count in counts.items():
        if count > 1:
            issues.append({"date": date, "problem": "duplicate_date", "count": count})

    return {
        "status": "valid" if not issues else "invalid",
        "issues": issues,
    }
