"""
Data models for the timetable extraction pipeline.

`DailyPrayerTime` is the record handed from the extraction stages to storage;
`ExtractionProgress` is the transient status signal sent to progress callbacks.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

PRAYERS = ("fajr", "dhuhr", "asr", "maghrib", "isha")

# python attribute -> external (camelCase) key
_EXTERNAL_KEYS = {
    "hijri_date": "hijriDate",
    "fajr_iqama": "fajrIqama",
    "dhuhr_iqama": "dhuhrIqama",
    "asr_iqama": "asrIqama",
    "maghrib_iqama": "maghribIqama",
    "isha_iqama": "ishaIqama",
}


@dataclass(frozen=True)
class DailyPrayerTime:
    """
    Prayer times for one calendar day.

    Attributes:
        date: ISO date (YYYY-MM-DD); not checked here
        fajr, dhuhr, asr, maghrib, isha: Adhan (start) times, HH:MM
        *_iqama: optional congregation times, HH:MM
        hijri_date: optional free-text lunar calendar label
    """
    date: str
    fajr: str
    dhuhr: str
    asr: str
    maghrib: str
    isha: str
    fajr_iqama: Optional[str] = None
    dhuhr_iqama: Optional[str] = None
    asr_iqama: Optional[str] = None
    maghrib_iqama: Optional[str] = None
    isha_iqama: Optional[str] = None
    hijri_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """External shape; optional fields are omitted when unset."""
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.name in _EXTERNAL_KEYS:
                continue
            out[_EXTERNAL_KEYS.get(f.name, f.name)] = value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyPrayerTime":
        kwargs = {}
        for f in fields(cls):
            key = _EXTERNAL_KEYS.get(f.name, f.name)
            if key in data:
                kwargs[f.name] = data[key]
            elif f.name in data:
                kwargs[f.name] = data[f.name]
        for name in ("date",) + PRAYERS:
            kwargs.setdefault(name, None)
        return cls(**kwargs)


@dataclass(frozen=True)
class ExtractionProgress:
    status: str
    progress: float

    @property
    def percent(self) -> int:
        return int(self.progress * 100)
