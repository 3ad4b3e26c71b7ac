"""
CSV timetable parsing.

Expected layout: `Date,Fajr,Dhuhr,Asr,Maghrib,Isha` header followed by one row
per day. CSV input is treated as authoritative: values are copied verbatim.
"""

import csv
import io
from typing import List

from logging_config import configure_logging
from parser.models import DailyPrayerTime

logger = configure_logging(name="parser")


def parse_csv_timetable(csv_text: str) -> List[DailyPrayerTime]:
    results = []
    reader = csv.reader(io.StringIO(csv_text.strip()))

    # first row is the header
    next(reader, None)

    for row in reader:
        values = [v.strip() for v in row]
        if len(values) < 6:
            continue
        date, fajr, dhuhr, asr, maghrib, isha = values[:6]
        results.append(DailyPrayerTime(
            date=date,
            fajr=fajr,
            dhuhr=dhuhr,
            asr=asr,
            maghrib=maghrib,
            isha=isha,
        ))

    logger.info(f"[PARSER] CSV rows parsed: {len(results)}")
    return results
