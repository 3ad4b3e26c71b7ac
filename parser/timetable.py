"""
Heuristic prayer timetable parser for OCR transcripts.

OCR output of a printed timetable is noisy: columns drift, colons go missing,
rows merge. Parsing is a cascade of independent strategies, each a function
`(lines, today) -> List[DailyPrayerTime]`, tried in order until one returns
something:

- header_anchored_rows: one data row per line with >= 5 time tokens
- dated_prayer_lines: date lines followed by "<prayer> <time>" lines
- single_best_effort: first time seen next to each prayer name, dated today
"""

import re
from datetime import date as Date
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from logging_config import configure_logging
from parser.models import PRAYERS, DailyPrayerTime
from utils.validation import validate_prayer_times

logger = configure_logging(name="parser")

# canonical prayer -> spellings seen on timetables (incl. common OCR misreads)
PRAYER_ALIASES: Dict[str, Tuple[str, ...]] = {
    "fajr": ("fajr", "fajar", "fair", "dawn", "subh", "subuh"),
    "dhuhr": ("dhuhr", "zuhr", "dhuhar", "noon", "zohr"),
    "asr": ("asr", "aser", "asar", "afternoon"),
    "maghrib": ("maghrib", "magrib", "maghreb", "sunset"),
    "isha": ("isha", "esha", "ishaa", "isya", "night"),
}

PRAYER_PATTERNS: Dict[str, "re.Pattern[str]"] = {
    prayer: re.compile(r"\b(" + "|".join(aliases) + r")\b", re.I)
    for prayer, aliases in PRAYER_ALIASES.items()
}

TIME_RE = re.compile(r"\b(\d{1,2}):(\d{2})\b")
# OCR often drops the colon: "506" -> 5:06, "1247" -> 12:47
TIME_NO_COLON_RE = re.compile(r"\b([0-2]?\d)([0-5]\d)\b")
DATE_RE = re.compile(r"\b(\d{1,2})[/\-.\s]+(\d{1,2})[/\-.\s]+(\d{2,4})\b")
LEADING_DAY_RE = re.compile(r"^\s*\|?\s*(\d{1,2})\s+")
YEAR_RE = re.compile(r"\b(20\d{2})\b")

MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

HEADER_MIN_PRAYERS = 3
MIN_ROW_LENGTH = 10
# begin/iqama layout: Fajr(0,1) Sunrise(2) Dhuhr(3,4) Asr(5,6) Maghrib(7,8) Isha(9,10)
PAIRED_COLUMN_OFFSETS = (0, 3, 5, 7, 9)
PAIRED_LAYOUT_MIN_TIMES = 10
# month context window around a row: 10 lines back, 5 forward
MONTH_LOOKBEHIND = 10
MONTH_LOOKAHEAD = 5

Strategy = Callable[[List[str], Date], List[DailyPrayerTime]]


def _format_time(hours: str, minutes: str) -> str:
    return f"{hours.zfill(2)}:{minutes}"


def _full_date(match: "re.Match[str]") -> str:
    day, month, year = match.groups()
    full_year = f"20{year}" if len(year) == 2 else year
    return f"{full_year}-{month.zfill(2)}-{day.zfill(2)}"


def _split_lines(text: str) -> List[str]:
    return [ln.strip() for ln in (text or "").split("\n") if ln.strip()]


def _count_prayer_names(line: str) -> int:
    return sum(1 for pattern in PRAYER_PATTERNS.values() if pattern.search(line))


def _valid_no_colon(token: str) -> bool:
    if len(token) == 3:
        return 0 <= int(token[0]) <= 9 and 0 <= int(token[1:]) <= 59
    if len(token) == 4:
        return 0 <= int(token[:2]) <= 23 and 0 <= int(token[2:]) <= 59
    return False


def _split_no_colon(token: str) -> Tuple[str, str]:
    if len(token) == 3:
        return token[0], token[1:]
    return token[:2], token[2:]


def find_time_tokens(line: str) -> List[Tuple[str, str]]:
    """All (hours, minutes) tokens on a line, falling back to colon-less runs
    when fewer than five colon times are present."""
    times = [(m.group(1), m.group(2)) for m in TIME_RE.finditer(line)]
    if len(times) < 5:
        no_colon = [m.group(0) for m in TIME_NO_COLON_RE.finditer(line)]
        no_colon = [tok for tok in no_colon if _valid_no_colon(tok)]
        if len(no_colon) >= 5:
            times = [_split_no_colon(tok) for tok in no_colon]
    return [(h, m) for h, m in times if 0 <= int(h) <= 23 and 0 <= int(m) <= 59]


def find_header_index(lines: Sequence[str]) -> int:
    for i, line in enumerate(lines):
        if _count_prayer_names(line) >= HEADER_MIN_PRAYERS:
            logger.debug(f"[PARSER] Header at line {i}: {line}")
            return i
    return -1


def infer_month_year(lines: Sequence[str], index: int, today: Date) -> Tuple[int, int]:
    """Month/year from the nearest month-name mention around `index`.

    Every line in the window is checked in order, so the last mention wins.
    Falls back to `today` when no month is named.
    """
    month, year = today.month, today.year
    start = max(0, index - MONTH_LOOKBEHIND)
    end = min(len(lines), index + MONTH_LOOKAHEAD)
    for j in range(start, end):
        context = lines[j].lower()
        for m, name in enumerate(MONTH_NAMES):
            if name in context:
                month = m + 1
                year_match = YEAR_RE.search(context)
                if year_match:
                    year = int(year_match.group(1))
                break
    return month, year


def _row_date(lines: Sequence[str], index: int, today: Date) -> Optional[str]:
    line = lines[index]
    date_match = DATE_RE.search(line)
    if date_match:
        return _full_date(date_match)
    day_match = LEADING_DAY_RE.match(line)
    if day_match:
        month, year = infer_month_year(lines, index, today)
        return f"{year}-{month:02d}-{day_match.group(1).zfill(2)}"
    return None


def select_prayer_columns(times: List[Tuple[str, str]]) -> List[str]:
    """Pick the five Adhan times out of a row's time tokens.

    Ten or more tokens means begin/iqama pairs plus sunrise, so the fixed
    offsets are used; otherwise the first five are taken in order.
    """
    if len(times) >= PAIRED_LAYOUT_MIN_TIMES:
        picked = [times[i] for i in PAIRED_COLUMN_OFFSETS if i < len(times)]
    else:
        picked = times[:5]
    return [_format_time(h, m) for h, m in picked]


def header_anchored_rows(lines: List[str], today: Date) -> List[DailyPrayerTime]:
    results = []
    header_index = find_header_index(lines)

    for i, line in enumerate(lines):
        if i == header_index or len(line) < MIN_ROW_LENGTH:
            continue

        times = find_time_tokens(line)
        if len(times) < 5:
            continue

        row_date = _row_date(lines, i, today)
        if row_date is None:
            continue

        prayer_times = select_prayer_columns(times)
        if len(prayer_times) != 5:
            continue

        logger.debug(f"[PARSER] Row {i} -> {row_date}: {prayer_times}")
        results.append(DailyPrayerTime(row_date, *prayer_times))

    return results


def dated_prayer_lines(lines: List[str], today: Date) -> List[DailyPrayerTime]:
    collected: Dict[str, Dict[str, str]] = {}
    current_date = None
    current = {}

    def flush():
        if current_date and len(current) == 5:
            collected[current_date] = dict(current)

    for line in lines:
        date_match = DATE_RE.search(line)
        if date_match:
            flush()
            current_date = _full_date(date_match)
            current = {}
            continue

        times = TIME_RE.findall(line)
        if not times:
            continue
        for prayer, pattern in PRAYER_PATTERNS.items():
            if pattern.search(line):
                current[prayer] = _format_time(*times[0])

    flush()

    return [
        DailyPrayerTime(date=d, **times)
        for d, times in collected.items()
        if validate_prayer_times(times)
    ]


def single_best_effort(lines: List[str], today: Date) -> List[DailyPrayerTime]:
    found = {}
    for line in lines:
        times = TIME_RE.findall(line)
        if not times:
            continue
        for prayer, pattern in PRAYER_PATTERNS.items():
            if prayer not in found and pattern.search(line):
                found[prayer] = _format_time(*times[0])

    if not validate_prayer_times(found):
        return []
    logger.info("[PARSER] Found one complete set; dating it today")
    return [DailyPrayerTime(date=today.isoformat(), **{p: found[p] for p in PRAYERS})]


DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (
    header_anchored_rows,
    dated_prayer_lines,
    single_best_effort,
)


def parse_prayer_timetable(
    text: str,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    today: Optional[Date] = None,
) -> List[DailyPrayerTime]:
    """Parse an OCR transcript into daily prayer times.

    Returns the first non-empty strategy result, in discovery order. An empty
    list means nothing could be recovered; callers should show the transcript.
    """
    lines = _split_lines(text)
    today = today or Date.today()
    logger.info(f"[PARSER] Parsing transcript: {len(lines)} lines")

    for strategy in strategies:
        results = strategy(lines, today)
        logger.info(f"[PARSER] {getattr(strategy, '__name__', strategy)}: {len(results)} days")
        if results:
            return results
    return []
