from datetime import date
from unittest import mock

import pytest

from parser import timetable
from parser.models import DailyPrayerTime
from parser.timetable import (
    dated_prayer_lines,
    find_time_tokens,
    header_anchored_rows,
    parse_prayer_timetable,
    single_best_effort,
)

from conftest import SAMPLE_TRANSCRIPT

TODAY = date(2025, 7, 20)


def _lines(text):
    return [ln.strip() for ln in text.split("\n") if ln.strip()]


def test_header_rows_with_month_context():
    days = parse_prayer_timetable(SAMPLE_TRANSCRIPT, today=TODAY)

    assert days == [
        DailyPrayerTime("2024-03-01", "05:10", "12:15", "15:40", "18:05", "19:30"),
        DailyPrayerTime("2024-03-02", "05:08", "12:15", "15:41", "18:07", "19:32"),
    ]


def test_day_number_resolves_month_from_nearby_line():
    text = "March 2024\nDate Fajr Dhuhr Asr Maghrib Isha\n| 14 | 05:10  12:15  15:40  18:05  19:30"
    days = parse_prayer_timetable(text, today=TODAY)

    assert [d.date for d in days] == ["2024-03-14"]


def test_month_outside_window_is_ignored():
    filler = ["notes line %d" % i for i in range(11)]
    text = "\n".join(["March 2024"] + filler + ["| 14 | 05:10  12:15  15:40  18:05  19:30"])
    days = header_anchored_rows(_lines(text), TODAY)

    assert [d.date for d in days] == ["2025-07-14"]


def test_day_number_without_month_defaults_to_today():
    text = "Fajr Dhuhr Asr Maghrib Isha\n| 9 | 05:10 12:15 15:40 18:05 19:30"
    days = parse_prayer_timetable(text, today=TODAY)

    assert [d.date for d in days] == ["2025-07-09"]


def test_embedded_full_date_with_two_digit_year():
    days = parse_prayer_timetable("01/04/24 05:10 12:15 15:40 18:05 19:30", today=TODAY)

    assert days[0].date == "2024-04-01"
    assert days[0].fajr == "05:10"


def test_times_without_colons_are_recovered():
    text = "May 2024\n| 5 | 506 1215 1540 1805 1930"
    days = parse_prayer_timetable(text, today=TODAY)

    assert days == [DailyPrayerTime("2024-05-05", "05:06", "12:15", "15:40", "18:05", "19:30")]


def test_begin_iqama_pairs_use_fixed_offsets():
    row = "| 3 | 05:12 05:32 06:40 13:10 13:20 16:30 16:40 19:05 19:10 20:15"
    days = parse_prayer_timetable("June 2024\n" + row, today=TODAY)

    assert len(days) == 1
    day = days[0]
    assert (day.fajr, day.dhuhr, day.asr, day.maghrib, day.isha) == (
        "05:12", "13:10", "16:30", "19:05", "20:15",
    )
    assert day.dhuhr != "05:32"


def test_header_line_is_not_a_data_row():
    text = "1 Fajr 05:00 Dhuhr 12:00 Asr 15:00 Maghrib 18:00 Isha 19:00"
    assert header_anchored_rows(_lines(text), TODAY) == []


def test_out_of_range_tokens_are_dropped():
    assert find_time_tokens("25:10 05:70 05:10") == [("05", "10")]


def test_row_without_date_or_day_is_skipped():
    assert header_anchored_rows(["Times 05:10 12:15 15:40 18:05 19:30"], TODAY) == []


DATED_LINES = """Date: 01/03/2024
Fajr 05:10
Sunrise 06:30
Dhuhr 12:15
Asr 15:40
Maghrib 18:05
Isha 19:30
Date: 02/03/2024
Fajr 05:08
Dhuhr 12:15
"""


def test_dated_prayer_lines_flushes_complete_days_only():
    days = dated_prayer_lines(_lines(DATED_LINES), TODAY)

    assert days == [DailyPrayerTime("2024-03-01", "05:10", "12:15", "15:40", "18:05", "19:30")]


def test_dated_prayer_lines_used_when_no_table_rows():
    assert parse_prayer_timetable(DATED_LINES, today=TODAY)[0].date == "2024-03-01"


def test_single_best_effort_dates_today():
    text = "Fajr 5:10 am\nDhuhr 1:15 pm\nAsr 4:45\nMaghrib 7:02\nIsha 8:30\nFajr 6:00"
    days = parse_prayer_timetable(text, today=date(2024, 3, 1))

    assert days == [DailyPrayerTime("2024-03-01", "05:10", "01:15", "04:45", "07:02", "08:30")]


def test_single_best_effort_needs_all_five():
    assert single_best_effort(["Fajr 05:10", "Dhuhr 12:15"], TODAY) == []


def test_first_successful_strategy_wins_and_later_ones_never_run():
    text = (
        "01/03/2024 05:10 12:15 15:40 18:05 19:30\n"
        "02/03/2024\n"
        "Fajr 05:11\nDhuhr 12:16\nAsr 15:41\nMaghrib 18:06\nIsha 19:31\n"
    )
    # both the row strategy and the dated-lines strategy can read this text
    assert dated_prayer_lines(_lines(text), TODAY)

    second = mock.Mock(return_value=[])
    third = mock.Mock(return_value=[])
    days = parse_prayer_timetable(text, strategies=(header_anchored_rows, second, third), today=TODAY)

    assert [d.date for d in days] == ["2024-03-01"]
    second.assert_not_called()
    third.assert_not_called()


def test_later_strategy_runs_when_earlier_is_empty():
    first = mock.Mock(return_value=[])
    found = [DailyPrayerTime("2024-03-01", "05:10", "12:15", "15:40", "18:05", "19:30")]
    second = mock.Mock(return_value=found)

    assert parse_prayer_timetable("anything", strategies=(first, second), today=TODAY) == found
    first.assert_called_once_with(["anything"], TODAY)


@pytest.mark.parametrize("strategy", timetable.DEFAULT_STRATEGIES)
def test_unrecognisable_text_gives_empty_list(strategy):
    lines = _lines("Welcome to our community newsletter\nEvents this week: bake sale")
    assert strategy(lines, TODAY) == []


def test_unrecognisable_text_is_not_an_error():
    assert parse_prayer_timetable("no timetable here", today=TODAY) == []
    assert parse_prayer_timetable("", today=TODAY) == []
