from parser.csv_timetable import parse_csv_timetable
from parser.models import DailyPrayerTime

from conftest import SAMPLE_CSV


def test_parses_rows_verbatim_in_input_order():
    days = parse_csv_timetable(SAMPLE_CSV)

    assert days == [
        DailyPrayerTime("2024-01-01", "05:30", "12:15", "15:45", "18:20", "19:45"),
        DailyPrayerTime("2024-01-02", "05:31", "12:15", "15:44", "18:21", "19:46"),
    ]


def test_parsing_is_idempotent():
    first = [d.to_dict() for d in parse_csv_timetable(SAMPLE_CSV)]
    second = [d.to_dict() for d in parse_csv_timetable(SAMPLE_CSV)]
    assert first == second


def test_short_rows_are_skipped_and_values_not_coerced():
    text = (
        "Date,Fajr,Dhuhr,Asr,Maghrib,Isha\r\n"
        "2024-02-01, 5:30 ,12:15,15:45,18:20,19:45,extra\r\n"
        "2024-02-02,05:31,12:15\r\n"
        "\r\n"
    )
    days = parse_csv_timetable(text)

    assert len(days) == 1
    assert days[0].fajr == "5:30"
    assert days[0].isha == "19:45"


def test_header_only_yields_nothing():
    assert parse_csv_timetable("Date,Fajr,Dhuhr,Asr,Maghrib,Isha\n") == []
    assert parse_csv_timetable("") == []
