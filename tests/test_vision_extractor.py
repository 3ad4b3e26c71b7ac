import json

import pytest

from ai import vision_extractor
from ai.vision_extractor import extract_with_ai, is_ai_extraction_available, parse_ai_response
from config import config
from exceptions import MalformedResponseError, NetworkError

AI_DAYS = {
    "days": [
        {
            "date": "2024-03-01",
            "fajr": "05:10",
            "fajrIqama": "05:30",
            "dhuhr": "12:15",
            "dhuhrIqama": "13:00",
            "asr": "15:40",
            "asrIqama": "16:00",
            "maghrib": "18:05",
            "maghribIqama": "18:10",
            "isha": "19:30",
            "ishaIqama": "19:45",
        },
        # ditto marks already resolved by the model
        {
            "date": "2024-03-02",
            "fajr": "05:08",
            "fajrIqama": "05:30",
            "dhuhr": "12:15",
            "dhuhrIqama": "13:00",
            "asr": "15:41",
            "asrIqama": "16:00",
            "maghrib": "18:07",
            "maghribIqama": "18:12",
            "isha": "19:32",
            "ishaIqama": "19:45",
        },
    ]
}


def test_fenced_reply_is_parsed():
    raw = "```json\n" + json.dumps(AI_DAYS) + "\n```"
    days = parse_ai_response(raw)

    assert [d.date for d in days] == ["2024-03-01", "2024-03-02"]
    assert days[1].fajr_iqama == "05:30"
    assert days[1].to_dict() == AI_DAYS["days"][1]


def test_values_are_not_revalidated():
    raw = json.dumps({"days": [{"date": "2024-03-01", "fajr": "5:10", "dhuhr": "12:15"}]})
    day = parse_ai_response(raw)[0]

    assert day.fajr == "5:10"
    assert day.isha is None


@pytest.mark.parametrize(
    "raw",
    [
        "Sorry, I cannot read this image.",
        json.dumps({"prayers": []}),
        json.dumps({"days": "none"}),
        json.dumps([1, 2]),
        json.dumps({"days": ["05:10"]}),
    ],
)
def test_malformed_replies_raise(raw):
    with pytest.raises(MalformedResponseError):
        parse_ai_response(raw)


def test_empty_days_array_is_accepted():
    assert parse_ai_response('{"days": []}') == []


@pytest.mark.parametrize(
    "key,expected",
    [(None, False), ("", False), ("your_gemini_api_key_here", False), ("AIza-real-key", True)],
)
def test_availability_depends_on_a_real_key(monkeypatch, key, expected):
    monkeypatch.setattr(config, "GEMINI_API_KEY", key)
    assert is_ai_extraction_available() is expected


def test_extract_with_ai_reports_stages(monkeypatch):
    sent = {}

    def fake_generate(prompt, file_bytes, mime_type):
        sent.update(prompt=prompt, file_bytes=file_bytes, mime_type=mime_type)
        return json.dumps(AI_DAYS)

    monkeypatch.setattr(vision_extractor, "gemini_generate", fake_generate)
    events = []

    days = extract_with_ai(b"img", "image/png", on_progress=events.append)

    assert len(days) == 2
    assert sent["mime_type"] == "image/png"
    assert sent["file_bytes"] == b"img"
    assert "Iqama" in sent["prompt"]
    assert [(e.status, e.progress) for e in events] == [
        ("Preparing image for AI analysis...", 0.1),
        ("Sending to Gemini vision model...", 0.3),
        ("Processing AI response...", 0.8),
        ("Extraction complete!", 1.0),
    ]


def test_transport_errors_propagate(monkeypatch):
    def failing(*args):
        raise NetworkError("Gemini API error: HTTP 500")

    monkeypatch.setattr(vision_extractor, "gemini_generate", failing)

    with pytest.raises(NetworkError):
        extract_with_ai(b"img", "image/png")
