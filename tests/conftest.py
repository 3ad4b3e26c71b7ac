import cv2
import numpy as np
import pytest

from config import config


SAMPLE_CSV = (
    "Date,Fajr,Dhuhr,Asr,Maghrib,Isha\n"
    "2024-01-01,05:30,12:15,15:45,18:20,19:45\n"
    "2024-01-02,05:31,12:15,15:44,18:21,19:46"
)

SAMPLE_TRANSCRIPT = """Masjid Al-Noor Prayer Timetable
March 2024
Date  Fajr  Sunrise  Dhuhr  Asr  Maghrib  Isha
| 1 | 05:10 | 12:15 | 15:40 | 18:05 | 19:30
| 2 | 05:08 | 12:15 | 15:41 | 18:07 | 19:32
"""


@pytest.fixture(autouse=True)
def no_gemini_key(monkeypatch):
    """Tests never talk to the real model unless they opt in."""
    monkeypatch.setattr(config, "GEMINI_API_KEY", None)


@pytest.fixture
def png_bytes():
    def _encode(image):
        ok, buf = cv2.imencode(".png", image)
        assert ok
        return buf.tobytes()
    return _encode


@pytest.fixture
def white_png(png_bytes):
    return png_bytes(np.full((50, 80, 3), 255, dtype=np.uint8))
