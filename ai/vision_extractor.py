"""
AI Vision Layer:
Extracts Adhan and Iqama times straight from a timetable image or PDF with Gemini.
Handles paired begin/iqama columns and highlighted rows far better than OCR
heuristics; the orchestrator falls back to OCR when this fails.
"""

import json
import re
from json import JSONDecodeError
from typing import Callable, List, Optional

from exceptions import MalformedResponseError
from gemini_client import gemini_generate, get_api_key
from logging_config import configure_logging
from parser.models import DailyPrayerTime, ExtractionProgress

logger = configure_logging(name="ai")

EXTRACTION_PROMPT = """You are an expert at extracting prayer timetables from images. Your job is to:
1. Identify the prayer times table in the image
2. Extract BOTH the Adhan (beginning/start) times AND Iqama (congregation/jamat/jama at) times for each prayer
3. Extract data for ALL days shown in the timetable
4. Return the data in a structured JSON format

CRITICAL INSTRUCTIONS:
- Extract Fajr, Dhuhr, Asr, Maghrib, and Isha times
- For each prayer, there are TWO columns: START/ADHAN and JAMA AT/IQAMA
- Look for column headers like "START" and "JAMA AT" or "JAMAAT" or "IQAMA"
- Some rows may have different background colors (yellow, green, orange) - IGNORE the colors and extract ALL rows equally
- Highlighted/colored rows are just as important as normal rows - don't skip them!
- If a cell shows quotation marks (") it means "same as above" - use the value from the previous row
- Dates should be in YYYY-MM-DD format
- Times should be in 24-hour HH:MM format
- Include ALL days visible in the timetable
- Pay special attention to Friday (Jumu'ah) rows which are often highlighted

Please extract ALL prayer times from this timetable image. Return ONLY a JSON object with this exact structure (no markdown, no code blocks, just raw JSON):

{
  "days": [
    {
      "date": "YYYY-MM-DD",
      "fajr": "HH:MM",
      "fajrIqama": "HH:MM",
      "dhuhr": "HH:MM",
      "dhuhrIqama": "HH:MM",
      "asr": "HH:MM",
      "asrIqama": "HH:MM",
      "maghrib": "HH:MM",
      "maghribIqama": "HH:MM",
      "isha": "HH:MM",
      "ishaIqama": "HH:MM"
    }
  ]
}

Notes:
- NEVER use the same time for both adhan and iqama unless they are truly identical in the table
- Convert all times to 24-hour format
- Extract data for EVERY day shown in the table
- Ensure dates are continuous and match what's shown
- Handle quotation marks (") by copying the time from the cell above
- Return ONLY the JSON object, no other text"""

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.I)


def is_ai_extraction_available() -> bool:
    """True when a real (non-placeholder) Gemini key is configured."""
    return get_api_key() is not None


def _strip_code_fences(raw: str) -> str:
    return _FENCE_RE.sub("", raw.strip()).strip()


def parse_ai_response(raw: str) -> List[DailyPrayerTime]:
    """Turn the model's reply into records. Values are copied verbatim;
    validation happens downstream."""
    text = _strip_code_fences(raw or "")
    try:
        parsed = json.loads(text)
    except JSONDecodeError as e:
        raise MalformedResponseError(f"AI reply is not valid JSON: {e}") from e

    if not isinstance(parsed, dict) or not isinstance(parsed.get("days"), list):
        raise MalformedResponseError("Invalid response format from AI: missing 'days' array")

    days = []
    for item in parsed["days"]:
        if not isinstance(item, dict):
            raise MalformedResponseError(f"Invalid day entry from AI: {item!r}")
        days.append(DailyPrayerTime.from_dict(item))
    return days


def extract_with_ai(
    file_bytes: bytes,
    mime_type: str,
    on_progress: Optional[Callable[[ExtractionProgress], None]] = None,
) -> List[DailyPrayerTime]:
    def report(status, progress):
        if on_progress:
            on_progress(ExtractionProgress(status, progress))

    report("Preparing image for AI analysis...", 0.1)
    report("Sending to Gemini vision model...", 0.3)

    raw = gemini_generate(EXTRACTION_PROMPT, file_bytes, mime_type)

    report("Processing AI response...", 0.8)
    days = parse_ai_response(raw)
    logger.info(f"[AI] Vision extraction: {len(days)} days")

    report("Extraction complete!", 1.0)
    return days
