"""
Centralized configuration for the Mosque Timetable Extractor.
Editable via environment variables. Uses safe defaults for production.
"""

import os
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root if present (local dev only)
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


GEMINI_API_KEY_PLACEHOLDER = "your_gemini_api_key_here"


class Config:
    """
    Application configuration. Values are read from environment variables.
    Keep secrets (API keys) out of the repository; set them as env vars.
    """

    # --- API Settings ---
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Mosque Timetable Extractor")
    VERSION: str = os.getenv("VERSION", "1.0")
    DESCRIPTION: str = os.getenv(
        "DESCRIPTION",
        "Turns photographed, scanned or CSV prayer timetables into daily prayer times.",
    )

    # --- Upload Constraints ---
    MAX_UPLOAD_SIZE_MB: float = float(os.getenv("MAX_UPLOAD_SIZE_MB", "15"))
    # PDFs are only sent to the vision model; keep them small
    PDF_MAX_PAGES: int = int(os.getenv("PDF_MAX_PAGES", "5"))

    # --- AI Settings ---
    # NOTE: Do NOT hardcode API keys. Set GEMINI_API_KEY in the environment.
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY")
    GEMINI_URL: str = os.getenv(
        "GEMINI_URL", "https://generativelanguage.googleapis.com/v1beta/models"
    )
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    AI_RETRY_COUNT: int = int(os.getenv("AI_RETRY_COUNT", "1"))
    AI_TIMEOUT_SECONDS: int = int(os.getenv("AI_TIMEOUT_SECONDS", "90"))

    # --- OCR Settings ---
    OCR_LANGUAGE: str = os.getenv("OCR_LANGUAGE", "eng")
    # Images smaller than this (on either side) are upscaled before recognition
    OCR_MIN_DIMENSION: int = int(os.getenv("OCR_MIN_DIMENSION", "1200"))
    OCR_CONTRAST: float = float(os.getenv("OCR_CONTRAST", "1.5"))
    OCR_THRESHOLD: int = int(os.getenv("OCR_THRESHOLD", "128"))
    # Optional explicit path to the tesseract binary
    TESSERACT_CMD: Optional[str] = os.getenv("TESSERACT_CMD")

    # --- Storage ---
    STORAGE_PATH: str = os.getenv(
        "STORAGE_PATH", str(Path(__file__).resolve().parent / "data" / "timetable.json")
    )

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


config = Config()
