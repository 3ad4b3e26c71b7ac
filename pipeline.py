"""
Extraction orchestrator.

Chooses the extraction path for an uploaded timetable and sequences it:

- CSV            -> CSV parser (authoritative, no fallback)
- image/PDF + AI -> Gemini vision, falling back to OCR + heuristics on failure
- image          -> multi-pass OCR -> heuristic parser

An empty result is returned, not raised: callers show the OCR transcript so
the user can retry with a clearer image or a CSV.
"""

from dataclasses import dataclass, field
from datetime import date as Date
from typing import Callable, List, Optional

from ai import vision_extractor
from exceptions import TimetableExtractionError, UnsupportedFormatError
from extract import ocr_extractor
from logging_config import configure_logging
from parser.csv_timetable import parse_csv_timetable
from parser.models import DailyPrayerTime, ExtractionProgress
from parser.timetable import parse_prayer_timetable
from utils.file_validator import detect_file_kind, guess_mime_type
from utils.progress import ProgressReporter

logger = configure_logging(name="pipeline")

AI_FALLBACK_WARNING = "AI extraction failed, trying traditional OCR..."

# share of the remaining progress range given to each OCR-path stage
OCR_RECOGNITION_SHARE = 0.7
OCR_PARSING_SHARE = 0.8
AI_REMOTE_SHARE = 0.9


@dataclass
class ExtractionResult:
    days: List[DailyPrayerTime]
    method: str
    transcript: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.days


def _decode_csv(data: bytes) -> str:
    return data.decode("utf-8-sig", errors="replace")


def _run_csv(data: bytes, progress: ProgressReporter) -> ExtractionResult:
    progress.report("Reading CSV file...", 0.0)
    text = _decode_csv(data)
    progress.report("Parsing CSV data...", 0.5)
    days = parse_csv_timetable(text)
    return ExtractionResult(days=days, method="csv")


def _run_ocr(
    data: bytes,
    filename: Optional[str],
    content_type: Optional[str],
    progress: ProgressReporter,
    today: Optional[Date],
) -> ExtractionResult:
    base = progress.last
    remaining = 1.0 - base
    recognition_end = base + remaining * OCR_RECOGNITION_SHARE

    progress.report("Extracting text from image...", base)
    transcript = ocr_extractor.extract_text(
        data,
        filename=filename,
        content_type=content_type,
        on_progress=progress.stage(base, recognition_end),
    )

    progress.report("Parsing prayer times...", base + remaining * OCR_PARSING_SHARE)
    days = parse_prayer_timetable(transcript, today=today)
    return ExtractionResult(days=days, method="ocr", transcript=transcript)


def run_extraction(
    data: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    on_progress: Optional[Callable[[ExtractionProgress], None]] = None,
    today: Optional[Date] = None,
) -> ExtractionResult:
    """Extract daily prayer times from one uploaded file.

    Raises UnsupportedFormatError / RecognitionUnavailableError when no path
    can handle the input. AI failures are downgraded to warnings, which ride
    on the raised error if the OCR fallback fails too.
    """
    progress = ProgressReporter(on_progress)
    progress.report("Initializing...", 0.0)

    kind = detect_file_kind(filename, content_type)
    logger.info(f"[PIPELINE] file={filename!r} type={content_type!r} kind={kind}")

    if kind == "csv":
        result = _run_csv(data, progress)
    elif kind in ("image", "pdf"):
        warnings = []
        result = None
        if vision_extractor.is_ai_extraction_available():
            progress.report("Using AI vision to extract timetable...", 0.0)
            try:
                days = vision_extractor.extract_with_ai(
                    data,
                    guess_mime_type(filename, content_type),
                    on_progress=progress.stage(0.0, AI_REMOTE_SHARE),
                )
                progress.report("Validating AI results...", AI_REMOTE_SHARE)
                result = ExtractionResult(days=days, method="ai")
            except Exception as e:
                logger.warning(f"[PIPELINE] AI extraction failed, falling back to OCR: {e}")
                warnings.append(AI_FALLBACK_WARNING)

        if result is None:
            try:
                result = _run_ocr(data, filename, content_type, progress, today)
            except TimetableExtractionError as e:
                e.warnings[:0] = warnings
                raise
        result.warnings.extend(warnings)
    else:
        raise UnsupportedFormatError(
            "Unsupported file type. Upload a JPEG/PNG image, a PDF or a CSV file."
        )

    if result.is_empty:
        logger.warning(f"[PIPELINE] No prayer times extracted (method={result.method})")
        progress.report("Could not extract prayer times", 1.0)
    else:
        logger.info(f"[PIPELINE] Extracted {len(result.days)} days via {result.method}")
        progress.report("Extraction complete!", 1.0)
    return result
