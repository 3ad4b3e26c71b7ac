"""
Multi-pass OCR with Tesseract.

Pass 1 reads the normalized (binarized) image, pass 2 the untouched original;
the longer transcript wins. Each pass runs inside its own RecognitionEngine
scope so the engine is always shut down, even when recognition raises.
"""

from typing import Callable, Optional

import cv2
import numpy as np
import pytesseract

from config import config
from exceptions import RecognitionUnavailableError, UnsupportedFormatError
from extract.preprocess import decode_image, normalize_image
from logging_config import configure_logging
from parser.models import ExtractionProgress

logger = configure_logging(name="ocr")

ProgressCallback = Callable[[ExtractionProgress], None]

# Only characters that occur in timetables; everything else is a misread
CHAR_WHITELIST = "0123456789:ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz|-/[]()."
TESSERACT_CONFIG = f"-c tessedit_char_whitelist={CHAR_WHITELIST} -c preserve_interword_spaces=1"

PDF_UNSUPPORTED_MESSAGE = (
    "PDF extraction requires conversion to image. Please convert your PDF to "
    "an image (JPEG/PNG) and upload again."
)


class RecognitionEngine:
    """Scoped Tesseract handle.

    Use as a context manager; `terminate()` runs on every exit path.
    """

    def __init__(self, language: Optional[str] = None, on_progress: Optional[ProgressCallback] = None):
        self.language = language or config.OCR_LANGUAGE
        self.on_progress = on_progress
        self.active = False

    def __enter__(self) -> "RecognitionEngine":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.terminate()
        return False

    def _report(self, status: str, progress: float):
        if self.on_progress:
            self.on_progress(ExtractionProgress(status, progress))

    def start(self):
        self._report("Initializing OCR...", 0.0)
        if config.TESSERACT_CMD:
            pytesseract.pytesseract.tesseract_cmd = config.TESSERACT_CMD
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            raise RecognitionUnavailableError(
                "Text recognition engine (tesseract) is not installed."
            ) from e
        self.active = True
        logger.debug(f"[OCR] Tesseract {version} ready (lang={self.language})")
        self._report("OCR engine ready", 0.1)

    def recognize(self, image: np.ndarray) -> str:
        if not self.active:
            raise RuntimeError("RecognitionEngine used outside of its scope")
        self._report("Recognizing text...", 0.2)
        text = pytesseract.image_to_string(image, lang=self.language, config=TESSERACT_CONFIG)
        self._report("Recognition complete", 1.0)
        return text

    def terminate(self):
        if self.active:
            logger.debug("[OCR] Engine terminated")
        self.active = False


def _pass_progress(on_progress: Optional[ProgressCallback], label: str, start: float, span: float):
    if on_progress is None:
        return None

    def report(p: ExtractionProgress):
        on_progress(ExtractionProgress(f"{label}: {p.status}", start + p.progress * span))

    return report


def extract_text_with_multi_pass(
    data: bytes,
    on_progress: Optional[ProgressCallback] = None,
    engine_factory: Callable[..., RecognitionEngine] = RecognitionEngine,
) -> str:
    """Run OCR on the normalized and the original image; return the longer text."""
    if on_progress:
        on_progress(ExtractionProgress("Starting multi-pass OCR...", 0.0))

    original = decode_image(data)

    # Pass 1: preprocessed
    with engine_factory(on_progress=_pass_progress(on_progress, "Pass 1/2", 0.0, 0.5)) as engine:
        normalized = normalize_image(original)
        text1 = engine.recognize(normalized)
    logger.info(f"[OCR] Pass 1 (normalized): {len(text1)} chars")

    # Pass 2: original image, sometimes better on clean scans
    if on_progress:
        on_progress(ExtractionProgress("Pass 2/2: Processing original image...", 0.5))
    with engine_factory(on_progress=_pass_progress(on_progress, "Pass 2/2", 0.5, 0.5)) as engine:
        rgb = cv2.cvtColor(original, cv2.COLOR_BGR2RGB)
        text2 = engine.recognize(rgb)
    logger.info(f"[OCR] Pass 2 (original): {len(text2)} chars")

    return select_longest_transcript(text1, text2)


def select_longest_transcript(text1: str, text2: str) -> str:
    # TODO: score by prayer-name and time-token matches instead of raw length
    return text1 if len(text1) > len(text2) else text2


def _is_pdf(filename: Optional[str], content_type: Optional[str]) -> bool:
    return "pdf" in (content_type or "").lower() or (filename or "").lower().endswith(".pdf")


def extract_text(
    data: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Pick the OCR method for the file type. PDFs are not supported here."""
    if _is_pdf(filename, content_type):
        raise UnsupportedFormatError(PDF_UNSUPPORTED_MESSAGE)
    return extract_text_with_multi_pass(data, on_progress)
