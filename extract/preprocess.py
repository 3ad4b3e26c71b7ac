"""
Image normalization for OCR.
Upscales small photos, then grayscale -> contrast stretch -> binarize -> median denoise.
"""

import cv2
import numpy as np

from config import config
from exceptions import UnsupportedFormatError


def decode_image(data: bytes) -> np.ndarray:
    """Decode raw file bytes (PNG, JPEG, ...) into a BGR pixel buffer."""
    buf = np.frombuffer(data or b"", dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
    if img is None:
        raise UnsupportedFormatError("Could not decode image. Upload a JPEG or PNG file.")
    return img


def upscale_small(image: np.ndarray, min_dimension: int) -> np.ndarray:
    h, w = image.shape[:2]
    if w >= min_dimension and h >= min_dimension:
        return image
    scale = min_dimension / float(min(w, h))
    size = (int(round(w * scale)), int(round(h * scale)))
    return cv2.resize(image, size, interpolation=cv2.INTER_CUBIC)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Luma 0.299R + 0.587G + 0.114B as float; input is BGR or single channel."""
    if image.ndim == 2:
        return image.astype(np.float64)
    b = image[..., 0].astype(np.float64)
    g = image[..., 1].astype(np.float64)
    r = image[..., 2].astype(np.float64)
    return 0.299 * r + 0.587 * g + 0.114 * b


def normalize_image(
    image: np.ndarray,
    min_dimension: int = None,
    contrast: float = None,
    threshold: int = None,
) -> np.ndarray:
    """
    Clean image for OCR:
    - upscale so the short side reaches `min_dimension`
    - grayscale
    - linear contrast stretch around mid-gray
    - binarize at `threshold`
    - 3x3 median filter (edges replicated)

    Returns a new single-channel uint8 image; the input is left untouched.
    """
    min_dimension = min_dimension or config.OCR_MIN_DIMENSION
    contrast = config.OCR_CONTRAST if contrast is None else contrast
    threshold = config.OCR_THRESHOLD if threshold is None else threshold

    scaled = upscale_small(image, min_dimension)
    gray = to_grayscale(scaled)
    stretched = np.clip(contrast * (gray - 128.0) + 128.0, 0, 255)
    binary = np.where(stretched > threshold, 255, 0).astype(np.uint8)
    # medianBlur replicates border pixels
    return cv2.medianBlur(binary, 3)
