"""
I/O Utilities

Image decoding, encoding and file naming for receipt uploads.
Rasters are exchanged as (H, W, 4) uint8 RGBA arrays; OpenCV's BGR(A)
channel order stays inside this module.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from src.common.exceptions import ImageLoadError, UnsupportedFormatError
from src.common.types import ImageBuffer

logger = logging.getLogger(__name__)

# format name -> (file extension, MIME type)
OUTPUT_FORMATS = {
    "jpeg": (".jpg", "image/jpeg"),
    "png": (".png", "image/png"),
    "webp": (".webp", "image/webp"),
}

# Animated formats are uploaded as-is rather than cropped
_NON_CROPPABLE_IMAGE_TYPES = {"image/gif"}


def needs_cropping(content_type: Optional[str]) -> bool:
    """
    Decide whether an upload goes through the crop editor.

    Still images do; GIFs, PDFs and anything else are attached unchanged.

    Example:
        >>> needs_cropping("image/png"), needs_cropping("application/pdf")
        (True, False)
    """
    if not content_type:
        return False
    content_type = content_type.split(";")[0].strip().lower()
    return content_type.startswith("image/") and content_type not in _NON_CROPPABLE_IMAGE_TYPES


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode an encoded image (JPEG, PNG, WebP, ...) into an RGBA raster.

    Images without alpha are rotated according to their EXIF orientation,
    matching how browsers and photo viewers display them.

    Raises:
        ImageLoadError: If the bytes cannot be decoded.
    """
    if not data:
        raise ImageLoadError("Cannot decode image: no data")

    buffer = np.frombuffer(data, dtype=np.uint8)
    decoded = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if decoded is None:
        raise ImageLoadError("Cannot decode image: unsupported or corrupt data")

    # IMREAD_UNCHANGED skips EXIF orientation; only sources with alpha need it
    if decoded.ndim == 2 or decoded.shape[2] != 4:
        decoded = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
        if decoded is None:
            raise ImageLoadError("Cannot decode image: unsupported or corrupt data")

    if decoded.dtype == np.uint16:
        decoded = (decoded // 257).astype(np.uint8)

    if decoded.ndim == 3 and decoded.shape[2] == 3:
        decoded = cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)
    elif decoded.ndim == 3 and decoded.shape[2] == 4:
        decoded = cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGBA)

    try:
        rgba = ImageBuffer(data=decoded).to_rgba()
    except ValueError as e:
        raise ImageLoadError(f"Cannot decode image: {e}") from e

    logger.debug(f"Decoded {rgba.shape[1]}x{rgba.shape[0]} image")
    return rgba


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as an RGBA raster.

    Raises:
        FileNotFoundError: If the file does not exist.
        ImageLoadError: If the file cannot be decoded.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Could not read image at: {path}")

    try:
        return decode_image(path.read_bytes())
    except ImageLoadError as e:
        raise ImageLoadError(f"{e} ({path})") from e


def encode_image(image: np.ndarray, fmt: str = "jpeg", quality: int = 90) -> bytes:
    """
    Encode an RGBA (or grayscale/RGB) raster.

    JPEG drops the alpha channel; PNG and WebP keep it.

    Args:
        image: Raster to encode.
        fmt: One of "jpeg", "png", "webp".
        quality: 0-100. JPEG/WebP quality; for PNG it is mapped onto
            compression level (higher quality, less compression).

    Returns:
        Encoded bytes.

    Raises:
        UnsupportedFormatError: If fmt is not supported.
        ValueError: If the raster is invalid.
    """
    fmt = fmt.lower()
    if fmt not in OUTPUT_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported output format: {fmt}. Must be one of {list(OUTPUT_FORMATS)}"
        )

    rgba = ImageBuffer(data=image).to_rgba()
    extension = OUTPUT_FORMATS[fmt][0]

    if fmt == "jpeg":
        bgr = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)
        ok, encoded = cv2.imencode(extension, bgr, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    elif fmt == "webp":
        bgra = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)
        ok, encoded = cv2.imencode(extension, bgra, [cv2.IMWRITE_WEBP_QUALITY, int(quality)])
    else:
        bgra = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)
        compression = int(round(9 * (100 - int(quality)) / 100))
        ok, encoded = cv2.imencode(extension, bgra, [cv2.IMWRITE_PNG_COMPRESSION, compression])

    if not ok:
        raise UnsupportedFormatError(f"OpenCV could not encode image as {fmt}")

    return encoded.tobytes()


def output_filename(
    prefix: str = "receipt-cropped",
    fmt: str = "jpeg",
    now: Optional[datetime] = None,
) -> str:
    """
    Build a timestamped file name for an accepted crop.

    Example:
        >>> output_filename(now=datetime(2024, 3, 5, 14, 7, 9, 120000, tzinfo=timezone.utc))
        'receipt-cropped-2024-03-05T14-07-09-120Z.jpg'
    """
    fmt = fmt.lower()
    if fmt not in OUTPUT_FORMATS:
        raise UnsupportedFormatError(f"Unsupported output format: {fmt}")

    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S") + f"-{now.microsecond // 1000:03d}Z"
    return f"{prefix}-{stamp}{OUTPUT_FORMATS[fmt][0]}"


def save_image(
    image: np.ndarray, file_path: Path, fmt: str = "jpeg", quality: int = 90
) -> Path:
    """Encode and write an image, creating parent directories."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(encode_image(image, fmt, quality))
    logger.info(f"Saved {fmt} image to {file_path}")
    return file_path
