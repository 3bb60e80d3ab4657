"""
Command-line receipt cropper.

Usage:
    receipt-crop photo.jpg
    receipt-crop photo.jpg -o cropped.jpg --corners 40,30,610,25,620,880,35,890
    receipt-crop photo.jpg --detect-only
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from src.scanning.geometric_validator import is_within_bounds
from src.scanning.processor import DocumentScanner
from src.scanning.types import (
    ImageLoadError,
    ProcessingError,
    Quadrilateral,
    UnsupportedFormatError,
)
from src.utils.io import load_image, output_filename, save_image
from src.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_corners(value: str) -> Quadrilateral:
    """
    Parse "x1,y1,x2,y2,x3,y3,x4,y4" (TL, TR, BR, BL) into a Quadrilateral.

    Raises:
        argparse.ArgumentTypeError: If the value is not 8 numbers.
    """
    try:
        coords = [float(v) for v in value.split(",")]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Corners must be numbers: {value}") from e

    if len(coords) != 8:
        raise argparse.ArgumentTypeError(
            f"Expected 8 comma-separated numbers (TL, TR, BR, BL), got {len(coords)}"
        )

    pairs = [coords[i : i + 2] for i in range(0, 8, 2)]
    return Quadrilateral.from_numpy(pairs)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="receipt-crop",
        description="Detect a receipt in a photo and crop it to an upright page.",
    )
    parser.add_argument("input", type=Path, help="Input photo")
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output file (default: timestamped name next to the input)",
    )
    parser.add_argument(
        "--corners", type=parse_corners, default=None,
        help="Override outline: x1,y1,x2,y2,x3,y3,x4,y4 in TL, TR, BR, BL order",
    )
    parser.add_argument("--width", type=int, default=None, help="Output width")
    parser.add_argument("--height", type=int, default=None, help="Output height")
    parser.add_argument("--format", default=None, help="jpeg, png or webp")
    parser.add_argument("--quality", type=int, default=None, help="Encoding quality 0-100")
    parser.add_argument("--config", type=Path, default=None, help="Config YAML")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument(
        "--detect-only", action="store_true",
        help="Print the detected outline as JSON and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        setup_logging(args.log_level)
        scanner = DocumentScanner(config_path=args.config)
        image = load_image(args.input)
        result = scanner.detect(image)

        if args.detect_only:
            quad = result.quadrilateral
            print(
                json.dumps(
                    {
                        "width": result.width,
                        "height": result.height,
                        "confidence": round(result.confidence, 2),
                        "quadrilateral": None if quad is None else quad.to_numpy().tolist(),
                    }
                )
            )
            return 0

        quad = args.corners or scanner.initial_quadrilateral(result)
        if args.corners is not None and not is_within_bounds(quad, result.width, result.height):
            logger.warning("Corners outside the image were clamped to its bounds")
            for role in range(4):
                quad = scanner.update_corner(
                    quad, role, quad.corner(role), result.width, result.height
                )

        fmt = (args.format or scanner.config.output.format).lower()
        quality = scanner.config.output.quality if args.quality is None else args.quality
        rectified = scanner.rectify(result.image, quad, args.width, args.height)

        output = args.output or args.input.parent / output_filename(
            scanner.config.output.filename_prefix, fmt
        )
        save_image(rectified, output, fmt, quality)
        print(output)
        return 0

    except (FileNotFoundError, ImageLoadError, ProcessingError, UnsupportedFormatError) as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
