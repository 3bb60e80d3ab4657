"""
Configuration loader for the Scanning module.

Loads and validates configuration from config.yaml file.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from src.scanning.types import (
    ConfidenceConfig,
    ContourConfig,
    FilterConfig,
    OutputConfig,
    ScanConfig,
    SelectionConfig,
)

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

SUPPORTED_FORMATS = ("jpeg", "png", "webp")


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> ScanConfig:
    """
    Load scanning configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated ScanConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid or missing required fields.

    Example:
        >>> config = load_config()
        >>> print(config.contours.edge_threshold)
        100.0
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading scanning config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    try:
        config = _parse_config(raw_config)
        _validate_config(config)
        logger.info("Successfully loaded scanning configuration")
        return config
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> ScanConfig:
    """Parse raw dictionary into structured config objects."""
    return ScanConfig(
        filters=FilterConfig(
            blur_radius=int(raw["filters"]["blur_radius"]),
        ),
        contours=ContourConfig(
            edge_threshold=float(raw["contours"]["edge_threshold"]),
            min_contour_length=int(raw["contours"]["min_contour_length"]),
        ),
        selection=SelectionConfig(
            epsilon=float(raw["selection"]["epsilon"]),
            min_size_ratio=float(raw["selection"]["min_size_ratio"]),
            fallback_margin_ratio=float(raw["selection"]["fallback_margin_ratio"]),
            min_confidence=float(raw["selection"]["min_confidence"]),
        ),
        confidence=ConfidenceConfig(
            aspect_weight=float(raw["confidence"]["aspect_weight"]),
            size_weight=float(raw["confidence"]["size_weight"]),
            aspect_min=float(raw["confidence"]["aspect_min"]),
            aspect_max=float(raw["confidence"]["aspect_max"]),
            target_area_ratio=float(raw["confidence"]["target_area_ratio"]),
        ),
        output=OutputConfig(
            width=int(raw["output"]["width"]),
            height=int(raw["output"]["height"]),
            format=str(raw["output"]["format"]).lower(),
            quality=int(raw["output"]["quality"]),
            filename_prefix=str(raw["output"]["filename_prefix"]),
            interpolation=str(raw["output"]["interpolation"]),
        ),
    )


def _validate_config(config: ScanConfig) -> None:
    """
    Validate configuration values for logical consistency.

    Raises:
        ValueError: If any configuration value is invalid.
    """
    if config.filters.blur_radius < 1:
        raise ValueError("blur_radius must be at least 1")

    if not 0 <= config.contours.edge_threshold <= 255:
        raise ValueError("edge_threshold must be within [0, 255]")

    if config.contours.min_contour_length < 1:
        raise ValueError("min_contour_length must be at least 1")

    if config.selection.epsilon <= 0:
        raise ValueError("epsilon must be positive")

    for name in ("min_size_ratio", "fallback_margin_ratio"):
        value = getattr(config.selection, name)
        if not 0 < value <= 1:
            raise ValueError(f"{name} must be within (0, 1], got {value}")

    if config.selection.fallback_margin_ratio >= 0.5:
        raise ValueError("fallback_margin_ratio must be less than 0.5")

    if not 0 <= config.selection.min_confidence <= 100:
        raise ValueError("min_confidence must be within [0, 100]")

    conf = config.confidence
    if conf.aspect_weight < 0 or conf.size_weight < 0:
        raise ValueError("Confidence weights cannot be negative")

    if abs(conf.aspect_weight + conf.size_weight - 1.0) > 1e-6:
        raise ValueError(
            f"Confidence weights must sum to 1, got "
            f"{conf.aspect_weight} + {conf.size_weight}"
        )

    if conf.aspect_min <= 0 or conf.aspect_min >= conf.aspect_max:
        raise ValueError(
            f"aspect_min ({conf.aspect_min}) must be positive and less than "
            f"aspect_max ({conf.aspect_max})"
        )

    if not 0 < conf.target_area_ratio <= 1:
        raise ValueError("target_area_ratio must be within (0, 1]")

    if config.output.width < 1 or config.output.height < 1:
        raise ValueError("Output width and height must be at least 1")

    if not 0 <= config.output.quality <= 100:
        raise ValueError("Output quality must be within [0, 100]")

    if config.output.format not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Invalid output format: {config.output.format}. "
            f"Must be one of {list(SUPPORTED_FORMATS)}"
        )

    valid_interpolations = ["linear", "cubic", "nearest", "lanczos"]
    if config.output.interpolation not in valid_interpolations:
        raise ValueError(
            f"Invalid interpolation: {config.output.interpolation}. "
            f"Must be one of {valid_interpolations}"
        )

    logger.debug("Configuration validation passed")
