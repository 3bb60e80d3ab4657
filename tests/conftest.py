"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import cv2
import numpy as np
import pytest


def make_rgba(height, width, color=(0, 0, 0, 255)):
    """Create a uniform RGBA raster."""
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:, :] = color
    return image


@pytest.fixture
def receipt_on_black():
    """
    White axis-aligned rectangle on a black 400x400 background.

    Returns the RGBA image and the true corners [TL, TR, BR, BL].
    """
    image = make_rgba(400, 400)
    cv2.rectangle(image, (60, 60), (339, 339), (255, 255, 255, 255), thickness=-1)
    corners = np.array([[60, 60], [339, 60], [339, 339], [60, 339]], dtype=np.float32)
    return image, corners


@pytest.fixture
def skewed_receipt():
    """
    Bright skewed quadrilateral on a dark 480x640 background, as a camera
    would see a receipt lying at an angle.
    """
    image = make_rgba(480, 640, (30, 30, 30, 255))
    corners = np.array([[150, 70], [470, 100], [500, 420], [120, 400]], dtype=np.int32)
    cv2.fillPoly(image, [corners], (240, 240, 235, 255))
    return image, corners.astype(np.float32)


@pytest.fixture
def small_square_on_black():
    """400x400 image containing a 40x40 white square, too small to be a receipt."""
    image = make_rgba(400, 400)
    cv2.rectangle(image, (180, 180), (219, 219), (255, 255, 255, 255), thickness=-1)
    return image


@pytest.fixture
def horizontal_ramp():
    """64x48 RGBA image whose color channels equal 4 * x."""
    ramp = (np.arange(64, dtype=np.uint16) * 4).astype(np.uint8)
    image = make_rgba(48, 64)
    image[:, :, 0] = ramp[None, :]
    image[:, :, 1] = ramp[None, :]
    image[:, :, 2] = ramp[None, :]
    return image
