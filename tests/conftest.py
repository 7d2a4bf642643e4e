"""Shared test fixtures."""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from glyphgrid.constants import IMAGE_ASCII_CHARS


def solid_rgba(width: int, height: int, value: int = 255, alpha: int = 255) -> np.ndarray:
    """uint8 [H,W,4] filled with one grey value."""
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[..., :3] = value
    arr[..., 3] = alpha
    return arr


def png_bytes(arr: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(arr).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def symbols() -> str:
    return IMAGE_ASCII_CHARS


@pytest.fixture
def max_level(symbols) -> int:
    return len(symbols) - 1


@pytest.fixture
def white_bitmap() -> np.ndarray:
    return solid_rgba(40, 40, 255)


@pytest.fixture
def white_png() -> bytes:
    return png_bytes(solid_rgba(40, 40, 255))


@pytest.fixture
def gradient_bitmap() -> np.ndarray:
    """Left-to-right black to white ramp, 64x8."""
    ramp = np.linspace(0, 255, 64).astype(np.uint8)
    arr = np.empty((8, 64, 4), dtype=np.uint8)
    arr[..., 0] = ramp[None, :]
    arr[..., 1] = ramp[None, :]
    arr[..., 2] = ramp[None, :]
    arr[..., 3] = 255
    return arr
