# glyphgrid/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO, Optional, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import U8Image

"""
Image I/O helpers: decoded source images (RGBA in sRGB) with explicit release,
and PNG output.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]

ImageSource = Union[str, Path, bytes, BinaryIO]


class ImageDecodeError(ValueError):
    """The source could not be decoded as an image."""


class SourceImage:
    """
    Decoded source bitmap owned by the canvas controller.

    bitmap : uint8 [H,W,4] RGBA
    image  : the Pillow image it was read from

    close() releases both and is safe to call more than once. Also usable as
    a context manager.
    """

    def __init__(self, image: Image.Image) -> None:
        self.image: Optional[Image.Image] = image
        self.bitmap: Optional[U8Image] = np.array(image, dtype=np.uint8)
        self.width: int = int(image.width)
        self.height: int = int(image.height)

    @property
    def closed(self) -> bool:
        return self.bitmap is None

    def close(self) -> None:
        if self.image is not None:
            self.image.close()
        self.image = None
        self.bitmap = None

    def __enter__(self) -> "SourceImage":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"SourceImage({self.width}x{self.height}, {state})"


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def load_source_image(source: ImageSource) -> SourceImage:
    """
    Decode a path, raw bytes or binary file object into a SourceImage.

    Raises ImageDecodeError when Pillow cannot read it.
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        with Image.open(source) as im0:
            im0.load()
            im = _convert_to_srgb_rgba(im0)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
    ) as exc:
        raise ImageDecodeError(f"cannot decode image: {exc}") from exc
    return SourceImage(im)


def source_from_array(rgba: np.ndarray) -> SourceImage:
    """Wrap an in-memory uint8 RGB or RGBA array."""
    arr = np.asarray(rgba, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[-1] not in (3, 4):
        raise ImageDecodeError(f"expected (H,W,3|4) array, got {arr.shape}")
    return SourceImage(Image.fromarray(arr).convert("RGBA"))


def save_png(path: Path, image: Image.Image) -> Path:
    """Save a Pillow image as PNG; forces a .png suffix."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    image.save(path, format="PNG")
    return path


__all__ = [
    "ImageDecodeError",
    "SourceImage",
    "load_source_image",
    "source_from_array",
    "save_png",
]
