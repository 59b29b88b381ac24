"""Helpers for decoding fetched bytes into Qt images with a Pillow fallback."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError
from PIL.ImageQt import ImageQt
from PySide6.QtGui import QImage

_LOGGER = logging.getLogger(__name__)


def decode_qimage(data: bytes) -> Optional[QImage]:
    """Return a :class:`QImage` decoded from *data*, or ``None``.

    Qt's own decoders handle the common web formats.  Anything Qt refuses is
    handed to Pillow, which also honours EXIF orientation.
    """

    if not data:
        return None
    image = QImage.fromData(data)
    if not image.isNull():
        return image
    return _load_with_pillow(data)


def _load_with_pillow(data: bytes) -> Optional[QImage]:
    try:
        with Image.open(BytesIO(data)) as pil_image:
            pil_image = ImageOps.exif_transpose(pil_image)
            converted = pil_image.convert("RGBA")
            # ``ImageQt`` keeps a reference to the Pillow buffer; copy so the
            # QImage owns its pixels once the context manager closes.
            image = QImage(ImageQt(converted)).copy()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        _LOGGER.debug("Pillow could not decode %d bytes: %s", len(data), exc)
        return None
    if image.isNull():
        return None
    return image


__all__ = ["decode_qimage"]
