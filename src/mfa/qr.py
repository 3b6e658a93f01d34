"""QR rendering of enrollment URIs, for terminals and as PNG files.

Symbol encoding is done by the qrcode library; the URI is opaque here.
"""

from __future__ import annotations

import logging
from pathlib import Path

import qrcode
from qrcode.constants import ERROR_CORRECT_M

logger = logging.getLogger(__name__)

_DARK = "██"
_LIGHT = "  "


def _build(data: str, border: int) -> qrcode.QRCode:
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=border)
    qr.add_data(data)
    qr.make(fit=True)
    return qr


def render_ascii(data: str, border: int = 1) -> str:
    """Render ``data`` as text, two block characters per dark module."""
    matrix = _build(data, border).get_matrix()
    return "".join("".join(_DARK if cell else _LIGHT for cell in row) + "\n" for row in matrix)


def save_png(data: str, path: Path | str, border: int = 2) -> Path:
    """Write ``data`` as a PNG QR code and return the path written."""
    path = Path(path)
    img = _build(data, border).make_image(fill_color="black", back_color="white")
    img.save(str(path))
    logger.info("Saved QR code to %s", path)
    return path
