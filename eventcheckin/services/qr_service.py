"""
Rendering of check-in payloads into scannable QR images.

Images are never stored: they are a pure function of the payload and are
regenerated on every read.
"""

import base64
import json
import logging
from io import BytesIO
from typing import Union

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

from eventcheckin.core.config import settings

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def encode_payload(payload: Union[dict, str]) -> str:
    """Serialize a payload to the exact text placed in the QR image."""
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def render_scannable(payload: Union[dict, str]) -> bytes:
    """Render a payload as PNG bytes."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION_LEVELS.get(settings.QR_ERROR_CORRECTION.upper(), ERROR_CORRECT_M),
        box_size=settings.QR_BOX_SIZE,
        border=settings.QR_BORDER,
    )
    qr.add_data(encode_payload(payload))
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_scannable_data_url(payload: Union[dict, str]) -> str:
    """Render a payload as a base64 PNG data URL, ready to embed in JSON."""
    encoded = base64.b64encode(render_scannable(payload)).decode("ascii")
    return f"data:image/png;base64,{encoded}"
