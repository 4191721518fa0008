from __future__ import annotations

import base64
import io
import logging

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError

from medivoice.errors import EncodingFailure

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/png;base64,"


class LocatorEncoder:
    """Encode an absolute address as a QR code PNG data URL."""

    def __init__(
        self,
        box_size: int = 10,
        border: int = 4,
        error_correction: int = ERROR_CORRECT_M,
    ) -> None:
        self.box_size = box_size
        self.border = border
        self.error_correction = error_correction

    def encode(self, address: str) -> str:
        if not address or not address.strip():
            raise EncodingFailure("Cannot encode an empty address")

        qr = qrcode.QRCode(
            error_correction=self.error_correction,
            box_size=self.box_size,
            border=self.border,
        )
        try:
            qr.add_data(address)
            qr.make(fit=True)
            image = qr.make_image(fill_color="black", back_color="white")
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
        except (DataOverflowError, ValueError, OSError) as e:
            logger.error(f"QR encoding failed for address of length {len(address)}: {e}")
            raise EncodingFailure(f"Could not encode address: {e}") from e

        return DATA_URL_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")
