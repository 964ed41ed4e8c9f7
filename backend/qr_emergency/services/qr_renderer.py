"""
QR code rendering. Wraps the ``qrcode`` library; the backend only needs
"URL in, PNG bytes out".
"""
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M


class QRRenderer:

    def __init__(self, box_size: int = 10, border: int = 1):
        self.box_size = box_size
        self.border = border

    def render(self, url: str) -> bytes:
        qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECT_M, box_size=self.box_size, border=self.border)
        qr.add_data(url)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
