import base64
import io
import json

import qrcode
from qrcode.constants import ERROR_CORRECT_M


def encode_qr_png(data: bytes, box_size: int = 8, border: int = 4) -> bytes:
    """Render ``data`` as a PNG QR code (medium error correction)."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=box_size, border=border)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def summary_qr_base64(summary: dict) -> str:
    payload = json.dumps(summary, separators=(",", ":"), default=str).encode("utf-8")
    return base64.b64encode(encode_qr_png(payload)).decode("ascii")
