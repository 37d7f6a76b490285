"""QR codes printed on student ID cards.

The payload is the same JSON the scanner sends back to ``/api/attendance/scan``.
"""

from __future__ import annotations

import io
import json
from typing import BinaryIO, Optional

import qrcode
from PIL import Image, UnidentifiedImageError

from ..core.exceptions import ValidationError
from .model import Student


def card_payload(student: Student) -> str:
    return json.dumps(
        {
            "studentId": student.student_id,
            "cardId": student.card_id,
            "name": student.full_name,
            "admissionNo": student.admission_no,
            "srNo": student.serial_no,
            "rollNo": student.roll_no,
        },
        ensure_ascii=False,
    )


def render_card_qr(student: Student) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=2,
    )
    qr.add_data(card_payload(student))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_card_image(stream: BinaryIO) -> Optional[str]:
    """Decode the first QR code found in an uploaded photo of a card."""

    # pyzbar needs the native zbar library at import time.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except UnidentifiedImageError:
        raise ValidationError("Uploaded file is not an image")
    decoded = pyzbar_decode(img)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip()
