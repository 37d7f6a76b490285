from __future__ import annotations

import io

from flask import Flask, send_file

from ..common.responses import error_response
from ..container import Container
from .qr import render_card_qr


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/<student_id>/card.png", methods=["GET"], endpoint="student_card_qr")
    def student_card_qr(student_id: str):
        """QR code for the student's ID card; scanning it posts the payload to /api/attendance/scan."""
        try:
            student = container.student_service.get(student_id)
            buf = io.BytesIO(render_card_qr(student))
            return send_file(buf, mimetype="image/png", download_name=f"card_{student.student_id}.png")
        except Exception as e:
            return error_response(app, e)
