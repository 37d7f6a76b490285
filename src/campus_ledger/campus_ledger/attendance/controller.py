from __future__ import annotations

import csv
import io
from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.responses import error_response, ok
from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import AttendanceType
from ..core.exceptions import ValidationError
from ..reports.service import REPORT_CSV_FIELDS
from ..students.qr import decode_card_image
from .schema import bulk_request_from_json, scan_request_from_json
from .service import ScanResult, record_to_dict


def register(app: Flask, container: Container) -> None:
    def _scan_response(result: ScanResult):
        student = result.student
        return ok(
            {
                "message": "Attendance updated" if result.is_update else "Attendance marked",
                "isUpdate": result.is_update,
                "student": {
                    "id": student.student_id,
                    "fullName": student.full_name,
                    "admissionNo": student.admission_no,
                    "rollNo": student.roll_no,
                },
                "attendance": record_to_dict(result.record),
            },
            200 if result.is_update else 201,
        )

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="attendance_scan")
    def attendance_scan():
        try:
            scan = scan_request_from_json(request.get_json(silent=True))
            return _scan_response(container.attendance_service.scan(scan))
        except Exception as e:
            return error_response(app, e)

    @app.route("/api/attendance/scan/image", methods=["POST"], endpoint="attendance_scan_image")
    def attendance_scan_image():
        """Scan from an uploaded photo of the card's QR code (multipart field ``image``)."""
        upload = request.files.get("image")
        if upload is None:
            return jsonify({"success": False, "message": "Image file is required"}), 400

        try:
            card_value = decode_card_image(upload.stream)
            if not card_value:
                raise ValidationError("No QR code found in the image")

            payload = dict(request.form.items())
            payload["cardId"] = card_value
            scan = scan_request_from_json(payload)
            return _scan_response(container.attendance_service.scan(scan))
        except Exception as e:
            return error_response(app, e)

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    def attendance_bulk():
        try:
            bulk = bulk_request_from_json(request.get_json(silent=True))
            results = container.attendance_service.mark_bulk(bulk)
            updated = sum(1 for r in results if r.is_update)
            return ok(
                {
                    "message": f"Attendance marked for {len(results)} students",
                    "created": len(results) - updated,
                    "updated": updated,
                    "records": [{**record_to_dict(r.record), "isUpdate": r.is_update} for r in results],
                }
            )
        except Exception as e:
            return error_response(app, e)

    def _report_args():
        today = now_local().date()
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        try:
            start = parse_iso_date(start_s) if start_s else today - timedelta(days=DEFAULT_REPORT_DAYS)
            end = parse_iso_date(end_s) if end_s else today
        except ValueError:
            raise ValidationError("start/end must be YYYY-MM-DD")

        type_s = request.args.get("attendanceType")
        try:
            attendance_type = AttendanceType(type_s) if type_s else None
        except ValueError:
            raise ValidationError("attendanceType must be manual or digital")

        return dict(
            start=start,
            end=end,
            student_id=request.args.get("studentId") or None,
            course_id=request.args.get("courseId") or None,
            attendance_type=attendance_type,
        )

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    def attendance_report():
        try:
            args = _report_args()
            data = container.attendance_report_service.build_attendance_report(**args)
            return ok(
                {
                    "start": args["start"].isoformat(),
                    "end": args["end"].isoformat(),
                    "summary": data.summary,
                    "byStudent": data.by_student,
                    "byDate": data.by_date,
                    "records": data.rows,
                }
            )
        except Exception as e:
            return error_response(app, e)

    @app.route("/api/attendance/report.csv", methods=["GET"], endpoint="attendance_report_csv")
    def attendance_report_csv():
        try:
            args = _report_args()
            data = container.attendance_report_service.build_attendance_report(**args)
        except Exception as e:
            return error_response(app, e)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_CSV_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        filename = f"attendance_report_{args['start'].strftime('%Y%m%d')}_{args['end'].strftime('%Y%m%d')}.csv"
        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
