from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import coerce_datetime, parse_iso_date
from ..common.responses import error_response, ok
from ..container import Container
from .service import history_to_dict, installment_to_dict, invoice_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/<student_id>/fees", methods=["GET"], endpoint="student_fees")
    def student_fees(student_id: str):
        try:
            today_s = request.args.get("today")
            today = parse_iso_date(today_s) if today_s else None
        except ValueError:
            return jsonify({"success": False, "message": "today must be YYYY-MM-DD"}), 400

        try:
            history = container.fee_ledger_service.student_history(student_id, today=today)
            return ok(history_to_dict(history))
        except Exception as e:
            return error_response(app, e)

    @app.route("/api/invoices/<invoice_id>/payments", methods=["POST"], endpoint="record_payment")
    def record_payment(invoice_id: str):
        if container.payment_service is None:
            return jsonify({"success": False, "message": "Payments are recorded by the remote data service"}), 501

        data = request.get_json(silent=True) or {}
        raw_date = data.get("paymentDate") or data.get("payment_date")
        payment_date = coerce_datetime(raw_date)
        if raw_date and payment_date is None:
            return jsonify({"success": False, "message": "paymentDate must be an ISO date"}), 400

        try:
            result = container.payment_service.record_payment(
                invoice_id=invoice_id,
                amount=data.get("amount"),
                payment_method=data.get("paymentMethod") or data.get("payment_method"),
                payment_date=payment_date,
                collected_by_name=str(data.get("collectedByName") or data.get("collected_by_name") or ""),
                notes=str(data.get("notes") or ""),
                receipt_no=str(data.get("receiptNo") or data.get("receipt_no") or ""),
            )
            return ok(
                {
                    "message": "Payment recorded",
                    "invoice": invoice_to_dict(result.invoice),
                    "installment": installment_to_dict(result.installment),
                },
                201,
            )
        except Exception as e:
            return error_response(app, e)
