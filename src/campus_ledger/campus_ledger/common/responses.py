from __future__ import annotations

from flask import Flask, jsonify

from ..core.exceptions import DataServiceError, DomainError, ImmutableRecordError, NotFoundError, ValidationError


def ok(payload: dict, status: int = 200):
    return jsonify({"success": True, **payload}), status


def error_response(app: Flask, e: Exception):
    """Map domain errors to JSON responses; anything unexpected is logged and hidden."""

    if isinstance(e, NotFoundError):
        return jsonify({"success": False, "message": str(e)}), 404
    if isinstance(e, (ValidationError, ImmutableRecordError)):
        return jsonify({"success": False, "message": str(e)}), 400
    if isinstance(e, DataServiceError):
        app.logger.warning("Data service unavailable: %s", e)
        return jsonify({"success": False, "message": "Data service unavailable"}), 502
    if isinstance(e, DomainError):
        return jsonify({"success": False, "message": str(e)}), 400

    app.logger.exception("Unhandled error")
    return jsonify({"success": False, "message": "Internal server error"}), 500
