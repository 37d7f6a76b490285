from __future__ import annotations

import io
import json
from dataclasses import replace

import pytest

from src.campus_ledger.campus_ledger.core.exceptions import NotFoundError, ValidationError
from src.campus_ledger.campus_ledger.students.qr import card_payload, decode_card_image, render_card_qr


@pytest.mark.parametrize("value", ["CARD-0001", "ADM-2024-001", "SR-0001", "R-01", "stu-001", "  CARD-0001  "])
def test_resolve_by_any_printed_identifier(student_service, value):
    assert student_service.resolve_card(value).student_id == "stu-001"


def test_resolve_qr_payload_with_card_id(student_service):
    assert student_service.resolve_card(json.dumps({"cardId": "ADM-2024-001"})).student_id == "stu-001"


def test_resolve_qr_payload_with_student_id(student_service):
    assert student_service.resolve_card('{"studentId": "stu-001"}').full_name == "Ayesha Khan"


def test_broken_json_is_treated_as_raw_value(student_service):
    with pytest.raises(NotFoundError):
        student_service.resolve_card('{"cardId": ')


def test_unknown_card(student_service):
    with pytest.raises(NotFoundError):
        student_service.resolve_card("CARD-9999")


def test_empty_card(student_service):
    with pytest.raises(ValidationError):
        student_service.resolve_card("  ")


def test_inactive_student_is_rejected(students_repo, student_service, student):
    students_repo.add(replace(student, is_active=False))

    with pytest.raises(ValidationError):
        student_service.resolve_card("CARD-0001")
    with pytest.raises(ValidationError):
        student_service.get_active("stu-001")


def test_card_payload_round_trips_through_resolution(student_service, student):
    payload = json.loads(card_payload(student))

    assert payload["cardId"] == "CARD-0001"
    assert payload["srNo"] == "SR-0001"
    assert student_service.resolve_card(card_payload(student)).student_id == student.student_id


def test_render_card_qr_is_png(student):
    png = render_card_qr(student)

    assert png.startswith(b"\x89PNG")


def test_decode_rendered_card(student):
    pytest.importorskip("pyzbar.pyzbar")

    assert decode_card_image(io.BytesIO(render_card_qr(student))) == card_payload(student)


def test_decode_rejects_non_image():
    pytest.importorskip("pyzbar.pyzbar")

    with pytest.raises(ValidationError):
        decode_card_image(io.BytesIO(b"definitely not an image"))
