from dataclasses import fields
from datetime import date

import pytest

from rx_intake.codec.models import (
    FORM_FIELDS,
    FlatPrescriptionRecord,
    coerce_record,
    parse_quantity,
)
from rx_intake.commons.exceptions import IntakeError, MalformedInputError


def test_form_fields_match_dataclass():
    assert [f.name for f in fields(FlatPrescriptionRecord)] == list(FORM_FIELDS.values())


def test_blank_record():
    record = FlatPrescriptionRecord.blank(date(2024, 5, 1))
    form = record.to_form()
    assert form["dateWritten"] == "2024-05-01"
    assert all(v == "" for k, v in form.items() if k != "dateWritten")


def test_form_round_trip():
    record = FlatPrescriptionRecord(patient_first_name="John", insurance_group_id="G1")
    assert FlatPrescriptionRecord.from_form(record.to_form()) == record


def test_from_form_stringifies_values():
    form = FlatPrescriptionRecord().to_form()
    form.update(medicationQuantity=2, medicationRefills=None)
    record = FlatPrescriptionRecord.from_form(form)
    assert record.medication_quantity == "2"
    assert record.medication_refills == ""


def test_from_form_lists_missing_keys():
    with pytest.raises(MalformedInputError) as exc_info:
        FlatPrescriptionRecord.from_form({"patientId": "P1"})
    missing = exc_info.value.detail["missing"]
    assert "patientFirstName" in missing
    assert "patientId" not in missing


def test_coerce_rejects_other_types():
    with pytest.raises(MalformedInputError):
        coerce_record(["not", "a", "record"])


def test_error_hierarchy():
    exc = MalformedInputError("bad", detail={"missing": ["x"]})
    assert isinstance(exc, IntakeError)
    assert exc.type == "malformed_input"
    assert exc.code == "MALFORMED_INPUT"
    assert MalformedInputError("bad", code="CUSTOM").code == "CUSTOM"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12", 12),
        (" 3 ", 3),
        ("\t007\n", 7),
        ("0", 0),
        ("", None),
        ("   ", None),
        ("1_000", None),
        ("+5", None),
        ("-2", None),
        ("３", None),
        ("2.5", None),
        (None, None),
    ],
)
def test_parse_quantity(value, expected):
    assert parse_quantity(value) == expected
