# ===============================
# File: rx_intake/codec/models.py
# ===============================
import re
from dataclasses import dataclass
from datetime import date
from typing import Dict, Mapping, Optional, Union

from rx_intake.commons.exceptions import MalformedInputError

# Form key (as used by the editable form and in error maps) -> attribute name.
# Order matches the form layout: patient, prescriber, medication, insurance.
FORM_FIELDS: Dict[str, str] = {
    "patientId": "patient_id",
    "patientFirstName": "patient_first_name",
    "patientLastName": "patient_last_name",
    "patientDateOfBirth": "patient_date_of_birth",
    "patientStreet": "patient_street",
    "patientCity": "patient_city",
    "patientState": "patient_state",
    "patientZipCode": "patient_zip_code",
    "patientPhone": "patient_phone",
    "prescriberId": "prescriber_id",
    "prescriberNPI": "prescriber_npi",
    "prescriberDEA": "prescriber_dea",
    "prescriberFirstName": "prescriber_first_name",
    "prescriberLastName": "prescriber_last_name",
    "prescriberStreet": "prescriber_street",
    "prescriberCity": "prescriber_city",
    "prescriberState": "prescriber_state",
    "prescriberZipCode": "prescriber_zip_code",
    "prescriberPhone": "prescriber_phone",
    "medicationNDC": "medication_ndc",
    "medicationName": "medication_name",
    "medicationQuantity": "medication_quantity",
    "medicationRefills": "medication_refills",
    "medicationDosage": "medication_dosage",
    "medicationDirections": "medication_directions",
    "dateWritten": "date_written",
    "insuranceBIN": "insurance_bin",
    "insurancePCN": "insurance_pcn",
    "insuranceGroupID": "insurance_group_id",
    "insuranceMemberID": "insurance_member_id",
    "insurancePlanName": "insurance_plan_name",
}


@dataclass
class FlatPrescriptionRecord:
    """Single-level editable prescription. Every value is text, quantity included."""

    patient_id: str = ""
    patient_first_name: str = ""
    patient_last_name: str = ""
    patient_date_of_birth: str = ""  # YYYY-MM-DD
    patient_street: str = ""
    patient_city: str = ""
    patient_state: str = ""
    patient_zip_code: str = ""
    patient_phone: str = ""

    prescriber_id: str = ""
    prescriber_npi: str = ""
    prescriber_dea: str = ""
    prescriber_first_name: str = ""
    prescriber_last_name: str = ""
    prescriber_street: str = ""
    prescriber_city: str = ""
    prescriber_state: str = ""
    prescriber_zip_code: str = ""
    prescriber_phone: str = ""

    medication_ndc: str = ""
    medication_name: str = ""
    medication_quantity: str = ""
    medication_refills: str = ""
    medication_dosage: str = ""
    medication_directions: str = ""
    date_written: str = ""  # YYYY-MM-DD

    insurance_bin: str = ""
    insurance_pcn: str = ""
    insurance_group_id: str = ""
    insurance_member_id: str = ""
    insurance_plan_name: str = ""

    @classmethod
    def blank(cls, today: Optional[date] = None) -> "FlatPrescriptionRecord":
        """Initial form state: everything empty, dateWritten set to today."""
        return cls(date_written=(today or date.today()).isoformat())

    @classmethod
    def from_form(cls, form: Mapping) -> "FlatPrescriptionRecord":
        missing = [key for key in FORM_FIELDS if key not in form]
        if missing:
            raise MalformedInputError(
                "Prescription record is missing expected fields.",
                detail={"missing": missing},
            )
        values = {}
        for key, attr in FORM_FIELDS.items():
            value = form[key]
            values[attr] = "" if value is None else str(value)
        return cls(**values)

    def to_form(self) -> Dict[str, str]:
        return {key: getattr(self, attr) for key, attr in FORM_FIELDS.items()}

    def value(self, form_key: str) -> str:
        return getattr(self, FORM_FIELDS[form_key])


QUANTITY_RE = re.compile(r"\s*([0-9]+)\s*")


def parse_quantity(value: str) -> Optional[int]:
    """ASCII digits with optional surrounding whitespace; anything else is None."""
    match = QUANTITY_RE.fullmatch(value or "")
    return int(match.group(1)) if match else None


RecordLike = Union[FlatPrescriptionRecord, Mapping]


def coerce_record(record: RecordLike) -> FlatPrescriptionRecord:
    """Accept either the dataclass or the camelCase form mapping."""
    if isinstance(record, FlatPrescriptionRecord):
        return record
    if isinstance(record, Mapping):
        return FlatPrescriptionRecord.from_form(record)
    raise MalformedInputError(
        f"Unsupported record type: {type(record).__name__}",
    )


@dataclass
class ParsedMessage:
    message_id: str
    timestamp: str
    record: FlatPrescriptionRecord
