from datetime import date
from typing import Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from rx_intake.codec.models import FlatPrescriptionRecord
from rx_intake.commons.exceptions import MalformedInputError
from rx_intake.commons.types import CanonicalExampleRecord, InsuranceExample


def _text(value) -> str:
    """None -> "", numbers -> decimal text, strings unchanged."""
    if value is None:
        return ""
    return str(value)


def load_example(example: Union[CanonicalExampleRecord, Mapping]) -> CanonicalExampleRecord:
    if isinstance(example, CanonicalExampleRecord):
        return example
    try:
        return CanonicalExampleRecord.model_validate(example)
    except PydanticValidationError as ex:
        raise MalformedInputError(
            "Example record does not match the canonical shape.",
            detail={"errors": ex.errors(include_url=False, include_context=False)},
        ) from ex


def to_flat_record(
    example: Union[CanonicalExampleRecord, Mapping], today: Optional[date] = None
) -> FlatPrescriptionRecord:
    """Flatten a canonical example into the editable record shape.

    No validation happens here; examples are trusted reference data.
    """
    ex = load_example(example)
    pt, pr, med = ex.patient, ex.prescriber, ex.medication
    ins = ex.insurance or InsuranceExample()

    return FlatPrescriptionRecord(
        patient_id=_text(pt.id),
        patient_first_name=_text(pt.first_name),
        patient_last_name=_text(pt.last_name),
        patient_date_of_birth=_text(pt.date_of_birth),
        patient_street=_text(pt.street),
        patient_city=_text(pt.city),
        patient_state=_text(pt.state),
        patient_zip_code=_text(pt.zip_code),
        patient_phone=_text(pt.phone),
        prescriber_id=_text(pr.id),
        prescriber_npi=_text(pr.npi),
        prescriber_dea=_text(pr.dea),
        prescriber_first_name=_text(pr.first_name),
        prescriber_last_name=_text(pr.last_name),
        prescriber_street=_text(pr.street),
        prescriber_city=_text(pr.city),
        prescriber_state=_text(pr.state),
        prescriber_zip_code=_text(pr.zip_code),
        prescriber_phone=_text(pr.phone),
        medication_ndc=_text(med.ndc),
        medication_name=_text(med.name),
        medication_quantity=_text(med.quantity),
        medication_refills=_text(med.refills),
        medication_dosage=_text(med.dosage),
        medication_directions=_text(med.directions),
        date_written=ex.date_written or (today or date.today()).isoformat(),
        insurance_bin=_text(ins.bin),
        insurance_pcn=_text(ins.pcn),
        insurance_group_id=_text(ins.group_id),
        insurance_member_id=_text(ins.member_id),
        insurance_plan_name=_text(ins.plan_name),
    )
