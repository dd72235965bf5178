"""
Wire message -> flat record, the inverse of ``encoder.encode``.

Used on the intake side to check a payload before accepting it and to turn a
sent message back into the editable shape. Elements the encoder omits (Address,
Phone, DEA, Insurance, ...) come back as empty strings.
"""

import xml.etree.ElementTree as ET
from typing import Optional

from rx_intake.codec.models import FlatPrescriptionRecord, ParsedMessage
from rx_intake.commons.exceptions import MalformedInputError
from rx_intake.validation.validators import validate_message_header_or_raise


def _text(node: Optional[ET.Element], path: str) -> str:
    if node is None:
        return ""
    el = node.find(path)
    return (el.text or "") if el is not None else ""


def _attr(node: Optional[ET.Element], name: str) -> str:
    return node.get(name, "") if node is not None else ""


def _required(node: ET.Element, path: str) -> ET.Element:
    el = node.find(path)
    if el is None:
        raise MalformedInputError(
            f"Wire message is missing <{path}>.", detail={"missing": path}
        )
    return el


def parse_message(xml_text: str) -> ParsedMessage:
    if not xml_text or not xml_text.strip():
        raise MalformedInputError("Wire message is empty.")
    try:
        root = ET.fromstring(xml_text.strip())
    except ET.ParseError as ex:
        raise MalformedInputError(f"XML is not well-formed: {ex}") from ex
    if root.tag != "Message":
        raise MalformedInputError(f"Unexpected root element <{root.tag}>, expected <Message>.")

    header = validate_message_header_or_raise(
        _text(root, "Header/MessageID"), _text(root, "Header/Timestamp")
    )

    rx = _required(root, "Body/Prescription")
    patient = _required(rx, "Patient")
    prescriber = _required(rx, "Prescriber")
    medication = _required(rx, "Medication")
    insurance = rx.find("Insurance")

    record = FlatPrescriptionRecord(
        patient_id=_attr(patient, "ID"),
        patient_first_name=_text(patient, "FirstName"),
        patient_last_name=_text(patient, "LastName"),
        patient_date_of_birth=_text(patient, "DateOfBirth"),
        patient_street=_text(patient, "Address/Street"),
        patient_city=_text(patient, "Address/City"),
        patient_state=_text(patient, "Address/State"),
        patient_zip_code=_text(patient, "Address/ZipCode"),
        patient_phone=_text(patient, "Phone"),
        prescriber_id=_attr(prescriber, "ID"),
        prescriber_npi=_text(prescriber, "NPI"),
        prescriber_dea=_text(prescriber, "DEA"),
        prescriber_first_name=_text(prescriber, "FirstName"),
        prescriber_last_name=_text(prescriber, "LastName"),
        prescriber_street=_text(prescriber, "Address/Street"),
        prescriber_city=_text(prescriber, "Address/City"),
        prescriber_state=_text(prescriber, "Address/State"),
        prescriber_zip_code=_text(prescriber, "Address/ZipCode"),
        prescriber_phone=_text(prescriber, "Phone"),
        medication_ndc=_text(medication, "NDC"),
        medication_name=_text(medication, "Name"),
        medication_quantity=_text(medication, "Quantity"),
        medication_refills=_text(medication, "Refills"),
        medication_dosage=_text(medication, "Dosage"),
        medication_directions=_text(medication, "Directions"),
        date_written=_attr(rx, "DateWritten"),
        insurance_bin=_text(insurance, "BIN"),
        insurance_pcn=_text(insurance, "PCN"),
        insurance_group_id=_text(insurance, "GroupID"),
        insurance_member_id=_text(insurance, "MemberID"),
        insurance_plan_name=_text(insurance, "PlanName"),
    )
    return ParsedMessage(message_id=header.message_id, timestamp=header.timestamp, record=record)
