"""
Flat prescription record -> canonical XML wire message.

The message is first built as an ordered element tree and then rendered, so
section inclusion is decided by the predicates below and never while writing
text. Layout:

    Message
      Header   (MessageID, Timestamp)
      Body
        Prescription[DateWritten]
          Patient[ID]     FirstName, LastName, DateOfBirth, Address?, Phone?
          Prescriber[ID]  NPI, DEA?, FirstName, LastName, Address?, Phone?
          Medication      NDC, Name, Quantity, Refills?, Dosage?, Directions?
          Insurance?      BIN?, PCN?, GroupID?, MemberID?, PlanName?
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from rx_intake.codec.escaping import escape
from rx_intake.codec.models import (
    FlatPrescriptionRecord,
    RecordLike,
    coerce_record,
    parse_quantity,
)
from rx_intake.commons.types import EncoderDefaults

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = "  "

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Code points XML 1.0 does not allow in a document, not even as references
_XML_ILLEGAL = re.compile(r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

# (form suffix, element tag) for the address block of patient / prescriber
_ADDRESS_PARTS = (
    ("street", "Street"),
    ("city", "City"),
    ("state", "State"),
    ("zip_code", "ZipCode"),
)

_INSURANCE_PARTS = (
    ("insurance_bin", "BIN"),
    ("insurance_pcn", "PCN"),
    ("insurance_group_id", "GroupID"),
    ("insurance_member_id", "MemberID"),
    ("insurance_plan_name", "PlanName"),
)


@dataclass
class Element:
    tag: str
    text: str = ""
    attrs: List[Tuple[str, str]] = field(default_factory=list)
    children: List["Element"] = field(default_factory=list)

    def add(self, *children: Optional["Element"]) -> "Element":
        self.children.extend(c for c in children if c is not None)
        return self


# ---------- section predicates ----------
def _present(value: str) -> bool:
    return bool(value)


def has_address(record: FlatPrescriptionRecord, party: str) -> bool:
    """True when any address field of ``party`` ('patient' / 'prescriber') is set."""
    return any(_present(getattr(record, f"{party}_{part}")) for part, _ in _ADDRESS_PARTS)


def has_insurance(record: FlatPrescriptionRecord) -> bool:
    return any(_present(getattr(record, attr)) for attr, _ in _INSURANCE_PARTS)


# ---------- time helpers ----------
def _as_utc(current_time: datetime) -> datetime:
    if current_time.tzinfo is None:
        return current_time.replace(tzinfo=timezone.utc)
    return current_time.astimezone(timezone.utc)


def format_timestamp(current_time: datetime) -> str:
    """ISO 8601 in UTC with milliseconds, e.g. 2024-01-15T10:30:00.000Z."""
    utc = _as_utc(current_time)
    return utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"


def make_message_id(current_time: datetime, prefix: str = "MSG") -> str:
    millis = (_as_utc(current_time) - _EPOCH) // timedelta(milliseconds=1)
    return f"{prefix}{millis}"


# ---------- element builders ----------
def _leaf(tag: str, value: str) -> Element:
    return Element(tag, text=value)


def _optional(tag: str, value: str) -> Optional[Element]:
    return _leaf(tag, value) if _present(value) else None


def _address(record: FlatPrescriptionRecord, party: str) -> Optional[Element]:
    if not has_address(record, party):
        return None
    return Element("Address").add(
        *(_optional(tag, getattr(record, f"{party}_{part}")) for part, tag in _ADDRESS_PARTS)
    )


def _quantity(record: FlatPrescriptionRecord, defaults: EncoderDefaults) -> str:
    qty = parse_quantity(record.medication_quantity)
    return str(qty) if qty is not None else defaults.quantity


def build_patient(record: FlatPrescriptionRecord, defaults: EncoderDefaults) -> Element:
    patient = Element("Patient", attrs=[("ID", record.patient_id or defaults.patient_id)])
    return patient.add(
        _leaf("FirstName", record.patient_first_name),
        _leaf("LastName", record.patient_last_name),
        _leaf("DateOfBirth", record.patient_date_of_birth),
        _address(record, "patient"),
        _optional("Phone", record.patient_phone),
    )


def build_prescriber(record: FlatPrescriptionRecord, defaults: EncoderDefaults) -> Element:
    prescriber = Element(
        "Prescriber", attrs=[("ID", record.prescriber_id or defaults.prescriber_id)]
    )
    return prescriber.add(
        _leaf("NPI", record.prescriber_npi),
        _optional("DEA", record.prescriber_dea),
        _leaf("FirstName", record.prescriber_first_name),
        _leaf("LastName", record.prescriber_last_name),
        _address(record, "prescriber"),
        _optional("Phone", record.prescriber_phone),
    )


def build_medication(record: FlatPrescriptionRecord, defaults: EncoderDefaults) -> Element:
    return Element("Medication").add(
        _leaf("NDC", record.medication_ndc),
        _leaf("Name", record.medication_name),
        _leaf("Quantity", _quantity(record, defaults)),
        _optional("Refills", record.medication_refills),
        _optional("Dosage", record.medication_dosage),
        _optional("Directions", record.medication_directions),
    )


def build_insurance(record: FlatPrescriptionRecord) -> Optional[Element]:
    if not has_insurance(record):
        return None
    return Element("Insurance").add(
        *(_optional(tag, getattr(record, attr)) for attr, tag in _INSURANCE_PARTS)
    )


def build_message(
    record: FlatPrescriptionRecord,
    message_id: str,
    timestamp: str,
    date_written: str,
    defaults: EncoderDefaults,
) -> Element:
    prescription = Element("Prescription", attrs=[("DateWritten", date_written)]).add(
        build_patient(record, defaults),
        build_prescriber(record, defaults),
        build_medication(record, defaults),
        build_insurance(record),
    )
    header = Element("Header").add(
        _leaf("MessageID", message_id),
        _leaf("Timestamp", timestamp),
    )
    return Element("Message").add(header, Element("Body").add(prescription))


# ---------- rendering ----------
def _xml_text(value: str) -> str:
    return escape(_XML_ILLEGAL.sub("", value or ""))


def _render(element: Element, depth: int, out: List[str]) -> None:
    pad = INDENT * depth
    attrs = "".join(f' {name}="{_xml_text(value)}"' for name, value in element.attrs)
    if not element.children:
        out.append(f"{pad}<{element.tag}{attrs}>{_xml_text(element.text)}</{element.tag}>")
        return
    out.append(f"{pad}<{element.tag}{attrs}>")
    for child in element.children:
        _render(child, depth + 1, out)
    out.append(f"{pad}</{element.tag}>")


def render(root: Element) -> str:
    lines = [XML_DECLARATION]
    _render(root, 0, lines)
    return "\n".join(lines)


def encode(
    record: RecordLike,
    current_time: datetime,
    message_id: Optional[str] = None,
    defaults: Optional[EncoderDefaults] = None,
) -> str:
    """Encode a flat record as wire message text.

    Does not validate: blank required values become empty elements and blank
    IDs / quantity fall back to ``defaults``. A form mapping missing a key
    raises MalformedInputError.
    """
    rec = coerce_record(record)
    defaults = defaults or EncoderDefaults()
    msg_id = message_id or make_message_id(current_time, defaults.message_id_prefix)
    date_written = rec.date_written or _as_utc(current_time).date().isoformat()
    root = build_message(
        rec,
        message_id=msg_id,
        timestamp=format_timestamp(current_time),
        date_written=date_written,
        defaults=defaults,
    )
    return render(root)
