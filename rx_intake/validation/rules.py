import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern

NPI_RE = re.compile(r"[0-9]{10}")


@dataclass(frozen=True)
class FieldRule:
    """Constraint for one form field.

    ``required`` is always checked first; ``pattern`` and ``numeric_positive``
    only run on a non-blank value, so a field never reports more than one error.
    """

    required_message: str
    pattern: Optional[Pattern] = None
    pattern_message: str = ""
    numeric_positive: bool = False
    numeric_message: str = ""


# Form field -> rule. Fields not listed are optional and unconstrained.
RULES: Dict[str, FieldRule] = {
    "patientFirstName": FieldRule("First name is required"),
    "patientLastName": FieldRule("Last name is required"),
    "patientDateOfBirth": FieldRule("Date of birth is required"),
    "prescriberNPI": FieldRule(
        "NPI is required",
        pattern=NPI_RE,
        pattern_message="NPI must be 10 digits",
    ),
    "prescriberFirstName": FieldRule("First name is required"),
    "prescriberLastName": FieldRule("Last name is required"),
    "medicationNDC": FieldRule("NDC is required"),
    "medicationName": FieldRule("Medication name is required"),
    "medicationQuantity": FieldRule(
        "Quantity must be greater than 0",
        numeric_positive=True,
        numeric_message="Quantity must be greater than 0",
    ),
}
