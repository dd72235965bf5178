# rx_intake/validation/validators.py
from typing import Dict, Optional

from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PydanticValidationError

from rx_intake.codec.models import RecordLike, coerce_record, parse_quantity
from rx_intake.commons.exceptions import MalformedInputError, ValidationError
from rx_intake.validation.rules import RULES, FieldRule


def check_field(rule: FieldRule, value: str) -> Optional[str]:
    """Return the error message for one value, or None when it passes."""
    if not value or not value.strip():
        return rule.required_message
    if rule.pattern is not None and not rule.pattern.fullmatch(value):
        return rule.pattern_message
    if rule.numeric_positive:
        number = parse_quantity(value)
        if number is None or number <= 0:
            return rule.numeric_message
    return None


def validate(record: RecordLike) -> Dict[str, str]:
    """Apply every catalog rule; empty dict means the record can be submitted."""
    rec = coerce_record(record)
    errors: Dict[str, str] = {}
    for field_name, rule in RULES.items():
        message = check_field(rule, rec.value(field_name))
        if message:
            errors[field_name] = message
    return errors


def validate_record_or_raise(record: RecordLike) -> None:
    """Submission gate: raise ValidationError carrying the field -> message map."""
    errors = validate(record)
    if errors:
        raise ValidationError(
            message="Prescription record failed validation.",
            detail={"errors": errors},
        )


# --------- Wire message header ----------
class MessageHeader(BaseModel):
    message_id: str
    timestamp: str = ""

    @field_validator("message_id")
    @classmethod
    def _not_empty(cls, v: str):
        if not v or not v.strip():
            raise ValueError("Header/MessageID is required")
        return v


def validate_message_header_or_raise(message_id: str, timestamp: str) -> MessageHeader:
    try:
        return MessageHeader(message_id=message_id, timestamp=timestamp)
    except PydanticValidationError as ex:
        raise MalformedInputError(
            "Wire message header is invalid.",
            detail={"errors": ex.errors(include_url=False, include_context=False)},
        ) from ex
