from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Example records use the camelCase keys of the example library
# (firstName, zipCode, groupID ...). Attributes stay snake_case.
_EXAMPLE_CONFIG = ConfigDict(
    frozen=True, populate_by_name=True, alias_generator=to_camel, extra="ignore"
)


class PatientExample(BaseModel):
    model_config = _EXAMPLE_CONFIG

    id: str
    first_name: str
    last_name: str
    date_of_birth: str
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None


class PrescriberExample(BaseModel):
    model_config = _EXAMPLE_CONFIG

    id: str
    npi: str
    dea: Optional[str] = None
    first_name: str
    last_name: str
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None


class MedicationExample(BaseModel):
    model_config = _EXAMPLE_CONFIG

    ndc: str
    name: str
    quantity: int
    refills: Optional[int] = None
    dosage: Optional[str] = None
    directions: Optional[str] = None


class InsuranceExample(BaseModel):
    model_config = _EXAMPLE_CONFIG

    bin: Optional[str] = None
    pcn: Optional[str] = None
    group_id: Optional[str] = Field(default=None, alias="groupID")
    member_id: Optional[str] = Field(default=None, alias="memberID")
    plan_name: Optional[str] = None


class CanonicalExampleRecord(BaseModel):
    """Reference prescription, independent of the editable form shape."""

    model_config = _EXAMPLE_CONFIG

    patient: PatientExample
    prescriber: PrescriberExample
    medication: MedicationExample
    date_written: Optional[str] = None
    insurance: Optional[InsuranceExample] = None


class SubmissionRequest(BaseModel):
    """Body handed to the downstream intake call."""

    payload: str
    format: Literal["xml", "json"] = "xml"


class EncoderDefaults(BaseModel):
    patient_id: str = "PAT001"
    prescriber_id: str = "PRES001"
    quantity: str = "1"
    message_id_prefix: str = "MSG"


class SubmissionCfg(BaseModel):
    format: Literal["xml", "json"] = "xml"


class Settings(BaseModel):
    app: Dict[str, Any] = {}
    paths: Dict[str, str] = {"logs_root": "logs"}
    defaults: EncoderDefaults = EncoderDefaults()
    submission: SubmissionCfg = SubmissionCfg()
