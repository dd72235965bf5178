import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import pytest

from rx_intake.codec.decoder import to_flat_record
from rx_intake.commons.exceptions import MalformedInputError, SubmissionError, ValidationError
from rx_intake.commons.types import EncoderDefaults, Settings, SubmissionRequest
from rx_intake.services.examples import get_example
from rx_intake.services.intake_service import IntakeService

NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


class FakeIntakeClient:
    """Stands in for the downstream intake endpoint."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requests = []

    def __call__(self, request: SubmissionRequest) -> str:
        self.requests.append(request)
        if self.fail:
            raise ConnectionError("intake unavailable")
        return f"RX-{len(self.requests)}"


def make_service(client=None, settings=None):
    return IntakeService(client or FakeIntakeClient(), settings=settings, clock=lambda: NOW)


def good_record():
    return to_flat_record(get_example(0))


def test_prepare_builds_xml_request():
    request = make_service().prepare(good_record())
    assert request.format == "xml"
    root = ET.fromstring(request.payload)
    assert root.findtext("Header/MessageID") == "MSG1705314600000"
    assert root.findtext("Body/Prescription/Medication/Name") == "Humira"


def test_prepare_uses_settings_defaults():
    settings = Settings(defaults=EncoderDefaults(patient_id="PX"))
    record = good_record()
    record.patient_id = ""
    request = make_service(settings=settings).prepare(record)
    assert 'Patient ID="PX"' in request.payload


def test_submit_returns_assigned_id():
    client = FakeIntakeClient()
    assert make_service(client).submit(good_record()) == "RX-1"
    assert len(client.requests) == 1
    assert client.requests[0].model_dump()["format"] == "xml"


def test_invalid_record_never_reaches_client():
    client = FakeIntakeClient()
    record = good_record()
    record.prescriber_npi = "123"
    with pytest.raises(ValidationError) as exc_info:
        make_service(client).submit(record)
    assert exc_info.value.detail["errors"] == {"prescriberNPI": "NPI must be 10 digits"}
    assert client.requests == []


def test_malformed_form_is_rejected():
    form = good_record().to_form()
    del form["patientId"]
    with pytest.raises(MalformedInputError):
        make_service().submit(form)


def test_client_failure_is_wrapped():
    with pytest.raises(SubmissionError) as exc_info:
        make_service(FakeIntakeClient(fail=True)).submit(good_record())
    assert exc_info.value.code == "SUBMISSION_FAILED"
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.parametrize("quantity", ["1_000", "+5", "３"])
def test_non_ascii_or_signed_quantity_is_rejected(quantity):
    client = FakeIntakeClient()
    record = good_record()
    record.medication_quantity = quantity
    with pytest.raises(ValidationError):
        make_service(client).submit(record)
    assert client.requests == []


def test_padded_quantity_is_sent_trimmed():
    client = FakeIntakeClient()
    record = good_record()
    record.medication_quantity = " 3 "
    make_service(client).submit(record)
    assert "<Quantity>3</Quantity>" in client.requests[0].payload
