from datetime import datetime, timezone
from typing import Callable, Optional

from rx_intake.codec.encoder import encode
from rx_intake.codec.models import RecordLike, coerce_record
from rx_intake.commons.exceptions import IntakeError, SubmissionError
from rx_intake.commons.logger import logger
from rx_intake.commons.types import Settings, SubmissionRequest
from rx_intake.validation.validators import validate_record_or_raise

# Downstream intake call: takes the request body, returns the assigned id.
SubmitFn = Callable[[SubmissionRequest], str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IntakeService:
    """Validate -> encode -> hand off to the injected submit callable.

    The encoder is only reached with a record that passed validation; the
    service holds no client state of its own and never retries.
    """

    def __init__(
        self,
        submit: SubmitFn,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.submit_fn = submit
        self.settings = settings or Settings()
        self.clock = clock

    def prepare(self, record: RecordLike) -> SubmissionRequest:
        rec = coerce_record(record)
        validate_record_or_raise(rec)
        xml = encode(rec, self.clock(), defaults=self.settings.defaults)
        return SubmissionRequest(payload=xml, format=self.settings.submission.format)

    def submit(self, record: RecordLike) -> str:
        try:
            request = self.prepare(record)
        except IntakeError as ex:
            logger.warning(f"Prescription rejected before submission: {ex.code} {ex.detail}")
            raise

        try:
            prescription_id = self.submit_fn(request)
        except Exception as ex:
            logger.error(f"Prescription submission failed: {ex}")
            raise SubmissionError(f"Submission failed: {ex}") from ex

        logger.info(f"Prescription submitted, id={prescription_id}")
        return prescription_id
