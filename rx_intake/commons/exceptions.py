"""
Exception hierarchy for the intake core.

Every error carries:
- type:    error family (validation_error / malformed_input / submission_error)
- code:    machine readable code (VALIDATION_ERROR / MALFORMED_INPUT / ...)
- message: human readable description
- detail:  optional extra data (dict / list / None)

Field rule failures are normally *returned* by ``validate``; ``ValidationError``
is only raised where submission is gated on a clean record.
"""


class IntakeError(Exception):
    """Base class for every error raised by rx_intake."""

    type = "error"
    code = "UNKNOWN_ERROR"

    def __init__(self, message, code=None, detail=None):
        self.message = message
        if code is not None:
            self.code = code
        self.detail = detail
        super().__init__(message)


class ValidationError(IntakeError):
    """One or more field rules failed. detail = {"errors": {field: message}}."""

    type = "validation_error"
    code = "VALIDATION_ERROR"


class MalformedInputError(IntakeError):
    """Structural contract violation: missing keys, wrong shape, broken XML."""

    type = "malformed_input"
    code = "MALFORMED_INPUT"


class SubmissionError(IntakeError):
    """The downstream submit callable failed."""

    type = "submission_error"
    code = "SUBMISSION_FAILED"
