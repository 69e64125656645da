"""Error taxonomy for the permit wizard.

Nothing here is fatal: every error leaves the wizard in a resumable state.
"""


class PermitWizardError(Exception):
    """Base class for all wizard errors."""


class ValidationBlocked(PermitWizardError):
    """The step gate refused to advance past the current step."""

    def __init__(self, step: str):
        super().__init__(f"Step '{step}' is incomplete; cannot advance.")
        self.step = step


class InvalidActionError(PermitWizardError):
    """An action carried an unknown field, category or an illegal value."""


class UploadReadError(PermitWizardError):
    """A single uploaded file could not be read."""

    def __init__(self, category: str, filename: str, reason: str = ""):
        message = f"Could not read '{filename}' for {category}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.category = category
        self.filename = filename


class SubmissionError(PermitWizardError):
    """Base class for failures of the validation round-trip."""


class RequestError(SubmissionError):
    """The validator could not be reached (network/transport failure)."""


class ServiceError(SubmissionError):
    """The validator answered but reported a failure."""


class MalformedResponseError(SubmissionError):
    """The validator's reply cannot be interpreted as a validation result."""


class DownloadUnavailableError(PermitWizardError):
    """The application text was requested for an incomplete validation."""
