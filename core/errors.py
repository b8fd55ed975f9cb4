"""
Error taxonomy for media generation.

Every failure the orchestrators surface is a MediaGenerationError subclass
carrying a human-readable message, an error code, and the HTTP status the
API layer maps it to.
"""

from typing import Optional

ENTITY_NOT_FOUND_SIGNATURE = "Requested entity was not found"


class MediaGenerationError(Exception):
    """Base class for media generation failures."""

    status_code: int = 502
    default_code: str = "GENERATION_FAILED"

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code or self.default_code
        super().__init__(message)


class ValidationError(MediaGenerationError):
    """Malformed request input (empty prompt, unsupported config value)."""

    status_code = 422
    default_code = "VALIDATION_ERROR"


class CredentialError(MediaGenerationError):
    """A privileged credential is required but unavailable or declined."""

    status_code = 401
    default_code = "CREDENTIAL_REQUIRED"


class SubmissionEntityError(MediaGenerationError):
    """Submission failed with the stale-credential "entity not found" signature."""

    default_code = "ENTITY_NOT_FOUND"


class SubmissionError(MediaGenerationError):
    """Job submission failed terminally."""

    default_code = "SUBMISSION_FAILED"


class GenerationError(MediaGenerationError):
    """The remote job reached a terminal failure state."""

    default_code = "JOB_FAILED"


class OperationTimeoutError(GenerationError):
    """The remote job did not reach a terminal state within the poll cap."""

    default_code = "POLL_TIMEOUT"


class MissingOutputError(MediaGenerationError):
    """Terminal success, but no usable artifact locator or bytes."""

    default_code = "NO_OUTPUT"


class NetworkError(MediaGenerationError):
    """Artifact download failed."""

    default_code = "DOWNLOAD_FAILED"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        remote_status: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        self.remote_status = remote_status
        self.reason = reason
        super().__init__(message, error_code=error_code)


def is_entity_not_found(error: BaseException) -> bool:
    """True when a submission failure carries the stale-credential signature."""
    if isinstance(error, SubmissionEntityError):
        return True
    message = getattr(error, "message", None) or str(error)
    return ENTITY_NOT_FOUND_SIGNATURE in str(message)


class PlanGenerationError(MediaGenerationError):
    """The planning model returned no usable campaign plan."""

    default_code = "PLAN_FAILED"
