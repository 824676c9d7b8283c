"""Domain exceptions raised by the brief, tag and job services."""


class BriefServiceError(Exception):
    """Base exception for brief domain errors; carries an HTTP status hint."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidVideoURLError(BriefServiceError):
    """URL missing or not a YouTube video."""

    status_code = 400


class BriefNotFoundError(BriefServiceError):
    """Brief does not exist or is not owned by the user."""

    status_code = 404

    def __init__(self, message: str = "Brief not found"):
        super().__init__(message)


class TagValidationError(BriefServiceError):
    """Tag name empty or too long."""

    status_code = 400


class TagLimitError(BriefServiceError):
    """Brief already carries the maximum number of tags."""

    status_code = 400


class GenerationConfigError(BriefServiceError):
    """Generation cannot run because API keys are missing."""

    status_code = 500

    def __init__(self, message: str = "API keys not configured"):
        super().__init__(message)
