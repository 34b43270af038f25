"""Error taxonomy for the storage and analysis layers."""


class CalorieHoundError(Exception):
    """Base class for application errors."""


class AnalysisError(CalorieHoundError):
    """Raised by the image analysis pipeline."""


class ConfigurationError(AnalysisError):
    """The API credential is missing."""


class NetworkError(AnalysisError):
    """The analysis endpoint could not be reached."""


class RequestTimeoutError(NetworkError):
    """The analysis request was aborted after the timeout elapsed."""


class RateLimitError(AnalysisError):
    """The endpoint answered 429."""


class AuthError(AnalysisError):
    """The endpoint rejected the credential or the quota is exhausted."""


class NotFoundError(AnalysisError):
    """The endpoint or model does not exist."""


class HttpStatusError(AnalysisError):
    """Any other non-success HTTP response."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"API request failed: {status_code} {reason}".rstrip())
        self.status_code = status_code


class ApiError(AnalysisError):
    """A success response carried an embedded error object."""


class ParseError(AnalysisError):
    """The endpoint reply contained no extractable text."""


class EncodeError(AnalysisError):
    """The source image could not be read or re-encoded."""


class FormatError(CalorieHoundError):
    """An import document is malformed."""


class PersistenceError(CalorieHoundError):
    """A stored document could not be read or written."""
