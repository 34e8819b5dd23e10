"""
Custom exceptions for Gofile SDK.

This module defines all the exception classes used throughout the SDK.
Transport failures, HTTP status failures and API envelope failures are
kept apart so callers can tell "the request never completed" from
"the server answered with an error".
"""


class GofileError(Exception):
    """Base exception for all Gofile SDK errors."""

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self):
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class HttpRequestError(GofileError):
    """Raised when the HTTP request itself fails (connection, timeout, bad URL)."""

    def __init__(self, message: str = "HTTP request failed", url: str = None, **kwargs):
        super().__init__(message, error_code="HTTP_REQUEST_ERROR", **kwargs)
        self.url = url


class HttpStatusError(GofileError):
    """Raised when the server answers with a non-success HTTP status and no envelope."""

    def __init__(self, url: str, status_code: int, **kwargs):
        super().__init__(
            f"HTTP status {status_code} from {url}",
            error_code="HTTP_STATUS_ERROR",
            **kwargs,
        )
        self.url = url
        self.status_code = status_code


class ApiStatusError(GofileError):
    """Raised when the response envelope carries a status other than "ok"."""

    def __init__(self, url: str, status: str, **kwargs):
        super().__init__(
            f"API status '{status}' from {url}",
            error_code="API_STATUS_ERROR",
            **kwargs,
        )
        self.url = url
        self.status = status


class ResponseParseError(GofileError):
    """Raised when a response body does not match the expected structure."""

    def __init__(self, message: str = "Malformed API response", field: str = None, **kwargs):
        super().__init__(message, error_code="RESPONSE_PARSE_ERROR", **kwargs)
        self.field = field


class AuthenticationError(GofileError):
    """Raised when an operation needs an account token and none is configured."""

    def __init__(self, message: str = "Account token is required", **kwargs):
        super().__init__(message, error_code="AUTH_ERROR", **kwargs)


class EmptyServerListError(GofileError):
    """Raised when no upload server is available for the requested zone."""

    def __init__(self, message: str = "Gofile returned empty server list", zone: str = None, **kwargs):
        super().__init__(message, error_code="EMPTY_SERVER_LIST", **kwargs)
        self.zone = zone


class InvalidFilePathError(GofileError):
    """Raised when a local path cannot be used as an upload source."""

    def __init__(self, path, reason: str, **kwargs):
        super().__init__(
            f"Invalid file path {path}: {reason}",
            error_code="INVALID_FILE_PATH",
            **kwargs,
        )
        self.path = path
        self.reason = reason


class FileOpenError(GofileError):
    """Raised when a local file exists but cannot be opened."""

    def __init__(self, path, reason: str, **kwargs):
        super().__init__(
            f"Could not open file at {path}: {reason}",
            error_code="FILE_OPEN_ERROR",
            **kwargs,
        )
        self.path = path
        self.reason = reason


class InvalidContentUrlError(GofileError):
    """Raised when a content URL does not look like https://gofile.io/d/<code>."""

    def __init__(self, url: str, reason: str, **kwargs):
        super().__init__(
            f"Invalid content url {url}: {reason}",
            error_code="INVALID_CONTENT_URL",
            **kwargs,
        )
        self.url = url
        self.reason = reason


class ValidationError(GofileError):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Validation failed", field: str = None, **kwargs):
        super().__init__(message, error_code="VALIDATION_ERROR", **kwargs)
        self.field = field


class DownloadError(GofileError):
    """Raised when file download fails."""

    def __init__(self, message: str = "File download failed", content_id=None, **kwargs):
        super().__init__(message, error_code="DOWNLOAD_ERROR", **kwargs)
        self.content_id = content_id
