"""
Gofile SDK - typed Python client for the Gofile file-storage API.

This package provides:
- Account details, folder and file management
- Content options (public, password, description, expiry, tags, direct links)
- Streamed multipart uploads with progress reporting
- Async/await support via aiohttp
- The ``gofile`` command line tool
"""

__version__ = "1.0.0"

from .client import GofileClient
from .async_client import AsyncGofileClient
from .models import (
    ApiResult,
    Content,
    Folder,
    File,
    Server,
    AccountDetails,
    UploadedFile,
    ContentOption,
    OptionName,
    UploadProgress,
    DownloadProgress,
)
from .exceptions import (
    GofileError,
    HttpRequestError,
    HttpStatusError,
    ApiStatusError,
    ResponseParseError,
    AuthenticationError,
    EmptyServerListError,
    InvalidFilePathError,
    FileOpenError,
    InvalidContentUrlError,
    ValidationError,
    DownloadError,
)

__all__ = [
    # Main clients
    "GofileClient",
    "AsyncGofileClient",

    # Data models
    "ApiResult",
    "Content",
    "Folder",
    "File",
    "Server",
    "AccountDetails",
    "UploadedFile",
    "ContentOption",
    "OptionName",
    "UploadProgress",
    "DownloadProgress",

    # Exceptions
    "GofileError",
    "HttpRequestError",
    "HttpStatusError",
    "ApiStatusError",
    "ResponseParseError",
    "AuthenticationError",
    "EmptyServerListError",
    "InvalidFilePathError",
    "FileOpenError",
    "InvalidContentUrlError",
    "ValidationError",
    "DownloadError",
]
