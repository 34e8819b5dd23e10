"""
Utility functions for Gofile SDK.

This module provides the helpers shared by the sync and async clients:
content URL parsing, upload source validation, streamed progress tracking
and human readable formatting.
"""

import io
import math
import mimetypes
import os
import time
import uuid
from pathlib import Path
from typing import Callable, Optional, Union, BinaryIO, Tuple
from urllib.parse import urlparse

from .exceptions import InvalidContentUrlError, InvalidFilePathError, FileOpenError
from .models import UploadProgress, DownloadProgress

ProgressCallback = Callable[[UploadProgress], None]


def content_code_from_url(url: str) -> str:
    """
    Extract the content code from a public content URL.

    Args:
        url: URL of the form ``https://gofile.io/d/<code>``

    Returns:
        The content code
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise InvalidContentUrlError(url, "The content url must be absolute.")

    segments = [segment for segment in parsed.path.split("/") if segment]
    if not segments:
        raise InvalidContentUrlError(url, "The content url must have path segments like '/d/XXXX'.")
    if segments[0] != "d":
        raise InvalidContentUrlError(url, "The first path segment of content url must be 'd'.")
    if len(segments) < 2:
        raise InvalidContentUrlError(url, "The content url must have two path segments like '/d/XXXX'.")
    return segments[1]


def resolve_upload_path(file_path: Union[str, Path]) -> Tuple[Path, str]:
    """
    Validate an upload source path.

    Returns:
        The path and the file name the upload will carry
    """
    path = Path(file_path)
    filename = path.name
    if not filename or filename in (".", ".."):
        raise InvalidFilePathError(path, "Couldn't get the filename.")
    if not path.exists():
        raise InvalidFilePathError(path, "No such file.")
    if not path.is_file():
        raise InvalidFilePathError(path, "Not a regular file.")
    return path, filename


def open_upload_file(file_path: Union[str, Path]) -> Tuple[str, BinaryIO]:
    """Open an upload source for binary streaming. The caller closes it."""
    path, filename = resolve_upload_path(file_path)
    try:
        return filename, open(path, "rb")
    except OSError as e:
        raise FileOpenError(path, str(e)) from e


def remaining_size(file_obj: BinaryIO) -> int:
    """Bytes between the current position and the end of a seekable file."""
    try:
        return os.fstat(file_obj.fileno()).st_size - file_obj.tell()
    except (AttributeError, OSError, io.UnsupportedOperation):
        current_pos = file_obj.tell()
        file_obj.seek(0, 2)
        end = file_obj.tell()
        file_obj.seek(current_pos)
        return end - current_pos


def guess_mime_type(filename: str) -> str:
    """
    Guess MIME type from filename.

    Args:
        filename: Name of the file

    Returns:
        MIME type string
    """
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or "application/octet-stream"


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB", "PB"]
    i = int(math.floor(math.log(size_bytes, 1024)))

    if i >= len(size_names):
        i = len(size_names) - 1

    p = math.pow(1024, i)
    size = round(size_bytes / p, 2)

    return f"{size} {size_names[i]}"


def calculate_transfer_speed(bytes_transferred: int, elapsed_time: float) -> float:
    """
    Calculate transfer speed in bytes per second.

    Args:
        bytes_transferred: Number of bytes transferred
        elapsed_time: Time elapsed in seconds

    Returns:
        Speed in bytes per second
    """
    if elapsed_time <= 0:
        return 0
    return bytes_transferred / elapsed_time


def estimate_remaining_time(bytes_transferred: int, total_bytes: int, elapsed_time: float) -> Optional[float]:
    """
    Estimate remaining transfer time.

    Returns:
        Estimated remaining time in seconds, or None if cannot estimate
    """
    if bytes_transferred <= 0 or elapsed_time <= 0:
        return None

    speed = calculate_transfer_speed(bytes_transferred, elapsed_time)
    if speed <= 0:
        return None

    remaining_bytes = total_bytes - bytes_transferred
    return remaining_bytes / speed


class ProgressTracker:
    """
    Cumulative byte counter for one upload.

    The reported value only ever grows and is capped at ``total_bytes``, so a
    file that grows while being read never reports more than its announced
    size.
    """

    def __init__(
        self,
        filename: str,
        total_bytes: int,
        callback: Optional[ProgressCallback] = None,
        upload_id: Optional[uuid.UUID] = None,
    ):
        self.filename = filename
        self.total_bytes = total_bytes
        self.callback = callback
        self.upload_id = upload_id or uuid.uuid4()
        self.uploaded_bytes = 0
        self._reported = False
        self._start_time = time.monotonic()

    def advance(self, n_bytes: int) -> None:
        """Account for ``n_bytes`` more bytes handed to the transport."""
        if n_bytes <= 0:
            return
        self.uploaded_bytes = min(self.uploaded_bytes + n_bytes, self.total_bytes)
        self._emit()

    def complete(self) -> None:
        """Report the total once the source is exhausted, if not reported yet."""
        if self._reported and self.uploaded_bytes >= self.total_bytes:
            return
        self.uploaded_bytes = self.total_bytes
        self._emit()

    def snapshot(self) -> UploadProgress:
        elapsed = time.monotonic() - self._start_time
        if self.total_bytes:
            percentage = (self.uploaded_bytes / self.total_bytes) * 100
        else:
            percentage = 100.0
        return UploadProgress(
            filename=self.filename,
            total_bytes=self.total_bytes,
            uploaded_bytes=self.uploaded_bytes,
            percentage=percentage,
            speed_bps=calculate_transfer_speed(self.uploaded_bytes, elapsed),
            eta_seconds=estimate_remaining_time(self.uploaded_bytes, self.total_bytes, elapsed),
            upload_id=self.upload_id,
        )

    def _emit(self) -> None:
        self._reported = True
        if self.callback:
            self.callback(self.snapshot())


class ProgressReader:
    """
    File-like wrapper that counts bytes as the multipart encoder pulls them.

    ``__len__`` reports the bytes still to be read, which is what
    ``requests_toolbelt`` expects from a streamed part body. The wrapper
    exposes neither ``fileno`` nor ``getvalue``, so the encoder always reads
    through it.
    """

    def __init__(self, file_obj: BinaryIO, tracker: ProgressTracker):
        self._file = file_obj
        self._tracker = tracker
        self._remaining = tracker.total_bytes
        self._exhausted = False

    def __len__(self) -> int:
        return self._remaining

    def read(self, size: int = -1) -> bytes:
        if self._remaining <= 0:
            chunk = b""
        elif size is None or size < 0:
            chunk = self._file.read(self._remaining)
        else:
            chunk = self._file.read(min(size, self._remaining))

        if chunk:
            self._remaining -= len(chunk)
            self._tracker.advance(len(chunk))
        else:
            # source ended early; stop the encoder from asking again
            self._remaining = 0

        if self._remaining == 0 and not self._exhausted:
            self._exhausted = True
            self._tracker.complete()
        return chunk


class DownloadTracker:
    """Builds :class:`DownloadProgress` snapshots for a streamed download."""

    def __init__(self, filename: str, total_bytes: int, callback=None):
        self.filename = filename
        self.total_bytes = total_bytes
        self.callback = callback
        self.downloaded_bytes = 0
        self._start_time = time.monotonic()

    def advance(self, n_bytes: int) -> None:
        self.downloaded_bytes += n_bytes
        if not self.callback:
            return
        elapsed = time.monotonic() - self._start_time
        percentage = (self.downloaded_bytes / self.total_bytes) * 100 if self.total_bytes else 100.0
        self.callback(DownloadProgress(
            filename=self.filename,
            total_bytes=self.total_bytes,
            downloaded_bytes=self.downloaded_bytes,
            percentage=min(percentage, 100.0),
            speed_bps=calculate_transfer_speed(self.downloaded_bytes, elapsed),
            eta_seconds=estimate_remaining_time(self.downloaded_bytes, self.total_bytes, elapsed),
        ))
