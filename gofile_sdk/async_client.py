"""
Asynchronous Gofile client implementation.

This module provides an async/await compatible client with the same
operations as :class:`GofileClient`. Callers that want concurrent uploads
gather the returned coroutines themselves.
"""

import asyncio
import inspect
import io
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Dict, Any, Callable, Union, Iterable, AsyncIterator

import aiofiles
import aiohttp

from .auth import TokenAuth
from .client import (
    CLIENT_ZONE, DEFAULT_ENDPOINT, DEFAULT_SERVER_URL_TEMPLATE, USER_AGENT,
    parse_envelope, check_content_ids, select_server,
)
from .exceptions import HttpRequestError, ValidationError, DownloadError, FileOpenError
from .models import (
    Server, AccountDetails, UploadedFile, Content, File, ContentOption, ContentId,
    CreateFolderPayload, UpdateContentPayload, CopyContentPayload, DeleteContentPayload,
    UploadProgress, DownloadProgress,
)
from .utils import (
    content_code_from_url, resolve_upload_path, remaining_size, guess_mime_type,
    ProgressTracker, DownloadTracker,
)

logger = logging.getLogger(__name__)


def _reads_async(file_obj) -> bool:
    return inspect.iscoroutinefunction(getattr(file_obj, "read", None))


class AsyncGofileClient:
    """
    Asynchronous client for the Gofile API.

    Provides the same functionality as GofileClient with async/await.
    Uploads read the file in ``chunk_size`` pieces through aiofiles and feed
    them to aiohttp as a streamed multipart part.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: int = 30,
        chunk_size: int = 1024 * 1024,  # 1MB chunks
        zone: Optional[str] = "eu",
        server_url_template: str = DEFAULT_SERVER_URL_TEMPLATE,
    ):
        """
        Initialize the async Gofile client.

        Args:
            token: Account token (can also use GOFILE_TOKEN env var); None for guest mode
            endpoint: Gofile API endpoint URL
            timeout: Request timeout in seconds
            chunk_size: Chunk size for streamed uploads and downloads
            zone: Preferred upload server zone; None accepts any zone
            server_url_template: Upload host URL, ``{name}`` is the server name
        """
        self.auth = TokenAuth(token)
        self.endpoint = endpoint.rstrip("/")
        # per connect and per read, as requests applies it; no cap on the whole transfer
        self.timeout = aiohttp.ClientTimeout(total=None, sock_connect=timeout, sock_read=timeout)
        self.chunk_size = chunk_size
        self.zone = zone
        self.server_url_template = server_url_template

        # Session will be created when needed
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def token(self) -> Optional[str]:
        return self.auth.token

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
        return self._session

    def _url(self, path: str) -> str:
        return f"{self.endpoint}/{path.lstrip('/')}"

    async def _send(self, method: str, url: str, **kwargs) -> Any:
        """Send a request and unwrap the response envelope."""
        session = await self._get_session()
        logger.debug("%s %s", method, url)
        try:
            async with session.request(method, url, **kwargs) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None
                return parse_envelope(response.status, str(response.url), body)
        except aiohttp.ClientError as e:
            raise HttpRequestError(f"Request failed: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise HttpRequestError(f"Request timeout: {e}", url=url) from e

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        return await self._send(method, self._url(path), **kwargs)

    async def get_servers(self) -> List[Server]:
        """List the available upload servers."""
        data = await self._request("GET", "servers")
        return Server.list_from_dict(data)

    async def get_server(self, zone: Any = CLIENT_ZONE) -> Server:
        """Pick an upload server; ``zone`` defaults to the client's zone."""
        if zone is CLIENT_ZONE:
            zone = self.zone
        return select_server(await self.get_servers(), zone)

    async def get_account_details(self) -> AccountDetails:
        """Get details of the account owning the token."""
        data = await self._request("GET", "getAccountDetails", params=self.auth.params())
        return AccountDetails.from_dict(data)

    async def get_content(self, content_id: ContentId) -> Content:
        """Get a folder or file by id or public code."""
        params = self.auth.params(contentId=content_id)
        data = await self._request("GET", "getContent", params=params)
        return Content.from_dict(data)

    async def get_content_from_url(self, url: str) -> Content:
        return await self.get_content(content_code_from_url(url))

    async def create_folder(self, parent_folder_id: ContentId, folder_name: str) -> Content:
        """Create a folder under ``parent_folder_id``."""
        if not folder_name:
            raise ValidationError("Folder name must not be empty", field="folder_name")
        payload = CreateFolderPayload(self.auth.require(), parent_folder_id, folder_name)
        data = await self._request("PUT", "createFolder", json=payload.to_dict())
        folder = Content.from_dict(data)
        logger.info("Created folder %s (%s)", folder.name, folder.id)
        return folder

    async def set_option(self, content_id: ContentId, option: ContentOption) -> None:
        payload = UpdateContentPayload(self.auth.require(), content_id, option)
        await self._request("PUT", "setOption", json=payload.to_dict())

    async def set_public_option(self, content_id: ContentId, public: bool) -> None:
        await self.set_option(content_id, ContentOption.public(public))

    async def set_password_option(self, content_id: ContentId, password: str) -> None:
        await self.set_option(content_id, ContentOption.password(password))

    async def set_description_option(self, content_id: ContentId, description: str) -> None:
        await self.set_option(content_id, ContentOption.description(description))

    async def set_expire_option(self, content_id: ContentId, expire: datetime) -> None:
        await self.set_option(content_id, ContentOption.expire(expire))

    async def set_tags_option(self, content_id: ContentId, tags: Iterable[str]) -> None:
        await self.set_option(content_id, ContentOption.tags(tags))

    async def get_direct_link(self, content_id: ContentId) -> str:
        """Enable the direct link of a file and return it."""
        await self.set_option(content_id, ContentOption.direct_link(True))
        content = await self.get_content(content_id)
        if not isinstance(content, File):
            raise ValidationError(f"Content {content_id} is a folder and has no direct link", field="content_id")
        return content.link

    async def disable_direct_link(self, content_id: ContentId) -> None:
        await self.set_option(content_id, ContentOption.direct_link(False))

    async def copy_content(self, contents_id: Iterable[ContentId], folder_id_dest: ContentId) -> Dict[str, Any]:
        ids = check_content_ids(contents_id)
        payload = CopyContentPayload(self.auth.require(), ids, folder_id_dest)
        data = await self._request("PUT", "copyContent", json=payload.to_dict())
        return data if isinstance(data, dict) else {}

    async def delete_content(self, contents_id: Iterable[ContentId]) -> Dict[str, Any]:
        ids = check_content_ids(contents_id)
        payload = DeleteContentPayload(self.auth.require(), ids)
        data = await self._request("DELETE", "deleteContent", json=payload.to_dict())
        return data if isinstance(data, dict) else {}

    async def _iter_chunks(self, file_obj, tracker: ProgressTracker) -> AsyncIterator[bytes]:
        remaining = tracker.total_bytes
        while remaining > 0:
            chunk = file_obj.read(min(self.chunk_size, remaining))
            if inspect.isawaitable(chunk):
                chunk = await chunk
            if not chunk:
                break
            remaining -= len(chunk)
            tracker.advance(len(chunk))
            yield chunk
        tracker.complete()

    async def upload_file(
        self,
        file_path: Union[str, Path],
        folder_id: Optional[ContentId] = None,
        server: Optional[Server] = None,
        filename: Optional[str] = None,
        upload_id: Optional[uuid.UUID] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> UploadedFile:
        """
        Upload a file to Gofile asynchronously.

        Args:
            file_path: Path to the local file
            folder_id: Destination folder; a new guest folder when omitted
            server: Upload server; picked with ``get_server`` when omitted
            filename: Remote filename (defaults to the local name)
            upload_id: Identifier echoed in progress events (random by default)
            progress_callback: Called with cumulative progress while streaming

        Returns:
            UploadedFile with the new file's ids and download page
        """
        path, local_name = resolve_upload_path(file_path)

        try:
            file_obj = await aiofiles.open(path, "rb")
        except OSError as e:
            raise FileOpenError(path, str(e)) from e

        try:
            return await self.upload_fileobj(
                file_obj,
                filename or local_name,
                folder_id=folder_id,
                server=server,
                upload_id=upload_id,
                progress_callback=progress_callback,
            )
        finally:
            await file_obj.close()

    async def upload_fileobj(
        self,
        file_obj,
        filename: str,
        folder_id: Optional[ContentId] = None,
        server: Optional[Server] = None,
        upload_id: Optional[uuid.UUID] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> UploadedFile:
        """
        Upload from an open binary source, starting at its current position.

        ``file_obj`` may be an aiofiles handle, a regular binary file, a
        ``BytesIO`` or raw bytes. Regular files are read on the event loop
        thread, so prefer aiofiles for large files on disk.
        """
        if not filename:
            raise ValidationError("filename is required when uploading file-like objects", field="filename")

        if server is None:
            server = await self.get_server()
        url = f"{server.base_url(self.server_url_template)}/contents/uploadfile"

        if isinstance(file_obj, (bytes, bytearray, memoryview)):
            file_obj = io.BytesIO(file_obj)
        if _reads_async(file_obj):
            start = await file_obj.tell()
            await file_obj.seek(0, 2)
            total_bytes = await file_obj.tell() - start
            await file_obj.seek(start)
        else:
            total_bytes = remaining_size(file_obj)
        tracker = ProgressTracker(filename, total_bytes, progress_callback, upload_id)

        form = aiohttp.FormData()
        for key, value in self.auth.form_fields(folderId=folder_id).items():
            form.add_field(key, value)
        form.add_field(
            "file",
            self._iter_chunks(file_obj, tracker),
            filename=filename,
            content_type=guess_mime_type(filename),
        )

        logger.info("Uploading %s (%d bytes) to %s", filename, total_bytes, server.name)
        data = await self._send("POST", url, data=form)
        tracker.complete()

        uploaded = UploadedFile.from_dict(data)
        logger.info("Uploaded %s as %s", uploaded.file_name, uploaded.file_id)
        return uploaded

    async def _write_stream(self, response, local_path: Path, tracker: DownloadTracker) -> None:
        """Write the response body to ``local_path``, removing the file if the stream breaks."""
        try:
            async with aiofiles.open(local_path, "wb") as f:
                async for chunk in response.content.iter_chunked(self.chunk_size):
                    await f.write(chunk)
                    tracker.advance(len(chunk))
        except (aiohttp.ClientError, asyncio.TimeoutError):
            local_path.unlink(missing_ok=True)
            raise

    async def download_file(
        self,
        content: Union[File, ContentId],
        local_path: Optional[Union[str, Path]] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ) -> Path:
        """Download a file through its link."""
        if not isinstance(content, File):
            fetched = await self.get_content(content)
            if not isinstance(fetched, File):
                raise DownloadError("Only files can be downloaded", content_id=content)
            content = fetched

        if local_path is None:
            local_path = Path(content.name)
        else:
            local_path = Path(local_path)
            if local_path.is_dir():
                local_path = local_path / content.name

        session = await self._get_session()
        tracker = DownloadTracker(content.name, content.size, progress_callback)
        try:
            async with session.get(content.link, cookies=self.auth.cookies()) as response:
                if response.status != 200:
                    raise DownloadError(
                        f"Download of {content.name} failed with HTTP {response.status}",
                        content_id=content.id,
                    )
                await self._write_stream(response, local_path, tracker)
        except aiohttp.ClientError as e:
            raise HttpRequestError(f"Download interrupted: {e}", url=content.link) from e
        except asyncio.TimeoutError as e:
            raise HttpRequestError(f"Request timeout: {e}", url=content.link) from e

        logger.info("Downloaded %s to %s", content.name, local_path)
        return local_path

    async def close(self):
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
