"""
Synchronous Gofile client implementation.

This module provides the main synchronous client for interacting with the
Gofile API: account details, folder and file CRUD, content options, direct
links and streamed multipart uploads.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Dict, Any, Callable, BinaryIO, Union, Iterable

import requests
from requests_toolbelt import MultipartEncoder

from .auth import TokenAuth
from .exceptions import (
    HttpRequestError, HttpStatusError, ApiStatusError,
    ResponseParseError, EmptyServerListError, ValidationError, DownloadError,
)
from .models import (
    ApiResult, Server, AccountDetails, UploadedFile, Content, File,
    ContentOption, ContentId, CreateFolderPayload, UpdateContentPayload,
    CopyContentPayload, DeleteContentPayload, UploadProgress, DownloadProgress,
)
from .utils import (
    content_code_from_url, open_upload_file, remaining_size, guess_mime_type,
    ProgressTracker, ProgressReader, DownloadTracker,
)

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.gofile.io"
DEFAULT_SERVER_URL_TEMPLATE = "https://{name}.gofile.io"
USER_AGENT = "Gofile-Python-SDK/1.0.0"

# marks "use the client's zone" in get_server, where None already means any zone
CLIENT_ZONE = object()


def parse_envelope(status_code: int, url: str, body: Any) -> Any:
    """
    Unwrap a decoded ``{status, data}`` response body.

    Args:
        status_code: HTTP status of the response
        url: Request URL, carried into raised errors
        body: Decoded JSON body, or None when the body was not JSON

    Returns:
        The envelope's ``data`` payload
    """
    if status_code != 200:
        try:
            result = ApiResult.from_dict(body)
        except ResponseParseError:
            raise HttpStatusError(url, status_code) from None
        raise ApiStatusError(url, result.status)

    if body is None:
        raise ResponseParseError(f"Response from {url} is not JSON")
    result = ApiResult.from_dict(body)
    if not result.is_ok:
        raise ApiStatusError(url, result.status)
    return result.data


def check_content_ids(contents_id: Iterable[ContentId]) -> List[ContentId]:
    ids = list(contents_id)
    if not ids:
        raise ValidationError("At least one content id is required", field="contents_id")
    return ids


def select_server(servers: List[Server], zone: Optional[str]) -> Server:
    """First server in ``zone``; any server when ``zone`` is None."""
    for server in servers:
        if zone is None or server.zone == zone:
            return server
    raise EmptyServerListError(zone=zone)


class GofileClient:
    """
    Synchronous client for the Gofile API.

    Account-scoped calls thread the token into the query string or the JSON
    body. Uploads go to an upload server chosen from ``GET /servers`` and
    stream the file through a multipart encoder, so memory use does not
    grow with file size.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: int = 30,
        chunk_size: int = 1024 * 1024,  # 1MB chunks
        zone: Optional[str] = "eu",
        server_url_template: str = DEFAULT_SERVER_URL_TEMPLATE,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Gofile client.

        Args:
            token: Account token (can also use GOFILE_TOKEN env var); None for guest mode
            endpoint: Gofile API endpoint URL
            timeout: Request timeout in seconds
            chunk_size: Chunk size for streamed downloads
            zone: Preferred upload server zone; None accepts any zone
            server_url_template: Upload host URL, ``{name}`` is the server name
            session: Optional pre-configured requests session
        """
        self.auth = TokenAuth(token)
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.zone = zone
        self.server_url_template = server_url_template

        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
        })

    @property
    def token(self) -> Optional[str]:
        return self.auth.token

    def _url(self, path: str) -> str:
        return f"{self.endpoint}/{path.lstrip('/')}"

    def _send(self, method: str, url: str, **kwargs) -> Any:
        """Send a request and unwrap the response envelope."""
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method=method,
                url=url,
                timeout=self.timeout,
                **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise HttpRequestError(f"Request failed: {e}", url=url) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        data = parse_envelope(response.status_code, response.url or url, body)
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return data

    def _request(self, method: str, path: str, **kwargs) -> Any:
        return self._send(method, self._url(path), **kwargs)

    # servers

    def get_servers(self) -> List[Server]:
        """List the available upload servers."""
        data = self._request("GET", "servers")
        return Server.list_from_dict(data)

    def get_server(self, zone: Any = CLIENT_ZONE) -> Server:
        """
        Pick an upload server.

        Args:
            zone: Zone to pick from; defaults to the client's zone, None means any

        Returns:
            The first matching server
        """
        if zone is CLIENT_ZONE:
            zone = self.zone
        server = select_server(self.get_servers(), zone)
        logger.debug("Selected upload server %s (zone %s)", server.name, server.zone)
        return server

    # account and contents

    def get_account_details(self) -> AccountDetails:
        """Get details of the account owning the token."""
        data = self._request("GET", "getAccountDetails", params=self.auth.params())
        return AccountDetails.from_dict(data)

    def get_content(self, content_id: ContentId) -> Content:
        """
        Get a folder or file.

        Args:
            content_id: Content id or public content code

        Returns:
            A Folder (with nested contents for the fetched root) or a File
        """
        params = self.auth.params(contentId=content_id)
        data = self._request("GET", "getContent", params=params)
        return Content.from_dict(data)

    def get_content_from_url(self, url: str) -> Content:
        """Get the content behind a ``https://gofile.io/d/<code>`` URL."""
        return self.get_content(content_code_from_url(url))

    def create_folder(self, parent_folder_id: ContentId, folder_name: str) -> Content:
        """Create a folder under ``parent_folder_id``."""
        if not folder_name:
            raise ValidationError("Folder name must not be empty", field="folder_name")
        payload = CreateFolderPayload(self.auth.require(), parent_folder_id, folder_name)
        data = self._request("PUT", "createFolder", json=payload.to_dict())
        folder = Content.from_dict(data)
        logger.info("Created folder %s (%s)", folder.name, folder.id)
        return folder

    def set_option(self, content_id: ContentId, option: ContentOption) -> None:
        """Set one option on a content."""
        payload = UpdateContentPayload(self.auth.require(), content_id, option)
        self._request("PUT", "setOption", json=payload.to_dict())
        logger.debug("Set option %s on %s", option.name.value, content_id)

    def set_public_option(self, content_id: ContentId, public: bool) -> None:
        self.set_option(content_id, ContentOption.public(public))

    def set_password_option(self, content_id: ContentId, password: str) -> None:
        self.set_option(content_id, ContentOption.password(password))

    def set_description_option(self, content_id: ContentId, description: str) -> None:
        self.set_option(content_id, ContentOption.description(description))

    def set_expire_option(self, content_id: ContentId, expire: datetime) -> None:
        self.set_option(content_id, ContentOption.expire(expire))

    def set_tags_option(self, content_id: ContentId, tags: Iterable[str]) -> None:
        self.set_option(content_id, ContentOption.tags(tags))

    def get_direct_link(self, content_id: ContentId) -> str:
        """Enable the direct link of a file and return it."""
        self.set_option(content_id, ContentOption.direct_link(True))
        content = self.get_content(content_id)
        if not isinstance(content, File):
            raise ValidationError(f"Content {content_id} is a folder and has no direct link", field="content_id")
        return content.link

    def disable_direct_link(self, content_id: ContentId) -> None:
        self.set_option(content_id, ContentOption.direct_link(False))

    def copy_content(self, contents_id: Iterable[ContentId], folder_id_dest: ContentId) -> Dict[str, Any]:
        """Copy contents into the destination folder."""
        ids = check_content_ids(contents_id)
        payload = CopyContentPayload(self.auth.require(), ids, folder_id_dest)
        data = self._request("PUT", "copyContent", json=payload.to_dict())
        logger.info("Copied %d content(s) to %s", len(ids), folder_id_dest)
        return data if isinstance(data, dict) else {}

    def delete_content(self, contents_id: Iterable[ContentId]) -> Dict[str, Any]:
        """Delete contents. Returns the per-id status map the API sends back."""
        ids = check_content_ids(contents_id)
        payload = DeleteContentPayload(self.auth.require(), ids)
        data = self._request("DELETE", "deleteContent", json=payload.to_dict())
        logger.info("Deleted %d content(s)", len(ids))
        return data if isinstance(data, dict) else {}

    # uploads

    def upload_file(
        self,
        file_path: Union[str, Path],
        folder_id: Optional[ContentId] = None,
        server: Optional[Server] = None,
        filename: Optional[str] = None,
        upload_id: Optional[uuid.UUID] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> UploadedFile:
        """
        Upload a file to Gofile.

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
        local_name, file_obj = open_upload_file(file_path)
        with file_obj:
            return self.upload_fileobj(
                file_obj,
                filename or local_name,
                folder_id=folder_id,
                server=server,
                upload_id=upload_id,
                progress_callback=progress_callback,
            )

    def upload_fileobj(
        self,
        file_obj: BinaryIO,
        filename: str,
        folder_id: Optional[ContentId] = None,
        server: Optional[Server] = None,
        upload_id: Optional[uuid.UUID] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> UploadedFile:
        """Upload from an open binary file, starting at its current position."""
        if not filename:
            raise ValidationError("filename is required when uploading file-like objects", field="filename")

        if server is None:
            server = self.get_server()
        url = f"{server.base_url(self.server_url_template)}/contents/uploadfile"

        total_bytes = remaining_size(file_obj)
        tracker = ProgressTracker(filename, total_bytes, progress_callback, upload_id)
        reader = ProgressReader(file_obj, tracker)

        fields = self.auth.form_fields(folderId=folder_id)
        fields["file"] = (filename, reader, guess_mime_type(filename))
        encoder = MultipartEncoder(fields=fields)

        logger.info("Uploading %s (%d bytes) to %s", filename, total_bytes, server.name)
        data = self._send(
            "POST",
            url,
            data=encoder,
            headers={"Content-Type": encoder.content_type},
        )
        tracker.complete()

        uploaded = UploadedFile.from_dict(data)
        logger.info("Uploaded %s as %s", uploaded.file_name, uploaded.file_id)
        return uploaded

    # downloads

    def download_file(
        self,
        content: Union[File, ContentId],
        local_path: Optional[Union[str, Path]] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ) -> Path:
        """
        Download a file through its link.

        Args:
            content: File record, or the id of one
            local_path: Target file or directory (defaults to the remote name)
            progress_callback: Callback function for download progress

        Returns:
            Path to downloaded file
        """
        if not isinstance(content, File):
            fetched = self.get_content(content)
            if not isinstance(fetched, File):
                raise DownloadError("Only files can be downloaded", content_id=content)
            content = fetched

        if local_path is None:
            local_path = Path(content.name)
        else:
            local_path = Path(local_path)
            if local_path.is_dir():
                local_path = local_path / content.name

        logger.debug("GET %s", content.link)
        try:
            response = self.session.get(
                content.link,
                cookies=self.auth.cookies(),
                stream=True,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise HttpRequestError(f"Request failed: {e}", url=content.link) from e

        with response:
            if response.status_code != 200:
                raise DownloadError(
                    f"Download of {content.name} failed with HTTP {response.status_code}",
                    content_id=content.id,
                )

            tracker = DownloadTracker(content.name, content.size, progress_callback)
            try:
                with open(local_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
                            tracker.advance(len(chunk))
            except requests.exceptions.RequestException as e:
                local_path.unlink(missing_ok=True)
                raise HttpRequestError(f"Download interrupted: {e}", url=content.link) from e

        logger.info("Downloaded %s to %s", content.name, local_path)
        return local_path

    def close(self):
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
