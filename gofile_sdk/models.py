"""
Data models for Gofile SDK.

This module defines the typed records the SDK exchanges with the Gofile API:
the response envelope, the folder/file content union, account and server
records, request payloads and transfer progress snapshots.

All ``from_dict`` constructors accept the camelCase JSON the API sends and
raise :class:`ResponseParseError` on anything that does not fit. All
``to_dict`` methods produce that same wire form.
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Iterable, Union
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlparse

from .exceptions import ResponseParseError, ValidationError


ContentId = Union[uuid.UUID, str]

_MIME_RE = re.compile(r"^[A-Za-z0-9][\w!#$&^.+-]*/[A-Za-z0-9][\w!#$&^.+-]*(\s*;.*)?$")
_MD5_RE = re.compile(r"[0-9a-fA-F]{32}")


def _require(data: Dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected an object, got {type(data).__name__}")
    if key not in data:
        raise ResponseParseError(f"Missing field '{key}'", field=key)
    return data[key]


def _parse_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ResponseParseError(f"Field '{key}' must be a string", field=key)
    return value


def _parse_int(value: Any, key: str) -> int:
    # bool is an int subclass; the API never sends one for a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ResponseParseError(f"Field '{key}' must be an integer", field=key)
    if value < 0:
        raise ResponseParseError(f"Field '{key}' must not be negative", field=key)
    return value


def _parse_uuid(value: Any, key: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError) as e:
        raise ResponseParseError(f"Field '{key}' is not a valid id: {value!r}", field=key) from e


def _parse_timestamp(value: Any, key: str) -> datetime:
    seconds = _parse_int(value, key)
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ResponseParseError(f"Field '{key}' is not a valid timestamp", field=key) from e


def _parse_md5(value: Any, key: str) -> bytes:
    text = _parse_str(value, key)
    if not _MD5_RE.fullmatch(text):
        raise ResponseParseError(f"Field '{key}' must be 32 hex characters: {text!r}", field=key)
    return bytes.fromhex(text)


def _parse_mimetype(value: Any, key: str) -> str:
    text = _parse_str(value, key)
    if not _MIME_RE.match(text):
        raise ResponseParseError(f"Field '{key}' is not a MIME type: {text!r}", field=key)
    return text


def _parse_url(value: Any, key: str) -> str:
    text = _parse_str(value, key)
    parsed = urlparse(text)
    if not parsed.scheme or not parsed.netloc:
        raise ResponseParseError(f"Field '{key}' is not an absolute URL: {text!r}", field=key)
    return text


def to_timestamp(value: datetime) -> int:
    """Convert a datetime to epoch seconds, treating naive values as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def join_ids(ids: Iterable[ContentId]) -> str:
    """Join content ids into the comma separated form the API expects."""
    return ",".join(str(content_id) for content_id in ids)


@dataclass
class ApiResult:
    """The ``{status, data}`` envelope wrapping every API response."""

    status: str
    data: Any

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiResult":
        """Create ApiResult from a decoded response body."""
        return cls(
            status=_parse_str(_require(data, "status"), "status"),
            data=_require(data, "data"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "data": self.data}

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"


@dataclass
class Server:
    """An upload server as listed by ``GET /servers``."""

    name: str
    zone: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Server":
        return cls(
            name=_parse_str(_require(data, "name"), "name"),
            zone=_parse_str(_require(data, "zone"), "zone"),
        )

    @classmethod
    def list_from_dict(cls, data: Dict[str, Any]) -> List["Server"]:
        """Parse the ``{"servers": [...]}`` payload."""
        servers = _require(data, "servers")
        if not isinstance(servers, list):
            raise ResponseParseError("Field 'servers' must be a list", field="servers")
        return [cls.from_dict(item) for item in servers]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "zone": self.zone}

    def base_url(self, template: str = "https://{name}.gofile.io") -> str:
        """Base URL of this server's upload host."""
        return template.format(name=self.name).rstrip("/")


@dataclass
class AccountDetails:
    """Details of the account owning the token."""

    id: uuid.UUID
    token: str
    email: str
    tier: str
    root_folder: uuid.UUID
    files_count: int
    total_size: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountDetails":
        """Create AccountDetails from API response dictionary."""
        return cls(
            id=_parse_uuid(_require(data, "id"), "id"),
            token=_parse_str(_require(data, "token"), "token"),
            email=_parse_str(_require(data, "email"), "email"),
            tier=_parse_str(_require(data, "tier"), "tier"),
            root_folder=_parse_uuid(_require(data, "rootFolder"), "rootFolder"),
            files_count=_parse_int(_require(data, "filesCount"), "filesCount"),
            total_size=_parse_int(_require(data, "totalSize"), "totalSize"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "token": self.token,
            "email": self.email,
            "tier": self.tier,
            "rootFolder": str(self.root_folder),
            "filesCount": self.files_count,
            "totalSize": self.total_size,
        }


@dataclass
class UploadedFile:
    """Result of a successful upload."""

    download_page: str
    code: str
    parent_folder: uuid.UUID
    file_id: uuid.UUID
    file_name: str
    md5: bytes
    guest_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UploadedFile":
        """Create UploadedFile from API response dictionary."""
        guest_token = data.get("guestToken") if isinstance(data, dict) else None
        if guest_token is not None:
            guest_token = _parse_str(guest_token, "guestToken")

        return cls(
            download_page=_parse_url(_require(data, "downloadPage"), "downloadPage"),
            code=_parse_str(_require(data, "code"), "code"),
            parent_folder=_parse_uuid(_require(data, "parentFolder"), "parentFolder"),
            file_id=_parse_uuid(_require(data, "fileId"), "fileId"),
            file_name=_parse_str(_require(data, "fileName"), "fileName"),
            md5=_parse_md5(_require(data, "md5"), "md5"),
            guest_token=guest_token,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "downloadPage": self.download_page,
            "code": self.code,
            "parentFolder": str(self.parent_folder),
            "fileId": str(self.file_id),
            "fileName": self.file_name,
            "md5": self.md5.hex(),
        }
        if self.guest_token is not None:
            result["guestToken"] = self.guest_token
        return result


@dataclass
class Content:
    """
    A folder or a file stored on Gofile.

    ``Content`` itself is never instantiated by the parser: ``from_dict``
    reads the ``type`` discriminator and returns a :class:`Folder` or a
    :class:`File`, both of which share the fields declared here.
    """

    id: uuid.UUID
    name: str
    parent_folder: uuid.UUID
    create_time: datetime

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Content":
        """Create a Folder or File from API response dictionary."""
        content_type = _require(data, "type")
        variant = _CONTENT_TYPES.get(content_type) if isinstance(content_type, str) else None
        if variant is None:
            raise ResponseParseError(f"Unknown content type: {content_type!r}", field="type")
        if cls is not Content and variant is not cls:
            raise ResponseParseError(
                f"Expected content of type '{cls.TYPE}', got '{content_type}'",
                field="type",
            )
        return variant._from_dict(data)

    @classmethod
    def _common_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": _parse_uuid(_require(data, "id"), "id"),
            "name": _parse_str(_require(data, "name"), "name"),
            "parent_folder": _parse_uuid(_require(data, "parentFolder"), "parentFolder"),
            "create_time": _parse_timestamp(_require(data, "createTime"), "createTime"),
        }

    def _common_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "parentFolder": str(self.parent_folder),
            "createTime": to_timestamp(self.create_time),
            "type": self.TYPE,
        }

    @property
    def is_folder(self) -> bool:
        return isinstance(self, Folder)

    @property
    def is_file(self) -> bool:
        return isinstance(self, File)


@dataclass
class Folder(Content):
    """A folder. Aggregates and nested contents are only set on the fetched root."""

    TYPE = "folder"

    code: str = ""
    public: bool = False
    children_ids: List[uuid.UUID] = field(default_factory=list)
    total_download_count: Optional[int] = None
    total_size: Optional[int] = None
    contents: Optional[Dict[uuid.UUID, Content]] = None

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Folder":
        public = data.get("public", False)
        if not isinstance(public, bool):
            raise ResponseParseError("Field 'public' must be a boolean", field="public")

        children_ids = _require(data, "childrenIds")
        if not isinstance(children_ids, list):
            raise ResponseParseError("Field 'childrenIds' must be a list", field="childrenIds")

        total_download_count = data.get("totalDownloadCount")
        if total_download_count is not None:
            total_download_count = _parse_int(total_download_count, "totalDownloadCount")
        total_size = data.get("totalSize")
        if total_size is not None:
            total_size = _parse_int(total_size, "totalSize")

        contents = data.get("contents")
        if contents is not None:
            if not isinstance(contents, dict):
                raise ResponseParseError("Field 'contents' must be an object", field="contents")
            contents = {
                _parse_uuid(key, "contents"): Content.from_dict(value)
                for key, value in contents.items()
            }

        return cls(
            code=_parse_str(_require(data, "code"), "code"),
            public=public,
            children_ids=[_parse_uuid(child, "childrenIds") for child in children_ids],
            total_download_count=total_download_count,
            total_size=total_size,
            contents=contents,
            **cls._common_fields(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = self._common_dict()
        result.update({
            "code": self.code,
            "public": self.public,
            "childrenIds": [str(child) for child in self.children_ids],
        })
        if self.total_download_count is not None:
            result["totalDownloadCount"] = self.total_download_count
        if self.total_size is not None:
            result["totalSize"] = self.total_size
        if self.contents is not None:
            result["contents"] = {
                str(key): value.to_dict() for key, value in self.contents.items()
            }
        return result

    def children(self) -> List[Content]:
        """Nested contents in ``children_ids`` order, skipping ids not fetched."""
        if not self.contents:
            return []
        return [self.contents[child] for child in self.children_ids if child in self.contents]


@dataclass
class File(Content):
    """A stored file."""

    TYPE = "file"

    size: int = 0
    download_count: int = 0
    md5: bytes = b""
    mimetype: str = "application/octet-stream"
    server_chosen: str = ""
    link: str = ""

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "File":
        return cls(
            size=_parse_int(_require(data, "size"), "size"),
            download_count=_parse_int(_require(data, "downloadCount"), "downloadCount"),
            md5=_parse_md5(_require(data, "md5"), "md5"),
            mimetype=_parse_mimetype(_require(data, "mimetype"), "mimetype"),
            server_chosen=_parse_str(_require(data, "serverChoosen"), "serverChoosen"),
            link=_parse_url(_require(data, "link"), "link"),
            **cls._common_fields(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = self._common_dict()
        result.update({
            "size": self.size,
            "downloadCount": self.download_count,
            "md5": self.md5.hex(),
            "mimetype": self.mimetype,
            "serverChoosen": self.server_chosen,
            "link": self.link,
        })
        return result

    @property
    def md5_hex(self) -> str:
        return self.md5.hex()


_CONTENT_TYPES = {
    Folder.TYPE: Folder,
    File.TYPE: File,
}


class OptionName(Enum):
    """Content options settable through ``PUT /setOption``."""
    PUBLIC = "public"
    PASSWORD = "password"
    DESCRIPTION = "description"
    EXPIRE = "expire"
    TAGS = "tags"
    DIRECT_LINK = "directLink"


_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


@dataclass(frozen=True)
class ContentOption:
    """
    A single content option and its value.

    Build one with the named constructors (``ContentOption.public(True)``,
    ``ContentOption.expire(dt)`` ...) so the value always has the type the
    option expects. ``to_dict`` renders the ``option``/``value`` pair the
    way the API wants it: booleans as ``"true"``/``"false"`` strings,
    expiry as epoch seconds and tags as one comma separated string.
    """

    name: OptionName
    value: Any

    @classmethod
    def public(cls, value: bool) -> "ContentOption":
        return cls(OptionName.PUBLIC, bool(value))

    @classmethod
    def password(cls, value: str) -> "ContentOption":
        return cls(OptionName.PASSWORD, str(value))

    @classmethod
    def description(cls, value: str) -> "ContentOption":
        return cls(OptionName.DESCRIPTION, str(value))

    @classmethod
    def expire(cls, value: datetime) -> "ContentOption":
        if not isinstance(value, datetime):
            raise ValidationError("expire option needs a datetime", field="expire")
        return cls(OptionName.EXPIRE, value)

    @classmethod
    def tags(cls, value: Iterable[str]) -> "ContentOption":
        if isinstance(value, str):
            value = value.split(",")
        tags = tuple(tag.strip() for tag in value if tag.strip())
        return cls(OptionName.TAGS, tags)

    @classmethod
    def direct_link(cls, value: bool) -> "ContentOption":
        return cls(OptionName.DIRECT_LINK, bool(value))

    @classmethod
    def parse(cls, name: str, raw: str) -> "ContentOption":
        """Build an option from its wire name and a textual value (CLI input)."""
        try:
            option = OptionName(name)
        except ValueError as e:
            choices = ", ".join(o.value for o in OptionName)
            raise ValidationError(f"Unknown option '{name}' (choose from {choices})", field="option") from e

        if option in (OptionName.PUBLIC, OptionName.DIRECT_LINK):
            word = raw.strip().lower()
            if word in _TRUE_WORDS:
                flag = True
            elif word in _FALSE_WORDS:
                flag = False
            else:
                raise ValidationError(f"Option '{name}' needs true or false, got '{raw}'", field="value")
            return cls(option, flag)

        if option is OptionName.EXPIRE:
            raw = raw.strip()
            try:
                if raw.isdigit():
                    return cls.expire(datetime.fromtimestamp(int(raw), tz=timezone.utc))
                return cls.expire(datetime.fromisoformat(raw))
            except (ValueError, OverflowError, OSError) as e:
                raise ValidationError(f"Invalid expiry '{raw}'", field="value") from e

        if option is OptionName.TAGS:
            return cls.tags(raw)

        return cls(option, raw)

    def serialized_value(self) -> Union[str, int]:
        if self.name in (OptionName.PUBLIC, OptionName.DIRECT_LINK):
            return "true" if self.value else "false"
        if self.name is OptionName.EXPIRE:
            return to_timestamp(self.value)
        if self.name is OptionName.TAGS:
            return ",".join(self.value)
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"option": self.name.value, "value": self.serialized_value()}


@dataclass
class CreateFolderPayload:
    """Body of ``PUT /createFolder``."""

    token: str
    parent_folder_id: ContentId
    folder_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "parentFolderId": str(self.parent_folder_id),
            "folderName": self.folder_name,
        }


@dataclass
class UpdateContentPayload:
    """Body of ``PUT /setOption``."""

    token: str
    content_id: ContentId
    option: ContentOption

    def to_dict(self) -> Dict[str, Any]:
        result = {"token": self.token, "contentId": str(self.content_id)}
        result.update(self.option.to_dict())
        return result


@dataclass
class CopyContentPayload:
    """Body of ``PUT /copyContent``."""

    token: str
    contents_id: List[ContentId]
    folder_id_dest: ContentId

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "contentsId": join_ids(self.contents_id),
            "folderIdDest": str(self.folder_id_dest),
        }


@dataclass
class DeleteContentPayload:
    """Body of ``DELETE /deleteContent``."""

    token: str
    contents_id: List[ContentId]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "contentsId": join_ids(self.contents_id),
        }


@dataclass
class UploadProgress:
    """Progress information for file uploads."""

    filename: str
    total_bytes: int
    uploaded_bytes: int
    percentage: float
    speed_bps: float  # Bytes per second
    eta_seconds: Optional[float] = None
    upload_id: Optional[uuid.UUID] = None

    @property
    def speed_mbps(self) -> float:
        """Upload speed in MB/s."""
        return self.speed_bps / (1024 * 1024)

    @property
    def uploaded_mb(self) -> float:
        """Uploaded bytes in MB."""
        return self.uploaded_bytes / (1024 * 1024)

    @property
    def total_mb(self) -> float:
        """Total bytes in MB."""
        return self.total_bytes / (1024 * 1024)

    @property
    def is_complete(self) -> bool:
        return self.uploaded_bytes >= self.total_bytes


@dataclass
class DownloadProgress:
    """Progress information for file downloads."""

    filename: str
    total_bytes: int
    downloaded_bytes: int
    percentage: float
    speed_bps: float  # Bytes per second
    eta_seconds: Optional[float] = None

    @property
    def speed_mbps(self) -> float:
        """Download speed in MB/s."""
        return self.speed_bps / (1024 * 1024)

    @property
    def downloaded_mb(self) -> float:
        """Downloaded bytes in MB."""
        return self.downloaded_bytes / (1024 * 1024)
