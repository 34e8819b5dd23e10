"""Unit tests for the envelope, content union and request payload models."""

import uuid
from datetime import datetime, timezone, timedelta

import pytest

from gofile_sdk.exceptions import ResponseParseError, ValidationError
from gofile_sdk.models import (
    ApiResult, Content, Folder, File, Server, AccountDetails, UploadedFile,
    ContentOption, OptionName, CreateFolderPayload, UpdateContentPayload,
    CopyContentPayload, DeleteContentPayload,
)

from tests.conftest import ROOT_ID, PARENT_ID, SUBFOLDER_ID, FILE_ID, MD5_HEX


class TestApiResult:
    def test_parses_envelope(self):
        result = ApiResult.from_dict({"status": "ok", "data": {}})
        assert result == ApiResult(status="ok", data={})
        assert result.is_ok

    def test_non_ok_status_is_not_ok(self):
        assert not ApiResult.from_dict({"status": "error-notFound", "data": {}}).is_ok

    def test_missing_data_is_rejected(self):
        with pytest.raises(ResponseParseError):
            ApiResult.from_dict({"status": "ok"})

    def test_non_object_is_rejected(self):
        with pytest.raises(ResponseParseError):
            ApiResult.from_dict(["ok"])

    def test_to_dict_round_trips(self):
        body = {"status": "ok", "data": {"servers": []}}
        assert ApiResult.from_dict(body).to_dict() == body


class TestContent:
    def test_folder_with_nested_contents(self, folder_payload):
        content = Content.from_dict(folder_payload)

        assert isinstance(content, Folder)
        assert content.is_folder and not content.is_file
        assert content.id == uuid.UUID(ROOT_ID)
        assert content.parent_folder == uuid.UUID(PARENT_ID)
        assert content.create_time == datetime(2001, 9, 9, 1, 46, 41, tzinfo=timezone.utc)
        assert content.code == "bar"
        assert content.public is False
        assert content.children_ids == [uuid.UUID(SUBFOLDER_ID), uuid.UUID(FILE_ID)]
        assert content.total_download_count == 10
        assert content.total_size == 20

        subfolder = content.contents[uuid.UUID(SUBFOLDER_ID)]
        assert isinstance(subfolder, Folder)
        assert subfolder.public is True
        assert subfolder.children_ids == []
        assert subfolder.total_size is None
        assert subfolder.contents is None

        child_file = content.contents[uuid.UUID(FILE_ID)]
        assert isinstance(child_file, File)
        assert child_file.size == 20
        assert child_file.md5 == bytes(14) + b"\x01\xff"
        assert child_file.mimetype == "text/plain"
        assert child_file.server_chosen == "store1"

    def test_children_follow_children_ids_order(self, folder_payload):
        folder = Content.from_dict(folder_payload)
        assert [child.name for child in folder.children()] == ["baz", "foz.txt"]

    def test_children_skips_unfetched_ids(self, folder_payload):
        folder_payload["childrenIds"].append("00000000-0000-0000-0000-000000000009")
        folder = Content.from_dict(folder_payload)
        assert len(folder.children()) == 2

    def test_file(self, file_payload):
        content = Content.from_dict(file_payload)
        assert isinstance(content, File)
        assert content.md5_hex == MD5_HEX
        assert content.link == "https://store1.gofile.io/download/direct/foz.txt"

    def test_variant_class_checks_type(self, file_payload):
        assert isinstance(File.from_dict(file_payload), File)
        with pytest.raises(ResponseParseError):
            Folder.from_dict(file_payload)

    def test_to_dict_is_inverse_of_from_dict(self, folder_payload):
        content = Content.from_dict(folder_payload)
        assert Content.from_dict(content.to_dict()) == content

    def test_to_dict_omits_root_only_fields(self, folder_payload):
        subfolder = Content.from_dict(folder_payload["contents"][SUBFOLDER_ID])
        wire = subfolder.to_dict()
        assert "totalSize" not in wire
        assert "contents" not in wire
        assert wire["type"] == "folder"

    @pytest.mark.parametrize("content_type", ["link", None, 3])
    def test_unknown_type(self, file_payload, content_type):
        file_payload["type"] = content_type
        with pytest.raises(ResponseParseError):
            Content.from_dict(file_payload)

    def test_missing_type(self, file_payload):
        del file_payload["type"]
        with pytest.raises(ResponseParseError) as exc_info:
            Content.from_dict(file_payload)
        assert exc_info.value.field == "type"

    @pytest.mark.parametrize("field,value", [
        ("mimetype", "error-mime-type"),
        ("md5", "xyz"),
        ("md5", "zz" * 16),
        ("md5", "00 00 00 00 00 00 00 00 00 01ff"),
        ("link", "not a url"),
        ("createTime", "yesterday"),
        ("size", -1),
        ("id", "not-a-uuid"),
    ])
    def test_invalid_file_fields(self, file_payload, field, value):
        file_payload[field] = value
        with pytest.raises(ResponseParseError):
            Content.from_dict(file_payload)

    def test_folder_requires_children_ids(self, folder_payload):
        del folder_payload["childrenIds"]
        with pytest.raises(ResponseParseError):
            Content.from_dict(folder_payload)

    def test_nested_error_propagates(self, folder_payload):
        folder_payload["contents"][FILE_ID]["mimetype"] = "nope"
        with pytest.raises(ResponseParseError):
            Content.from_dict(folder_payload)


class TestRecords:
    def test_servers(self, servers_payload):
        servers = Server.list_from_dict(servers_payload)
        assert servers == [Server("store9", "na"), Server("store1", "eu")]
        assert servers[1].base_url() == "https://store1.gofile.io"
        assert servers[1].base_url("http://localhost:8080/") == "http://localhost:8080"

    def test_account_details(self, account_payload):
        details = AccountDetails.from_dict(account_payload)
        assert details.root_folder == uuid.UUID(ROOT_ID)
        assert details.files_count == 3
        assert details.to_dict() == account_payload

    def test_uploaded_file_without_guest_token(self, uploaded_payload):
        uploaded = UploadedFile.from_dict(uploaded_payload)
        assert uploaded.guest_token is None
        assert uploaded.file_id == uuid.UUID(FILE_ID)
        assert uploaded.md5.hex() == MD5_HEX
        assert uploaded.to_dict() == uploaded_payload

    def test_uploaded_file_with_guest_token(self, uploaded_payload):
        uploaded_payload["guestToken"] = "foo"
        assert UploadedFile.from_dict(uploaded_payload).guest_token == "foo"

    def test_uploaded_file_md5_with_spaces(self, uploaded_payload):
        uploaded_payload["md5"] = " " * 28 + "01ff"
        with pytest.raises(ResponseParseError) as exc_info:
            UploadedFile.from_dict(uploaded_payload)
        assert exc_info.value.field == "md5"


class TestPayloads:
    def test_create_folder(self):
        payload = CreateFolderPayload("foo", uuid.UUID(ROOT_ID), "bar")
        assert payload.to_dict() == {
            "token": "foo",
            "parentFolderId": ROOT_ID,
            "folderName": "bar",
        }

    @pytest.mark.parametrize("option,expected", [
        (ContentOption.public(True), {"option": "public", "value": "true"}),
        (ContentOption.public(False), {"option": "public", "value": "false"}),
        (ContentOption.password("bar"), {"option": "password", "value": "bar"}),
        (ContentOption.description("bar"), {"option": "description", "value": "bar"}),
        (
            ContentOption.expire(datetime(2001, 9, 9, 1, 46, 40, tzinfo=timezone.utc)),
            {"option": "expire", "value": 1000000000},
        ),
        (ContentOption.tags(["bar", "baz"]), {"option": "tags", "value": "bar,baz"}),
        (ContentOption.direct_link(False), {"option": "directLink", "value": "false"}),
    ])
    def test_update_content(self, option, expected):
        payload = UpdateContentPayload("foo", FILE_ID, option)
        assert payload.to_dict() == {"token": "foo", "contentId": FILE_ID, **expected}

    def test_expire_naive_datetime_is_utc(self):
        option = ContentOption.expire(datetime(2001, 9, 9, 1, 46, 40))
        assert option.serialized_value() == 1000000000

    def test_expire_keeps_offset(self):
        tz = timezone(timedelta(hours=2))
        option = ContentOption.expire(datetime(2001, 9, 9, 3, 46, 40, tzinfo=tz))
        assert option.serialized_value() == 1000000000

    def test_expire_rejects_non_datetime(self):
        with pytest.raises(ValidationError):
            ContentOption.expire("tomorrow")

    def test_copy_content_joins_ids(self):
        payload = CopyContentPayload("foo", [uuid.UUID(ROOT_ID), PARENT_ID], SUBFOLDER_ID)
        assert payload.to_dict() == {
            "token": "foo",
            "contentsId": f"{ROOT_ID},{PARENT_ID}",
            "folderIdDest": SUBFOLDER_ID,
        }

    def test_delete_content_joins_ids(self):
        payload = DeleteContentPayload("foo", [ROOT_ID, PARENT_ID])
        assert payload.to_dict() == {"token": "foo", "contentsId": f"{ROOT_ID},{PARENT_ID}"}


class TestContentOptionParse:
    @pytest.mark.parametrize("raw,expected", [("true", True), ("YES", True), ("0", False), ("off", False)])
    def test_boolean_words(self, raw, expected):
        assert ContentOption.parse("public", raw) == ContentOption.public(expected)

    def test_direct_link_uses_wire_name(self):
        assert ContentOption.parse("directLink", "true").name is OptionName.DIRECT_LINK

    def test_bad_boolean(self):
        with pytest.raises(ValidationError):
            ContentOption.parse("public", "maybe")

    def test_expire_from_epoch(self):
        option = ContentOption.parse("expire", "1000000000")
        assert option.serialized_value() == 1000000000

    def test_expire_from_iso(self):
        option = ContentOption.parse("expire", "2001-09-09T01:46:40+00:00")
        assert option.serialized_value() == 1000000000

    def test_tags_split_and_strip(self):
        assert ContentOption.parse("tags", " a, b ,,c").value == ("a", "b", "c")

    def test_unknown_option(self):
        with pytest.raises(ValidationError):
            ContentOption.parse("color", "red")
