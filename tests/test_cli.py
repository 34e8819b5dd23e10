"""Tests for the gofile command-line interface."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from gofile_sdk.cli import cli
from gofile_sdk.exceptions import ApiStatusError
from gofile_sdk.models import Content, File, Server, AccountDetails, UploadedFile, ContentOption

from tests.conftest import ROOT_ID, FILE_ID, SUBFOLDER_ID


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def api():
    """Patch the client class used by the CLI and return the shared instance."""
    with patch("gofile_sdk.cli.GofileClient") as client_class:
        instance = MagicMock()
        instance.auth.token = "secret-token"
        instance.auth.mask.return_value = "secr...oken"
        client_class.return_value = instance
        instance.client_class = client_class
        yield instance


def invoke(runner, *args, **kwargs):
    return runner.invoke(cli, ["--token", "secret-token", *args], **kwargs)


def test_server_marks_preferred(runner, api):
    api.get_servers.return_value = [Server("store9", "na"), Server("store1", "eu")]
    result = invoke(runner, "server")
    assert result.exit_code == 0
    assert "store9" in result.output
    assert "store1" in result.output
    assert "✓" in result.output


def test_zone_any_is_passed_as_none(runner, api):
    api.get_servers.return_value = []
    result = invoke(runner, "--zone", "any", "server")
    assert result.exit_code == 0
    assert api.client_class.call_args.kwargs["zone"] is None


def test_account(runner, api, account_payload):
    api.get_account_details.return_value = AccountDetails.from_dict(account_payload)
    result = invoke(runner, "account")
    assert result.exit_code == 0
    assert "user@example.com" in result.output
    assert "secr...oken" in result.output
    assert "secret-token" not in result.output


def test_api_error_exits_nonzero(runner, api):
    api.get_account_details.side_effect = ApiStatusError("https://api.gofile.io/getAccountDetails", "error-auth")
    result = invoke(runner, "account")
    assert result.exit_code == 1
    assert "error-auth" in result.output


def test_content_as_json(runner, api, folder_payload):
    api.get_content.return_value = Content.from_dict(folder_payload)
    result = invoke(runner, "content", ROOT_ID, "--json")
    assert result.exit_code == 0
    assert Content.from_dict(json.loads(result.output)) == Content.from_dict(folder_payload)


def test_content_from_url(runner, api, folder_payload):
    api.get_content_from_url.return_value = Content.from_dict(folder_payload)
    result = invoke(runner, "content", "https://gofile.io/d/bar")
    assert result.exit_code == 0
    api.get_content_from_url.assert_called_once_with("https://gofile.io/d/bar")
    assert "baz" in result.output
    assert "foz.txt" in result.output


def test_content_file(runner, api, file_payload):
    api.get_content.return_value = File.from_dict(file_payload)
    result = invoke(runner, "content", FILE_ID)
    assert result.exit_code == 0
    assert "foz.txt" in result.output
    assert "text/plain" in result.output


def test_mkdir(runner, api, folder_payload):
    api.create_folder.return_value = Content.from_dict(folder_payload["contents"][SUBFOLDER_ID])
    result = invoke(runner, "mkdir", ROOT_ID, "baz")
    assert result.exit_code == 0
    api.create_folder.assert_called_once_with(ROOT_ID, "baz")
    assert "Created folder: baz" in result.output


def test_set_option_parses_value(runner, api):
    result = invoke(runner, "set-option", FILE_ID, "public", "yes")
    assert result.exit_code == 0
    api.set_option.assert_called_once_with(FILE_ID, ContentOption.public(True))


def test_set_option_rejects_bad_value(runner, api):
    result = invoke(runner, "set-option", FILE_ID, "public", "maybe")
    assert result.exit_code == 1
    api.set_option.assert_not_called()


def test_set_option_rejects_unknown_option(runner, api):
    result = invoke(runner, "set-option", FILE_ID, "color", "red")
    assert result.exit_code == 2


def test_copy(runner, api):
    result = invoke(runner, "copy", FILE_ID, SUBFOLDER_ID, "--to", ROOT_ID)
    assert result.exit_code == 0
    api.copy_content.assert_called_once_with((FILE_ID, SUBFOLDER_ID), ROOT_ID)


def test_delete_requires_confirmation(runner, api):
    result = invoke(runner, "delete", FILE_ID, input="n\n")
    assert result.exit_code == 1
    api.delete_content.assert_not_called()

    result = invoke(runner, "delete", FILE_ID, "--yes")
    assert result.exit_code == 0
    api.delete_content.assert_called_once_with((FILE_ID,))


def test_link_prints_url(runner, api):
    api.get_direct_link.return_value = "https://store1.gofile.io/download/direct/foz.txt"
    result = invoke(runner, "link", FILE_ID)
    assert result.exit_code == 0
    assert result.output.strip() == "https://store1.gofile.io/download/direct/foz.txt"


def test_unlink(runner, api):
    result = invoke(runner, "unlink", FILE_ID)
    assert result.exit_code == 0
    api.disable_direct_link.assert_called_once_with(FILE_ID)


def test_guest_upload_batch_shares_folder(runner, api, tmp_path, uploaded_payload):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("a")
    second.write_text("b")

    api.auth.token = None
    api.get_server.return_value = Server("store1", "eu")
    guest = dict(uploaded_payload, guestToken="guest-token")
    api.upload_file.return_value = UploadedFile.from_dict(guest)

    result = runner.invoke(cli, ["upload", str(first), str(second)], env={"GOFILE_TOKEN": None})

    assert result.exit_code == 0
    assert api.upload_file.call_count == 2
    first_call, second_call = api.upload_file.call_args_list
    assert first_call.kwargs["folder_id"] is None
    assert second_call.kwargs["folder_id"] == ROOT_ID
    assert api.auth.token == "guest-token"
    assert api.get_server.call_count == 1


def test_download(runner, api, tmp_path, file_payload):
    api.get_content.return_value = File.from_dict(file_payload)
    api.download_file.return_value = tmp_path / "foz.txt"
    result = invoke(runner, "download", FILE_ID, "-o", str(tmp_path))
    assert result.exit_code == 0
    assert api.download_file.call_args.args[1] == str(tmp_path)


def test_download_rejects_folder(runner, api, folder_payload):
    api.get_content.return_value = Content.from_dict(folder_payload)
    result = invoke(runner, "download", ROOT_ID)
    assert result.exit_code == 1
    api.download_file.assert_not_called()

