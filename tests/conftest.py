"""
Shared pytest fixtures for Gofile SDK tests.

Provides canned API payloads and a GofileClient wired to a mocked
requests session.
"""

from unittest.mock import MagicMock

import pytest

from gofile_sdk.client import GofileClient

ROOT_ID = "00000000-0000-0000-0000-000000000001"
PARENT_ID = "00000000-0000-0000-0000-000000000002"
SUBFOLDER_ID = "00000000-0000-0000-0000-000000000003"
FILE_ID = "00000000-0000-0000-0000-000000000004"
MD5_HEX = "000000000000000000000000000001ff"


def ok(data):
    return {"status": "ok", "data": data}


def make_response(body, status_code=200, url="https://api.gofile.io/test"):
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.url = url
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def file_payload():
    return {
        "id": FILE_ID,
        "name": "foz.txt",
        "parentFolder": ROOT_ID,
        "createTime": 1000000003,
        "type": "file",
        "size": 20,
        "downloadCount": 10,
        "md5": MD5_HEX,
        "mimetype": "text/plain",
        "serverChoosen": "store1",
        "link": "https://store1.gofile.io/download/direct/foz.txt",
    }


@pytest.fixture
def folder_payload(file_payload):
    return {
        "id": ROOT_ID,
        "name": "root",
        "parentFolder": PARENT_ID,
        "createTime": 1000000001,
        "type": "folder",
        "code": "bar",
        "childrenIds": [SUBFOLDER_ID, FILE_ID],
        "totalDownloadCount": 10,
        "totalSize": 20,
        "contents": {
            SUBFOLDER_ID: {
                "id": SUBFOLDER_ID,
                "name": "baz",
                "parentFolder": ROOT_ID,
                "createTime": 1000000002,
                "type": "folder",
                "code": "fiz",
                "public": True,
                "childrenIds": [],
            },
            FILE_ID: file_payload,
        },
    }


@pytest.fixture
def uploaded_payload():
    return {
        "downloadPage": "https://gofile.io/d/bar",
        "code": "bar",
        "parentFolder": ROOT_ID,
        "fileId": FILE_ID,
        "fileName": "hello.txt",
        "md5": MD5_HEX,
    }


@pytest.fixture
def account_payload():
    return {
        "id": PARENT_ID,
        "token": "secret-token",
        "email": "user@example.com",
        "tier": "standard",
        "rootFolder": ROOT_ID,
        "filesCount": 3,
        "totalSize": 2048,
    }


@pytest.fixture
def servers_payload():
    return {"servers": [{"name": "store9", "zone": "na"}, {"name": "store1", "zone": "eu"}]}


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session, monkeypatch):
    monkeypatch.delenv("GOFILE_TOKEN", raising=False)
    return GofileClient(token="secret-token", session=session)


@pytest.fixture
def guest_client(session, monkeypatch):
    monkeypatch.delenv("GOFILE_TOKEN", raising=False)
    return GofileClient(session=session)
