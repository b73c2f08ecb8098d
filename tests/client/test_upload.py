"""Tests for the upload flow."""

import json

import pytest

from dsbrowse.client.upload import HEADER_SCAN_BYTES, split_header, upload_file
from dsbrowse.tree.models import ColumnPreference
from dsbrowse.tree.synchronizer import TreeSynchronizer


class TestSplitHeader:
    """Tests for reading the CSV header locally."""

    def test_splits_columns_and_body(self):
        columns, body = split_header(b"id,color\n1,red\n2,blue\n")
        assert columns == [ColumnPreference.automatic("id"), ColumnPreference.automatic("color")]
        assert body == b"1,red\n2,blue\n"

    def test_crlf_and_bom(self):
        columns, body = split_header(b"\xef\xbb\xbfid, color\r\n1,red\r\n")
        assert [c.name for c in columns] == ["id", "color"]
        assert body == b"1,red\r\n"

    def test_header_only(self):
        columns, body = split_header(b"id\n")
        assert [c.name for c in columns] == ["id"]
        assert body == b""

    def test_missing_newline_rejected(self):
        with pytest.raises(ValueError):
            split_header(b"id,color")

    def test_header_must_fit_scan_window(self):
        long_header = b"x" * HEADER_SCAN_BYTES + b"\n1\n"
        with pytest.raises(ValueError):
            split_header(long_header)


class TestUploadFile:
    """Tests for uploading into a folder."""

    async def test_upload_refreshes_folder(self, api, client, settings, make_folder, make_dataset):
        api.children("", make_folder("data"))
        sync = TreeSynchronizer()
        await sync.ensure_path("data", client.fetch_children)
        api.children("data", make_dataset("data/new.csv", upload_status="Uploading"))

        result = await upload_file(
            client, sync, "data", "new.csv", b"age\n1\n2\n", settings=settings
        )

        assert result.success
        assert result.value == "data/new.csv"
        node = sync.find_node("data/new.csv")
        assert node is not None
        assert not node.completed

        request = api.posts[0][1]
        assert b'filename="data/new.csv"' in request.content
        assert b"1\n2\n" in request.content
        assert json.dumps([{"name": "age"}]).encode() in request.content

    async def test_upload_to_root(self, api, client, settings):
        result = await upload_file(
            client, TreeSynchronizer(), "", "top.csv", b"a\n1\n", settings=settings
        )
        assert result.value == "top.csv"

    async def test_bad_header_not_sent(self, api, client, settings):
        result = await upload_file(
            client, TreeSynchronizer(), "", "bad.csv", b"no newline", settings=settings
        )
        assert not result.success
        assert "bad.csv" in result.error
        assert api.posts == []

    async def test_server_failure(self, api, client, settings):
        api.status["/upload_data"] = 413
        result = await upload_file(
            client, TreeSynchronizer(), "", "big.csv", b"a\n1\n", settings=settings
        )
        assert not result.success
        assert "413" in result.error
