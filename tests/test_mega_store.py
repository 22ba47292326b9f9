"""Tests for the MEGA adapter against a mocked mega.py client."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

try:
    from Crypto.Cipher import AES
    from Crypto.Util import Counter
    from mega.crypto import a32_to_str

    from megaserve.services import mega_store
except Exception as exc:  # mega.py does not import on every interpreter
    pytest.skip(f"mega.py unavailable: {exc}", allow_module_level=True)

from megaserve.core.exceptions import StoreError, StoreNotReadyError
from megaserve.services.store import FILE, FOLDER, Node

FILE_K = (0x01020304, 0x05060708, 0x090A0B0C, 0x0D0E0F10)
FILE_IV = (0x11111111, 0x22222222, 0, 0)
FILE_KEY = FILE_K + FILE_IV[:2] + (0, 0)

RAW_FILES = {
    "ROOT": {"h": "ROOT", "p": "", "t": 2, "a": {"n": "Cloud Drive"}},
    "INBOX": {"h": "INBOX", "p": "", "t": 3, "a": {"n": "Inbox"}},
    "TRASH": {"h": "TRASH", "p": "", "t": 4, "a": {"n": "Rubbish Bin"}},
    "BOOKS": {"h": "BOOKS", "p": "ROOT", "t": 1, "a": {"n": "Books"}},
    "README": {"h": "README", "p": "ROOT", "t": 0, "s": 10, "a": {"n": "readme.txt"},
               "k": FILE_K, "iv": FILE_IV, "key": FILE_KEY},
    "DELETED": {"h": "DELETED", "p": "TRASH", "t": 0, "s": 4, "a": {"n": "old.txt"}},
}


@pytest.fixture
def client():
    mock = MagicMock()
    mock.get_files.return_value = RAW_FILES
    mock.master_key = (1, 2, 3, 4)
    mock.request_id = "req"
    return mock


@pytest.fixture
def store(client):
    return mega_store.MegaStore(client)


def _encrypt(plaintext: bytes) -> bytes:
    counter = Counter.new(128, initial_value=((FILE_IV[0] << 32) + FILE_IV[1]) << 64)
    return AES.new(a32_to_str(FILE_K), AES.MODE_CTR, counter=counter).encrypt(plaintext)


class TestConnect:
    def test_login_failure_is_store_error(self):
        with patch.object(mega_store, "Mega") as mega_cls:
            mega_cls.return_value.login.side_effect = RuntimeError("bad credentials")
            with pytest.raises(StoreError, match="bad credentials"):
                mega_store.MegaStore.connect("me@example.com", "pw")

    def test_login_success(self):
        with patch.object(mega_store, "Mega") as mega_cls:
            store = mega_store.MegaStore.connect("me@example.com", "pw")
        mega_cls.return_value.login.assert_called_once_with("me@example.com", "pw")
        assert store.client is mega_cls.return_value.login.return_value

    def test_ready(self, store, client):
        client.get_node_by_type.return_value = ("ROOT", RAW_FILES["ROOT"])
        assert store.ready() is True
        client.get_node_by_type.assert_called_once_with(2)

    def test_not_ready_without_root(self, store, client):
        client.get_node_by_type.return_value = None
        with pytest.raises(StoreNotReadyError):
            store.ready()

    def test_not_ready_on_error(self, store, client):
        client.get_node_by_type.side_effect = RuntimeError("EAGAIN")
        with pytest.raises(StoreNotReadyError):
            store.ready()


class TestFetchTree:
    def test_maps_nodes(self, store):
        tree = store.fetch_tree()
        assert tree.root.handle == "ROOT"
        assert tree.root.is_folder
        readme = tree.get("README")
        assert (readme.name, readme.kind, readme.size) == ("readme.txt", FILE, 10)
        assert readme.meta is RAW_FILES["README"]
        books = tree.get("BOOKS")
        assert (books.kind, books.size) == (FOLDER, None)

    def test_skips_inbox_and_trash(self, store):
        tree = store.fetch_tree()
        assert tree.get("INBOX") is None
        assert tree.get("TRASH") is None
        assert tree.get("DELETED") is None

    def test_missing_root(self, store, client):
        client.get_files.return_value = {"X": {"h": "X", "p": "", "t": 1, "a": {"n": "x"}}}
        with pytest.raises(StoreError):
            store.fetch_tree()

    def test_fresh_call_each_time(self, store, client):
        store.fetch_tree()
        store.fetch_tree()
        assert client.get_files.call_count == 2


class TestTransfers:
    def test_upload(self, store, client, tmp_path):
        source = tmp_path / "staged.part"
        source.write_bytes(b"hello")
        client.upload.return_value = {"f": [{"h": "NEW", "t": 0}]}
        folder = Node("BOOKS", "Books", FOLDER)
        node = store.upload(folder, "hello.txt", source, 5)
        client.upload.assert_called_once_with(str(source), dest="BOOKS", dest_filename="hello.txt")
        assert (node.handle, node.name, node.size, node.parent) == ("NEW", "hello.txt", 5, "BOOKS")

    def test_upload_bad_response(self, store, client, tmp_path):
        client.upload.return_value = {"f": []}
        with pytest.raises(StoreError):
            store.upload(Node("ROOT", "", FOLDER), "a", tmp_path / "a", 0)

    def test_download_decrypts_stream(self, store, client):
        plaintext = b"0123456789"
        ciphertext = _encrypt(plaintext)
        client._api_request.return_value = {"g": "https://example.invalid/dl", "s": len(plaintext)}
        response = MagicMock()
        response.iter_content.return_value = [ciphertext[:3], b"", ciphertext[3:]]
        with patch.object(mega_store.requests, "get", return_value=response) as get:
            stream = store.download(Node("README", "readme.txt", FILE, 10))
            assert b"".join(stream) == plaintext
        get.assert_called_once_with("https://example.invalid/dl", stream=True, timeout=mega_store.REQUEST_TIMEOUT)
        client._api_request.assert_called_once_with({"a": "g", "g": 1, "n": "README"})
        response.close.assert_called_once()

    def test_download_error_status_closes_response(self, store, client):
        client._api_request.return_value = {"g": "https://example.invalid/dl", "s": 10}
        response = MagicMock()
        response.raise_for_status.side_effect = mega_store.requests.HTTPError("509 Bandwidth Limit Exceeded")
        with patch.object(mega_store.requests, "get", return_value=response):
            with pytest.raises(mega_store.requests.HTTPError):
                store.download(Node("README", "readme.txt", FILE, 10))
        response.close.assert_called_once()
        response.iter_content.assert_not_called()

    def test_tree_nodes_need_no_second_fetch(self, store, client):
        readme = store.fetch_tree().get("README")
        client._api_request.return_value = {"g": "https://example.invalid/dl", "s": 10}
        response = MagicMock()
        response.iter_content.return_value = [_encrypt(b"0123456789")]
        with patch.object(mega_store.requests, "get", return_value=response):
            assert b"".join(store.download(readme)) == b"0123456789"
        store.copy(readme, store.fetch_tree().get("BOOKS"))
        assert client.get_files.call_count == 2

    def test_download_refused(self, store, client):
        client._api_request.return_value = -9
        with pytest.raises(StoreError):
            store.download(Node("README", "readme.txt", FILE, 10))

    def test_download_vanished_node(self, store):
        with pytest.raises(StoreError):
            store.download(Node("GONE", "gone", FILE, 1))


class TestMoveCopy:
    def test_move(self, store, client):
        store.move(Node("README", "readme.txt"), Node("BOOKS", "Books", FOLDER))
        client.move.assert_called_once_with("README", "BOOKS")

    def test_copy_puts_node_in_target(self, store, client):
        store.copy(Node("README", "readme.txt"), Node("BOOKS", "Books", FOLDER))
        request = client._api_request.call_args[0][0]
        assert request["a"] == "p"
        assert request["t"] == "BOOKS"
        assert request["i"] == "req"
        (put,) = request["n"]
        assert put["h"] == "README"
        assert put["t"] == 0
        assert put["a"] and put["k"]
