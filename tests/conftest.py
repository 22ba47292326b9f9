"""
Shared pytest fixtures for the MegaServe test suite.

``FakeStore`` is an in-memory RemoteStore: every ``fetch_tree`` call builds
brand-new Node objects, the same way the MEGA adapter does.
"""

import itertools
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient

from megaserve.api_server.api import create_api_app
from megaserve.core.exceptions import StoreError
from megaserve.services.drive_service import DriveService
from megaserve.services.store import FILE, FOLDER, Node, NodeTree, RemoteStore

ROOT_HANDLE = "root"


class FakeStore(RemoteStore):
    def __init__(self, chunk_size: int = 4):
        self.chunk_size = chunk_size
        self._entries: Dict[str, dict] = {}
        self._ids = itertools.count(1)
        self.fail_upload = False
        self.uploaded_from: List[Path] = []
        self.calls: List[tuple] = []

    # --- fixture helpers ---

    def _add(self, name: str, kind: str, parent: str, data: Optional[bytes], size: Optional[int]) -> str:
        handle = f"h{next(self._ids)}"
        self._entries[handle] = {"name": name, "kind": kind, "parent": parent, "data": data, "size": size}
        return handle

    def add_folder(self, name: str, parent: str = ROOT_HANDLE) -> str:
        return self._add(name, FOLDER, parent, None, None)

    def add_file(self, name: str, data: bytes = b"", parent: str = ROOT_HANDLE, size: Optional[int] = -1) -> str:
        return self._add(name, FILE, parent, data, len(data) if size == -1 else size)

    def parent_of(self, handle: str) -> str:
        return self._entries[handle]["parent"]

    def handles_named(self, name: str) -> List[str]:
        return [h for h, e in self._entries.items() if e["name"] == name]

    # --- RemoteStore ---

    def ready(self) -> bool:
        return True

    def fetch_tree(self) -> NodeTree:
        root = Node(ROOT_HANDLE, "Cloud Drive", FOLDER)
        nodes = [
            Node(handle, e["name"], e["kind"], e["size"], e["parent"])
            for handle, e in self._entries.items()
        ]
        return NodeTree.build(root, nodes)

    def upload(self, folder: Node, name: str, source: Path, size: int) -> Node:
        self.uploaded_from.append(Path(source))
        if self.fail_upload:
            raise StoreError("remote upload failed")
        data = Path(source).read_bytes()
        handle = self.add_file(name, data, parent=folder.handle)
        return Node(handle, name, FILE, size, folder.handle)

    def download(self, node: Node) -> Iterator[bytes]:
        data = self._entries[node.handle]["data"]
        return iter([data[i:i + self.chunk_size] for i in range(0, len(data), self.chunk_size)])

    def move(self, node: Node, folder: Node) -> None:
        self.calls.append(("move", node.handle, folder.handle))
        self._entries[node.handle]["parent"] = folder.handle

    def copy(self, node: Node, folder: Node) -> None:
        self.calls.append(("copy", node.handle, folder.handle))
        entry = self._entries[node.handle]
        self._add(entry["name"], entry["kind"], folder.handle, entry["data"], entry["size"])


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def upload_dir(tmp_path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def drive(store, upload_dir) -> DriveService:
    return DriveService(store, upload_dir)


@pytest.fixture
def client(store, upload_dir):
    with TestClient(create_api_app(store, upload_dir)) as test_client:
        yield test_client
