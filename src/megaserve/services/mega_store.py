# src/megaserve/services/mega_store.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import requests
from Crypto.Cipher import AES
from Crypto.Util import Counter
from mega import Mega
from mega.crypto import a32_to_base64, a32_to_str, base64_url_encode, encrypt_attr, encrypt_key

from ..core import constants
from ..core.exceptions import StoreError, StoreNotReadyError
from .store import FILE, FOLDER, Node, NodeTree, RemoteStore

log = logging.getLogger(__name__)

REQUEST_TIMEOUT = 60


class MegaStore(RemoteStore):
    """RemoteStore backed by a logged-in ``mega.py`` client."""

    def __init__(self, client: Mega):
        self.client = client

    @classmethod
    def connect(cls, email: str, password: str) -> "MegaStore":
        log.info(f"Logging in to MEGA as {email}")
        try:
            client = Mega().login(email, password)
        except Exception as e:
            raise StoreError(f"MEGA login failed: {e}") from e
        return cls(client)

    def ready(self) -> bool:
        try:
            root = self.client.get_node_by_type(constants.NODE_TYPE_ROOT)
        except Exception as e:
            raise StoreNotReadyError(f"MEGA root not reachable: {e}") from e
        if not root:
            raise StoreNotReadyError("MEGA account has no root folder")
        log.info("Connected to MEGA")
        return True

    # --- Tree ---

    def _raw_files(self) -> Dict[str, Dict[str, Any]]:
        return self.client.get_files()

    @staticmethod
    def _to_node(raw: Dict[str, Any]) -> Optional[Node]:
        node_type = raw.get("t")
        if node_type not in (constants.NODE_TYPE_FILE, constants.NODE_TYPE_FOLDER, constants.NODE_TYPE_ROOT):
            return None
        # get_files() only returns nodes whose attributes decrypted
        name = raw["a"].get("n", "")
        is_file = node_type == constants.NODE_TYPE_FILE
        return Node(
            handle=raw["h"],
            name=name,
            kind=FILE if is_file else FOLDER,
            size=raw.get("s") if is_file else None,
            parent=raw.get("p") or None,
            meta=raw,
        )

    def fetch_tree(self) -> NodeTree:
        root = None
        nodes = []
        for raw in self._raw_files().values():
            node = self._to_node(raw)
            if node is None:
                continue
            if raw.get("t") == constants.NODE_TYPE_ROOT:
                node.parent = None
                root = node
            else:
                nodes.append(node)
        if root is None:
            raise StoreError("MEGA returned no root folder")
        return NodeTree.build(root, nodes)

    def _raw_node(self, node: Node) -> Dict[str, Any]:
        if node.meta:
            return node.meta
        raw = self._raw_files().get(node.handle)
        if raw is None:
            raise StoreError(f"Node {node.handle} no longer exists")
        return raw

    # --- Transfers ---

    def upload(self, folder: Node, name: str, source: Path, size: int) -> Node:
        result = self.client.upload(str(source), dest=folder.handle, dest_filename=name)
        try:
            handle = result["f"][0]["h"]
        except (KeyError, IndexError, TypeError) as e:
            raise StoreError(f"Unexpected upload response from MEGA: {result!r}") from e
        log.info(f"Uploaded '{name}' as {handle}")
        return Node(handle=handle, name=name, kind=FILE, size=size, parent=folder.handle)

    def download(self, node: Node) -> Iterator[bytes]:
        raw = self._raw_node(node)
        info = self.client._api_request({"a": "g", "g": 1, "n": node.handle})
        if not isinstance(info, dict) or "g" not in info:
            raise StoreError(f"MEGA refused download of {node.handle}: {info!r}")

        k, iv = raw["k"], raw["iv"]
        counter = Counter.new(128, initial_value=((iv[0] << 32) + iv[1]) << 64)
        aes = AES.new(a32_to_str(k), AES.MODE_CTR, counter=counter)

        response = requests.get(info["g"], stream=True, timeout=REQUEST_TIMEOUT)
        try:
            response.raise_for_status()
        except requests.RequestException:
            response.close()
            raise
        return self._decrypt_stream(response, aes)

    @staticmethod
    def _decrypt_stream(response: requests.Response, aes) -> Iterator[bytes]:
        try:
            for chunk in response.iter_content(chunk_size=constants.DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    yield aes.decrypt(chunk)
        finally:
            response.close()

    # --- Move / Copy ---

    def move(self, node: Node, folder: Node) -> None:
        self.client.move(node.handle, folder.handle)
        log.info(f"Moved {node.handle} into {folder.handle}")

    def copy(self, node: Node, folder: Node) -> None:
        raw = self._raw_node(node)
        encrypted_key = a32_to_base64(encrypt_key(raw["key"], self.client.master_key))
        encrypted_attrs = base64_url_encode(encrypt_attr(raw["a"], raw["k"]))
        self.client._api_request({
            "a": "p",
            "t": folder.handle,
            "n": [{"h": node.handle, "t": constants.NODE_TYPE_FILE, "a": encrypted_attrs, "k": encrypted_key}],
            "i": self.client.request_id,
        })
        log.info(f"Copied {node.handle} into {folder.handle}")
