# src/megaserve/services/store.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

"""Remote store model: nodes, tree snapshots and the client interface."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

FOLDER = "folder"
FILE = "file"


@dataclass
class Node:
    """A file or folder in the remote drive."""

    handle: str
    name: str
    kind: str = FILE
    size: Optional[int] = None
    parent: Optional[str] = None
    children: List["Node"] = field(default_factory=list, repr=False)
    # Store-specific record the node was built from, kept for the rest of the request
    meta: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_folder(self) -> bool:
        return self.kind == FOLDER


class NodeTree:
    """A request-scoped snapshot of the drive: the root plus a flat handle index."""

    def __init__(self, root: Node, nodes: Iterable[Node]):
        self.root = root
        self._index: Dict[str, Node] = {root.handle: root}
        for node in nodes:
            self._index[node.handle] = node

    @classmethod
    def build(cls, root: Node, nodes: Iterable[Node]) -> "NodeTree":
        """
        Links every node to its parent's ``children`` list, keeping input
        order. Nodes not reachable from ``root`` (trash, inbox, orphans) are
        left out of the snapshot.
        """
        by_handle: Dict[str, Node] = {root.handle: root}
        for node in nodes:
            by_handle[node.handle] = node
        for node in by_handle.values():
            node.children = []
        for node in by_handle.values():
            if node is root or node.parent is None:
                continue
            parent = by_handle.get(node.parent)
            if parent is not None and parent.is_folder:
                parent.children.append(node)

        reachable: List[Node] = []
        pending = [root]
        while pending:
            node = pending.pop()
            reachable.append(node)
            pending.extend(node.children)
        return cls(root, reachable)

    def get(self, handle: str) -> Optional[Node]:
        return self._index.get(handle)

    def files(self) -> List[Node]:
        return [n for n in self._index.values() if not n.is_folder]

    def __len__(self):
        return len(self._index)


class RemoteStore:
    """
    Interface to a cloud drive account.

    Implementations are blocking; callers running inside the event loop
    offload them with ``asyncio.to_thread``.
    """

    def ready(self) -> bool:
        """Returns True once the account root is reachable."""
        raise NotImplementedError

    def fetch_tree(self) -> NodeTree:
        """Fetches a fresh snapshot of the whole drive."""
        raise NotImplementedError

    def upload(self, folder: Node, name: str, source: Path, size: int) -> Node:
        """Uploads a local file into ``folder`` and returns the new node."""
        raise NotImplementedError

    def download(self, node: Node) -> Iterator[bytes]:
        """Yields the node's bytes as they arrive from the remote store."""
        raise NotImplementedError

    def move(self, node: Node, folder: Node) -> None:
        raise NotImplementedError

    def copy(self, node: Node, folder: Node) -> None:
        raise NotImplementedError
