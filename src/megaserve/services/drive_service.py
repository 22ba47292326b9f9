# src/megaserve/services/drive_service.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .outcomes import Ambiguous, Found, NotFound, Outcome
from .path_resolver import list_folder, resolve_path
from .store import Node, NodeTree, RemoteStore
from .upload_buffer import AsyncReadable, staged_upload

log = logging.getLogger(__name__)

FOLDER_NOT_FOUND = "Folder not found"
FILE_NOT_FOUND = "File not found"
SOURCE_OR_DEST_NOT_FOUND = "Source or destination not found"


def download_url(handle: str) -> str:
    return f"/download/{handle}"


class DriveService:
    """Drive operations composed from path resolution and remote store calls."""

    def __init__(self, store: RemoteStore, upload_dir: Path):
        self.store = store
        self.upload_dir = Path(upload_dir)

    async def _tree(self) -> NodeTree:
        # Always a fresh snapshot; nothing is cached between requests.
        return await asyncio.to_thread(self.store.fetch_tree)

    # --- LIST ---

    async def list(self, folder_path: str = "/") -> Outcome:
        tree = await self._tree()
        folder = resolve_path(tree.root, folder_path)
        if folder is None:
            return NotFound(FOLDER_NOT_FOUND)
        return Found({"path": folder_path, "files": list_folder(folder)})

    # --- UPLOAD ---

    async def upload(self, folder_path: str, source: AsyncReadable, original_name: Optional[str],
                     filename: Optional[str] = None, description: str = "") -> Outcome:
        tree = await self._tree()
        parent = resolve_path(tree.root, folder_path)
        if parent is None:
            return NotFound(FOLDER_NOT_FOUND)

        name = filename or original_name
        if not name:
            raise ValueError("Upload has no file name")

        async with staged_upload(source, self.upload_dir) as staged:
            log.info(f"Uploading '{name}' ({staged.size} bytes) to '{folder_path}'")
            node = await asyncio.to_thread(self.store.upload, parent, name, staged.path, staged.size)

        return Found({
            "success": True,
            "name": node.name,
            "handle": node.handle,
            "size": node.size if node.size is not None else staged.size,
            "description": description,
            "downloadUrl": download_url(node.handle),
        })

    # --- DOWNLOAD ---

    async def download(self, handle: str) -> Outcome:
        """Found value is ``(node, byte_iterator)``."""
        tree = await self._tree()
        node = tree.get(handle)
        if node is None or node.is_folder:
            return NotFound(FILE_NOT_FOUND)
        stream = await asyncio.to_thread(self.store.download, node)
        return Found((node, stream))

    # --- MOVE / COPY ---

    def find_source(self, tree: NodeTree, source: Optional[str]) -> Outcome:
        """
        Locates a file by handle, by full path ("/Books/a.pdf") or by bare
        name. A bare name shared by several files is Ambiguous.
        """
        if not source:
            return NotFound(SOURCE_OR_DEST_NOT_FOUND)

        node = tree.get(source)
        if node is not None and not node.is_folder:
            return Found(node)

        if "/" in source:
            folder_path, _, name = source.rpartition("/")
            folder = resolve_path(tree.root, folder_path)
            candidates = [] if folder is None else [
                c for c in folder.children if not c.is_folder and c.name == name
            ]
        else:
            name = source
            candidates = [n for n in tree.files() if n.name == name]

        if not candidates:
            return NotFound(SOURCE_OR_DEST_NOT_FOUND)
        if len(candidates) > 1:
            return Ambiguous(
                f"{len(candidates)} files are named '{name}'; address the source by handle or full path"
            )
        return Found(candidates[0])

    async def _transfer(self, action: str, source: Optional[str], destination: Optional[str]) -> Outcome:
        tree = await self._tree()
        found = self.find_source(tree, source)
        if not isinstance(found, Found):
            return found
        dest = resolve_path(tree.root, destination) if destination is not None else None
        if dest is None:
            return NotFound(SOURCE_OR_DEST_NOT_FOUND)

        node: Node = found.value
        log.info(f"{action.capitalize()} '{node.name}' ({node.handle}) to '{destination}'")
        await asyncio.to_thread(getattr(self.store, action), node, dest)
        return Found(node)

    async def move(self, source: Optional[str], destination: Optional[str]) -> Outcome:
        outcome = await self._transfer("move", source, destination)
        if isinstance(outcome, Found):
            return Found({"success": True, "message": "Moved successfully"})
        return outcome

    async def copy(self, source: Optional[str], destination: Optional[str]) -> Outcome:
        outcome = await self._transfer("copy", source, destination)
        if isinstance(outcome, Found):
            return Found({"success": True, "message": "Copied successfully"})
        return outcome
