# src/megaserve/services/__init__.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from .drive_service import DriveService
from .outcomes import Ambiguous, Found, NotFound, Outcome
from .path_resolver import list_folder, resolve_path
from .store import FILE, FOLDER, Node, NodeTree, RemoteStore
from .upload_buffer import staged_upload

__all__ = [
    "DriveService",
    "Ambiguous",
    "Found",
    "NotFound",
    "Outcome",
    "list_folder",
    "resolve_path",
    "FILE",
    "FOLDER",
    "Node",
    "NodeTree",
    "RemoteStore",
    "staged_upload",
]
