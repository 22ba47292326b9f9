# src/megaserve/services/path_resolver.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from typing import Any, Dict, List, Optional

from .store import Node


def split_path(path: Optional[str]) -> List[str]:
    """Splits a virtual path on '/', dropping empty segments."""
    if not path:
        return []
    return [part for part in path.split("/") if part]


def resolve_path(root: Node, path: Optional[str]) -> Optional[Node]:
    """
    Walks from ``root`` to the folder named by ``path``.

    Each segment must match a folder child's name exactly; files with the
    same name are skipped. Returns None as soon as a segment has no match.
    """
    current = root
    for part in split_path(path):
        current = next(
            (child for child in current.children if child.is_folder and child.name == part),
            None,
        )
        if current is None:
            return None
    return current


def list_folder(folder: Node) -> List[Dict[str, Any]]:
    """One summary entry per direct child, in store order."""
    return [
        {
            "name": child.name,
            "isFolder": child.is_folder,
            "size": child.size or 0,
            "handle": child.handle,
        }
        for child in folder.children
    ]
