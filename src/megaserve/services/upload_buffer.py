# src/megaserve/services/upload_buffer.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Protocol

import aiofiles

from ..core.constants import UPLOAD_CHUNK_SIZE

log = logging.getLogger(__name__)


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


@dataclass
class StagedFile:
    path: Path
    size: int


def _unlink(path: Path):
    try:
        path.unlink()
    except FileNotFoundError:
        pass


@asynccontextmanager
async def staged_upload(source: AsyncReadable, upload_dir: Path,
                        chunk_size: int = UPLOAD_CHUNK_SIZE) -> AsyncIterator[StagedFile]:
    """
    Copies an inbound upload into a temporary file under ``upload_dir``.

    The file is removed when the block exits, whether the copy, the remote
    transfer or anything else in between raised.
    """
    upload_dir = Path(upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    part_file = upload_dir / f"{uuid.uuid4().hex}.part"

    try:
        async with aiofiles.open(part_file, "wb") as f:
            while chunk := await source.read(chunk_size):
                await f.write(chunk)

        size = (await asyncio.to_thread(part_file.stat)).st_size
        log.debug(f"Staged {size} bytes at {part_file}")
        yield StagedFile(part_file, size)
    finally:
        await asyncio.to_thread(_unlink, part_file)
