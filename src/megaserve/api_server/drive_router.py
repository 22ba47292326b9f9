# src/megaserve/api_server/drive_router.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import urllib.parse
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import BaseModel

from ..core.constants import HEALTH_MESSAGE
from ..services.drive_service import DriveService
from ..services.outcomes import Ambiguous, Found, NotFound, Outcome

log = logging.getLogger(__name__)

router = APIRouter()

OUTCOME_STATUS = {NotFound: 404, Ambiguous: 409}


# --- Models ---
class TransferPayload(BaseModel):
    source: Optional[str] = None
    destination: Optional[str] = None


# --- Helpers ---
def get_drive_service(request: Request) -> DriveService:
    return request.app.state.drive_service


def outcome_response(outcome: Outcome) -> JSONResponse:
    """Maps a drive outcome to its HTTP response."""
    if isinstance(outcome, Found):
        return JSONResponse(outcome.value)
    return JSONResponse({"error": outcome.message}, status_code=OUTCOME_STATUS[type(outcome)])


def _encode_filename(filename: str) -> str:
    quoted = urllib.parse.quote(filename)
    fallback = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "download"
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{quoted}'


# --- ROUTES ---

@router.get("/", response_class=PlainTextResponse)
async def health():
    return HEALTH_MESSAGE


@router.get("/list")
async def list_files(folder: str = Query("/"), drive: DriveService = Depends(get_drive_service)):
    try:
        return outcome_response(await drive.list(folder))
    except Exception as e:
        log.error(f"List of '{folder}' failed: {e}")
        raise HTTPException(500, str(e))


@router.post("/upload-book")
async def upload_book(
    file: Optional[UploadFile] = File(None),
    folder: str = Form("/"),
    filename: Optional[str] = Form(None),
    description: str = Form(""),
    drive: DriveService = Depends(get_drive_service),
):
    if file is None:
        return JSONResponse({"error": "No file uploaded"}, status_code=400)
    try:
        outcome = await drive.upload(folder, file, file.filename, filename=filename, description=description)
        return outcome_response(outcome)
    except Exception as e:
        log.error(f"Upload to '{folder}' failed: {e}")
        raise HTTPException(500, str(e))
    finally:
        await file.close()


@router.get("/download/{handle}")
async def download(handle: str, drive: DriveService = Depends(get_drive_service)):
    try:
        outcome = await drive.download(handle)
    except Exception as e:
        log.error(f"Download of {handle} failed: {e}")
        raise HTTPException(500, str(e))

    if not isinstance(outcome, Found):
        return outcome_response(outcome)

    node, stream = outcome.value
    headers = {"Content-Disposition": _encode_filename(node.name)}
    if node.size is not None:
        headers["Content-Length"] = str(node.size)
    return StreamingResponse(stream, media_type="application/octet-stream", headers=headers)


@router.post("/move")
async def move(payload: TransferPayload, drive: DriveService = Depends(get_drive_service)):
    try:
        return outcome_response(await drive.move(payload.source, payload.destination))
    except Exception as e:
        log.error(f"Move of '{payload.source}' failed: {e}")
        raise HTTPException(500, str(e))


@router.post("/copy")
async def copy(payload: TransferPayload, drive: DriveService = Depends(get_drive_service)):
    try:
        return outcome_response(await drive.copy(payload.source, payload.destination))
    except Exception as e:
        log.error(f"Copy of '{payload.source}' failed: {e}")
        raise HTTPException(500, str(e))
