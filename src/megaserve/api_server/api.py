# filename: src/megaserve/api_server/api.py
"""
MegaServe - MEGA File Server - Main API Module
Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.
"""

import logging
from pathlib import Path
from typing import Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core import constants
from ..core.version import __app_name__, __version__
from ..services.drive_service import SOURCE_OR_DEST_NOT_FOUND, DriveService
from ..services.store import RemoteStore
from .drive_router import router as drive_router

log = logging.getLogger(__name__)

# Routes whose malformed bodies mean nothing can be located
TRANSFER_PATHS = ("/move", "/copy")


def _describe_validation_error(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg', 'invalid')}")
    return "Invalid request: " + "; ".join(problems)


# --- FastAPI App Factory ---
def create_api_app(store: RemoteStore, upload_dir: Union[str, Path] = constants.DEFAULT_UPLOAD_DIR) -> FastAPI:
    """
    Builds the HTTP app around an already connected store.
    The store is shared by every request through ``app.state``.
    """
    app = FastAPI(title=f"{__app_name__} API", version=__version__, docs_url=None, redoc_url=None)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    app.state.store = store
    app.state.drive_service = DriveService(store, Path(upload_dir))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        if request.url.path in TRANSFER_PATHS:
            return JSONResponse({"error": SOURCE_OR_DEST_NOT_FOUND}, status_code=404)
        return JSONResponse({"error": _describe_validation_error(exc)}, status_code=400)

    app.include_router(drive_router)
    log.info(f"API ready, staging uploads in {Path(upload_dir).resolve()}")
    return app
