# filename: src/megaserve/core/constants.py
"""
MegaServe - MEGA File Server - Constants Module
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

# --- Core Application Settings ---
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"

# --- Directories (relative to the working directory unless absolute) ---
DEFAULT_UPLOAD_DIR = "uploads"
DEFAULT_LOG_DIR = "logs"
LOG_FILENAME = "megaserve.log"

# --- Transfers ---
UPLOAD_CHUNK_SIZE = 1024 * 1024  # 1MB
DOWNLOAD_CHUNK_SIZE = 1024 * 1024  # 1MB

# --- MEGA node types ---
NODE_TYPE_FILE = 0
NODE_TYPE_FOLDER = 1
NODE_TYPE_ROOT = 2

HEALTH_MESSAGE = "MEGA File Server is running"
