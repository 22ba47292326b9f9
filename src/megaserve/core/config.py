# src/megaserve/core/config.py
"""
MegaServe - MEGA File Server - Configuration Management
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
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from . import constants
from .exceptions import ConfigurationError

log = logging.getLogger(__name__)

# --- Default Configuration Values ---
# Central source of truth for all application settings and their defaults.

DEFAULT_SETTINGS = {
    "mega_email": None,
    "mega_password": None,
    "host": constants.DEFAULT_HOST,
    "port": constants.DEFAULT_PORT,
    "upload_dir": constants.DEFAULT_UPLOAD_DIR,
    "log_level": constants.DEFAULT_LOG_LEVEL,
    "log_dir": constants.DEFAULT_LOG_DIR,
}

# Setting key -> environment variable
ENV_VARIABLES = {
    "mega_email": "MEGA_EMAIL",
    "mega_password": "MEGA_PASSWORD",
    "host": "HOST",
    "port": "PORT",
    "upload_dir": "UPLOAD_DIR",
    "log_level": "LOG_LEVEL",
    "log_dir": "LOG_DIR",
}


class ConfigManager:
    """
    Manages application settings read from the process environment.

    An optional ``.env`` file in the working directory is loaded first;
    variables already present in the environment take precedence over it.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None, load_env_file: bool = True):
        if load_env_file:
            load_dotenv()
        self._environ = os.environ if environ is None else environ
        self._cache: Dict[str, Any] = {}
        self._load_from_environment()

    def _load_from_environment(self):
        """Loads every known setting, falling back to its default."""
        self._cache = DEFAULT_SETTINGS.copy()
        for key, env_name in ENV_VARIABLES.items():
            value = self._environ.get(env_name)
            if value is not None and value != "":
                self._cache[key] = value

        self._cache["port"] = self._parse_port(self._cache["port"])
        self._cache["log_level"] = self._parse_log_level(self._cache["log_level"])
        log.debug("Configuration loaded from environment.")

    @staticmethod
    def _parse_port(value: Any) -> int:
        try:
            port = int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid port: {value!r}")
        if not 0 < port < 65536:
            raise ConfigurationError(f"Port out of range: {port}")
        return port

    @staticmethod
    def _parse_log_level(value: Any) -> str:
        level = str(value).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigurationError(f"Unknown log level: {value!r}")
        return level

    def get(self, key: str, default: Any = None) -> Any:
        """Gets a configuration value."""
        value = self._cache.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any):
        """Overrides a configuration value for this process (e.g. from CLI flags)."""
        if key not in DEFAULT_SETTINGS:
            log.warning(f"Setting an unknown configuration key: '{key}'")
        if key == "port":
            value = self._parse_port(value)
        elif key == "log_level":
            value = self._parse_log_level(value)
        self._cache[key] = value

    def validate(self):
        """Raises ConfigurationError when the MEGA credentials are missing."""
        missing = [ENV_VARIABLES[k] for k in ("mega_email", "mega_password") if not self._cache.get(k)]
        if missing:
            raise ConfigurationError(f"{' or '.join(missing)} missing")

    @property
    def credentials(self):
        return self._cache["mega_email"], self._cache["mega_password"]

    @property
    def upload_dir(self) -> Path:
        return Path(self._cache["upload_dir"])

    @property
    def log_dir(self) -> Path:
        return Path(self._cache["log_dir"])
