# filename: src/megaserve/main.py
#!/usr/bin/env python3
"""
MegaServe - MEGA File Server
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

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from .api_server.api import create_api_app
from .core.config import ConfigManager
from .core.exceptions import MegaServeError
from .core.logging_config import setup_logging
from .core.version import __app_name__, __version__
from .services.store import RemoteStore


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="megaserve",
        description=f"{__app_name__} v{__version__} - REST gateway to a MEGA cloud drive",
        epilog="Credentials are read from MEGA_EMAIL and MEGA_PASSWORD (environment or .env).",
    )
    parser.add_argument("--host", help="Bind address (env HOST, default 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Listening port (env PORT, default 3000)")
    parser.add_argument("--log-level", help="Log level (env LOG_LEVEL, default INFO)")
    parser.add_argument("--version", action="version", version=f"{__app_name__} {__version__}")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ConfigManager:
    """Environment settings with command-line overrides applied."""
    config = ConfigManager()
    if args.host:
        config.set("host", args.host)
    if args.port:
        config.set("port", args.port)
    if args.log_level:
        config.set("log_level", args.log_level)
    return config


def connect_store(config: ConfigManager) -> RemoteStore:
    """Logs in once and verifies the account is usable before serving."""
    from .services.mega_store import MegaStore

    email, password = config.credentials
    store = MegaStore.connect(email, password)
    store.ready()
    return store


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for MegaServe."""
    args = parse_args(argv)

    try:
        config = load_config(args)
    except MegaServeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    setup_logging(config.get("log_level"), config.log_dir)
    log = logging.getLogger(__name__)
    log.info(f"Starting {__app_name__} v{__version__}")

    try:
        config.validate()
        store = connect_store(config)
    except MegaServeError as e:
        log.critical(f"Failed to start {__app_name__}: {e}")
        return 1

    app = create_api_app(store, config.upload_dir)
    host, port = config.get("host"), config.get("port")
    log.info(f"Server running on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
