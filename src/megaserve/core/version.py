# src/megaserve/core/version.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

__app_name__ = "MegaServe"
__version__ = "1.0.0"
