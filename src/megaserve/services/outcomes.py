# src/megaserve/services/outcomes.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

"""Typed results of drive operations."""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Found:
    value: Any


@dataclass(frozen=True)
class NotFound:
    message: str


@dataclass(frozen=True)
class Ambiguous:
    message: str


Outcome = Union[Found, NotFound, Ambiguous]
