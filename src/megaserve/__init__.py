"""MegaServe - REST gateway to a MEGA cloud drive."""

from .core.version import __version__

__all__ = ["__version__"]
