"""Custom exceptions for MegaServe application"""


class MegaServeError(Exception):
    """Base exception for MegaServe application"""

    pass


class ConfigurationError(MegaServeError):
    """Configuration-related errors"""

    pass


class StoreError(MegaServeError):
    """Remote store errors"""

    pass


class StoreNotReadyError(StoreError):
    """Remote store failed its readiness check"""

    pass
