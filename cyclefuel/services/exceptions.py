"""
Service-level exceptions.

This module contains exceptions that can be raised by various services
in the application. Handlers map them to HTTP status codes.
"""

class CycleFuelError(Exception):
    """Base exception for all domain errors."""
    pass

class NotFoundError(CycleFuelError):
    """Raised when a referenced user, food or record does not exist."""
    pass

class InvalidInputError(CycleFuelError):
    """Raised when input violates a domain constraint."""
    pass

class StrategyError(CycleFuelError):
    """Raised by a recommendation strategy that cannot produce suggestions."""
    pass

class ConcurrentUpdateError(CycleFuelError):
    """Raised when a versioned write loses a race with another writer."""

    def __init__(self, key: str, expected_version: int):
        super().__init__(f"Version conflict on {key} (expected {expected_version})")
        self.key = key
        self.expected_version = expected_version
