"""
Service Layer Exceptions

Custom exceptions for the VisualizerService and related orchestration logic.
"""


class SessionNotFoundError(ValueError):
    """Raised when a session id does not refer to a live session."""
    pass
