"""Exceptions raised by the ranking services."""


class RankingError(Exception):
    """Base class for ranking pipeline errors."""
    pass


class ValidationError(RankingError, ValueError):
    """Request input is invalid (e.g. blank query)."""
    pass


class AuthenticationError(RankingError):
    """Caller session is missing or invalid."""
    pass


class ConfigurationError(RankingError):
    """A required service credential or setting is missing."""
    pass


class RetrievalError(RankingError, RuntimeError):
    """The terminal full-scan retrieval tier failed."""
    pass
