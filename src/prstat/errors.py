"""Custom exception types for the pull-request statistics generator."""


class PRStatError(Exception):
    """Base exception for all expected prstat failures."""


class ConfigurationError(PRStatError):
    """Raised when runtime configuration values are missing or invalid."""


class UsageError(ConfigurationError):
    """Raised when neither a search query nor an input log is supplied."""


class AuthenticationError(PRStatError):
    """Raised when GitHub credentials are unavailable."""


class ApiError(PRStatError):
    """Raised when a GitHub API request fails or returns an unexpected response."""


class InvalidInputError(PRStatError):
    """Raised for an unparseable start date or a record lacking required timestamps."""


class ParseError(PRStatError):
    """Raised when a local pull-request log file is malformed."""
