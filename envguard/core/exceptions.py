"""Core exceptions for envguard."""


class EnvGuardError(Exception):
    """Base exception for all envguard errors."""

    def __init__(self, message: str, details: dict = None):
        """Initialize the exception."""
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(EnvGuardError):
    """Raised when configuration is invalid."""

    pass


class PatternLoadError(EnvGuardError):
    """Raised when a detection rules file cannot be loaded."""

    pass


class EnvFileError(EnvGuardError):
    """Raised when an env file exists but cannot be read."""

    pass


class ValidationError(EnvGuardError):
    """Raised when data validation fails."""

    pass
