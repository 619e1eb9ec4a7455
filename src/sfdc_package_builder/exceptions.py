"""Package builder exceptions.

Configuration problems are raised before any remote call. Everything that goes
wrong while talking to the metadata service surfaces as RemoteServiceError.
"""


class PackageBuilderError(Exception):
    """Base exception for package builder operations.

    ``context`` carries the details worth logging next to the message, such as
    the login endpoint, the API version or the listing queries of a failed round.
    """

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ConfigurationError(PackageBuilderError):
    """Options or credentials are missing or unusable."""


class UnknownApiVersionError(ConfigurationError):
    """No wildcard-exclusion table exists for the requested API version."""


class RemoteServiceError(PackageBuilderError):
    """Session, describe or listing call against the metadata service failed."""
