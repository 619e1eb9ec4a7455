"""Protocols for the remote metadata service.

The library never negotiates sessions or speaks SOAP itself. Apps provide
connector implementations (zeep, simple-salesforce, recorded fixtures, etc.);
the library only requires these interfaces.
"""

from collections.abc import Sequence
from typing import Protocol
from typing import runtime_checkable

from .schema import Credentials
from .schema import ListQuery
from .schema import MetadataItem
from .schema import MetadataTypeDescriptor


@runtime_checkable
class MetadataServiceProtocol(Protocol):
    """Metadata API operations used by the builder, bound to a live session."""

    async def describe_metadata(self, api_version: str) -> Sequence[MetadataTypeDescriptor]:
        """Return the full catalog of describable metadata types.

        Args:
            api_version: API version to describe (e.g. "44.0")

        Raises:
            Exception: If the describe call fails
        """
        ...

    async def list_metadata(
        self, queries: Sequence[ListQuery], api_version: str
    ) -> Sequence[Sequence[MetadataItem] | None] | None:
        """List metadata components for a batch of queries.

        Args:
            queries: Batch of listing queries (at most the service's per-call ceiling)
            api_version: API version the listing is made as of

        Returns:
            One result set per query, in query order. A result set (or the whole
            response) may be None when nothing matched.

        Raises:
            Exception: If the listing call fails
        """
        ...


@runtime_checkable
class SessionConnectorProtocol(Protocol):
    """Establishes a session and hands back a bound metadata service."""

    async def connect(self, credentials: Credentials, endpoint: str | None) -> MetadataServiceProtocol:
        """Log in and return a metadata service for the session.

        Args:
            credentials: Login data from the build options
            endpoint: Login endpoint override, or None for the connector default

        Raises:
            Exception: If the session cannot be established
        """
        ...
