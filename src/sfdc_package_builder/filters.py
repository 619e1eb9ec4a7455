"""Inclusion rules for metadata types and listed items."""

from .schema import InclusionConfig
from .schema import ManagedExclusion
from .schema import MetadataItem
from .schema import MetadataTypeDescriptor


def _matches(names: frozenset[str] | None, descriptor: MetadataTypeDescriptor) -> bool:
    """Check a configured name set against a type's xml or directory name."""
    if not names:
        return False
    return descriptor.xml_name in names or descriptor.directory_name in names


def include_metadata_type(config: InclusionConfig, descriptor: MetadataTypeDescriptor) -> bool:
    """Decide whether a described type is part of the build.

    A type is included when ``all`` is set and it is not excluded, or when it is
    explicitly included. Both lists match on xmlName or directoryName.
    """
    excluded = _matches(config.excluded, descriptor)
    included = _matches(config.included, descriptor)
    return (config.all and not excluded) or included


def include_metadata_item(exclude_managed: ManagedExclusion, item: MetadataItem) -> bool:
    """Managed-package filter for a listed item.

    Items that are not explicitly unmanaged are rejected when managed exclusion
    applies to the item's type. Everything else is admitted.
    """
    if not item.is_unmanaged and exclude_managed.applies_to(item.type):
        return False
    return True
