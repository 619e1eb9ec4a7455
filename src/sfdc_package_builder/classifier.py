"""Metadata type classification - wildcard vs itemized retrieval.

Each described type ends up in exactly one bucket:
- wildcard: retrieved with a single ``*`` member
- itemized: members are listed and written out one by one
- skipped: not selected by the inclusion rules

Folder-organized types (reports, dashboards, documents, email templates) are
itemized through their folder pseudo-type first; the folder records found
there drive a second listing round for the real type.
"""

import logging
from collections.abc import Collection
from collections.abc import Iterable

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .filters import include_metadata_type
from .schema import InclusionConfig
from .schema import ListQuery
from .schema import MetadataItem
from .schema import MetadataTypeDescriptor

logger = logging.getLogger(__name__)


class TypeClassification(BaseModel):
    """Outcome of classifying the describe catalog (immutable data structure)."""

    model_config = ConfigDict(frozen=True)

    wildcard_types: list[MetadataTypeDescriptor] = Field(default_factory=list)
    itemized_types: list[str] = Field(default_factory=list)
    folder_name_to_type: dict[str, str] = Field(default_factory=dict)
    queries: list[ListQuery] = Field(default_factory=list)

    def is_folder_type(self, type_name: str) -> bool:
        """Check whether a listed type name is a folder pseudo-type."""
        return type_name in self.folder_name_to_type

    def new_inventory(self) -> dict[str, list[MetadataItem]]:
        """Fresh itemized inventory with an empty list per itemized type, in registration order."""
        return {type_name: [] for type_name in self.itemized_types}


def classify_types(
    catalog: Iterable[MetadataTypeDescriptor],
    config: InclusionConfig,
    no_wildcard: Collection[str],
) -> TypeClassification:
    """
    Split described metadata types into wildcard and itemized retrieval.

    A selected type is wildcarded only when wildcards are enabled, the type
    supports them for this API version, and managed items of the type would be
    excluded anyway. Everything else that is selected gets itemized.

    Args:
        catalog: Type descriptors in describe-call order
        config: Inclusion policy for the run
        no_wildcard: Type names that cannot be wildcarded for the API version

    Returns:
        TypeClassification with wildcard types, itemized type names, the folder
        pseudo-type mapping and the first-pass listing queries

    Example:
        >>> result = classify_types(catalog, InclusionConfig(all=True), no_wildcard_types("44.0"))
        >>> result.queries[0]
        ListQuery(type='ApexClass', folder=None)
    """
    wildcard_types: list[MetadataTypeDescriptor] = []
    itemized_types: list[str] = []
    folder_name_to_type: dict[str, str] = {}
    queries: list[ListQuery] = []
    seen: set[str] = set()

    for descriptor in catalog:
        if not include_metadata_type(config, descriptor):
            continue

        # A type listed twice by the describe call is only classified once
        if descriptor.xml_name in seen:
            continue
        seen.add(descriptor.xml_name)

        if (
            config.use_wildcards
            and descriptor.xml_name not in no_wildcard
            and config.exclude_managed.applies_to(descriptor.xml_name, descriptor.directory_name)
        ):
            logger.debug(f"Wildcard type: {descriptor.xml_name}")
            wildcard_types.append(descriptor)
            continue

        query_type = descriptor.xml_name
        folder_type = descriptor.folder_type_name
        if folder_type is not None:
            folder_name_to_type[folder_type] = descriptor.xml_name
            query_type = folder_type

        logger.debug(f"Itemized type: {descriptor.xml_name} (query as {query_type})")
        queries.append(ListQuery(type=query_type))
        itemized_types.append(descriptor.xml_name)

    logger.info(f"Classified {len(itemized_types)} itemized and {len(wildcard_types)} wildcard types")

    return TypeClassification(
        wildcard_types=wildcard_types,
        itemized_types=itemized_types,
        folder_name_to_type=folder_name_to_type,
        queries=queries,
    )
