"""Folder resolver - Turn listing results into an itemized inventory.

Folder-organized types are modelled by the metadata service as two entities:
the folder container and its members. Members can only be listed by naming
the containing folder, so resolution takes two rounds:

1. List every itemized type (folder types through their folder pseudo-type).
2. List the contents of every folder found in round 1.

The service and classification are injected; the resolver holds no state
between runs.
"""

import asyncio
import logging
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Sequence

from pydantic import ValidationError

from .batching import LIST_BATCH_SIZE
from .batching import plan_batches
from .classifier import TypeClassification
from .exceptions import RemoteServiceError
from .filters import include_metadata_item
from .protocols import MetadataServiceProtocol
from .schema import ListQuery
from .schema import ManagedExclusion
from .schema import MetadataItem

logger = logging.getLogger(__name__)


def _as_item(record: MetadataItem | dict) -> MetadataItem:
    """Accept raw listing records (camelCase dicts) as well as MetadataItem."""
    if isinstance(record, MetadataItem):
        return record
    try:
        return MetadataItem.model_validate(record)
    except ValidationError as e:
        raise RemoteServiceError(f"Unexpected listing record: {record!r}", context={"error": str(e)}) from e


class FolderResolver:
    """
    Resolve itemized types and folder contents via batched listing calls.

    Listing calls within a round are issued concurrently and the round waits
    for all of them. A single failed call fails the whole round.
    """

    def __init__(
        self,
        service: MetadataServiceProtocol,
        classification: TypeClassification,
        exclude_managed: ManagedExclusion,
        api_version: str,
        batch_size: int = LIST_BATCH_SIZE,
    ):
        """Initialize resolver with a bound service and the run's classification.

        Args:
            service: Metadata service for the established session
            classification: Output of classify_types for this run
            exclude_managed: Managed-item exclusion policy
            api_version: API version listings are made as of
            batch_size: Maximum queries per listing call
        """
        self.service = service
        self.classification = classification
        self.exclude_managed = exclude_managed
        self.api_version = api_version
        self.batch_size = batch_size

    async def list_round(self, queries: Sequence[ListQuery]) -> list[MetadataItem]:
        """
        Run one listing round: batch, fan out, fan in.

        Args:
            queries: Listing queries for this round

        Returns:
            All returned items flattened in batch and query order

        Raises:
            RemoteServiceError: If any listing call in the round fails
        """
        batches = plan_batches(queries, self.batch_size)
        if not batches:
            return []

        logger.debug(f"Listing {len(queries)} queries in {len(batches)} batches")
        try:
            # The task group cancels and awaits the remaining batches once one fails
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(self.service.list_metadata(batch, self.api_version)) for batch in batches]
        except ExceptionGroup as eg:
            first = eg.exceptions[0]
            raise RemoteServiceError(
                f"Metadata listing failed: {first}",
                context={
                    "api_version": self.api_version,
                    "queries": [q.model_dump() for q in queries],
                    "errors": [str(e) for e in eg.exceptions],
                },
            ) from first

        items: list[MetadataItem] = []
        for response in (task.result() for task in tasks):
            # Nothing matched for any query in the batch
            if not response:
                continue
            for result_set in response:
                if result_set:
                    items.extend(_as_item(record) for record in result_set)
        return items

    def _admit(self, item: MetadataItem, inventory: dict[str, list[MetadataItem]]) -> None:
        if item.type not in inventory:
            logger.debug(f"Skipping {item.full_name}: type {item.type} is not itemized")
            return
        if not include_metadata_item(self.exclude_managed, item):
            logger.debug(f"Excluding managed item {item.type}/{item.full_name} ({item.manageable_state})")
            return
        inventory[item.type].append(item)

    def collect_first_pass(
        self,
        items: Iterable[MetadataItem],
        inventory: dict[str, list[MetadataItem]],
    ) -> list[ListQuery]:
        """
        Sort first-round items into the inventory and folder content queries.

        Folder records are not content: each one becomes a query for the real
        type scoped to that folder. Other items go through the managed filter.

        Args:
            items: Items returned by the first listing round
            inventory: Itemized inventory to append admitted items to

        Returns:
            Folder content queries, in the order the folders were listed
        """
        folder_queries: list[ListQuery] = []
        for item in items:
            if self.classification.is_folder_type(item.type):
                content_type = self.classification.folder_name_to_type[item.type]
                folder_queries.append(ListQuery(type=content_type, folder=item.full_name))
            else:
                self._admit(item, inventory)

        logger.debug(f"Found {len(folder_queries)} folders to expand")
        return folder_queries

    def collect_folder_contents(
        self,
        items: Iterable[MetadataItem],
        inventory: dict[str, list[MetadataItem]],
    ) -> None:
        """Append folder content items that pass the managed filter."""
        for item in items:
            self._admit(item, inventory)

    async def resolve(
        self,
        inventory: dict[str, list[MetadataItem]] | None = None,
        on_first_round: Callable[[], None] | None = None,
    ) -> dict[str, list[MetadataItem]]:
        """
        Run both listing rounds and return the filled inventory.

        Args:
            inventory: Inventory to fill (default: classification.new_inventory())
            on_first_round: Called once the first round is collected, before
                folder contents are listed

        Returns:
            Inventory mapping itemized type name to admitted items

        Raises:
            RemoteServiceError: If any listing call fails
        """
        if inventory is None:
            inventory = self.classification.new_inventory()

        first_pass = await self.list_round(self.classification.queries)
        folder_queries = self.collect_first_pass(first_pass, inventory)
        if on_first_round is not None:
            on_first_round()

        folder_contents = await self.list_round(folder_queries)
        self.collect_folder_contents(folder_contents, inventory)

        return inventory
