"""Package build pipeline (connector-based, mechanism only).

Apps provide:
- a SessionConnectorProtocol implementation (how to log in and call the API)
- BuilderOptions (what to include, where to write)

Stages, each one remote interaction or one pure step:

    INIT -> SESSION_ESTABLISHED -> CLASSIFIED -> FIRST_LIST_COMPLETE
         -> FOLDER_RESOLVED -> RENDERED -> DONE

Any failure moves the pipeline to FAILED and nothing is written. The optional
cache clean-up runs after either outcome.
"""

import logging
import shutil
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from pydantic import ValidationError

from .access import no_wildcard_types
from .classifier import classify_types
from .exceptions import PackageBuilderError
from .exceptions import RemoteServiceError
from .manifest import render_manifest
from .manifest import write_manifest
from .protocols import MetadataServiceProtocol
from .protocols import SessionConnectorProtocol
from .resolver import FolderResolver
from .schema import BuilderOptions
from .schema import MetadataTypeDescriptor

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_CONFIGURATION_ERROR = 3
EXIT_PIPELINE_FAILURE = 6


class PipelineState(StrEnum):
    """Pipeline progress. DONE and FAILED are terminal."""

    INIT = "init"
    SESSION_ESTABLISHED = "session_established"
    CLASSIFIED = "classified"
    FIRST_LIST_COMPLETE = "first_list_complete"
    FOLDER_RESOLVED = "folder_resolved"
    RENDERED = "rendered"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BuildResult:
    """Final outcome of a package build."""

    state: PipelineState
    exit_code: int
    manifest: str | None = None
    dest: Path | None = None
    error: PackageBuilderError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.DONE


class PackageBuilder:
    """
    Build a package manifest from the remote metadata inventory.

    Configuration is validated when the builder is created, so a missing login
    or an empty selection fails before any remote call is attempted.

    Example:
        >>> options = BuilderOptions.from_file(Path("package-options.json"))
        >>> builder = PackageBuilder(options, connector=MyConnector())
        >>> result = await builder.build()
        >>> sys.exit(result.exit_code)
    """

    def __init__(self, options: BuilderOptions, connector: SessionConnectorProtocol):
        """Initialize and validate configuration.

        Args:
            options: Build options for this run
            connector: Session connector provided by the app

        Raises:
            ConfigurationError: If credentials are missing/unreadable or nothing is selected
        """
        self.options = options
        self.connector = connector
        self.credentials = options.load_credentials()
        options.validate_selection()
        self.state = PipelineState.INIT

    def _advance(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {self.state} -> {state}")
        self.state = state

    async def _connect(self) -> MetadataServiceProtocol:
        endpoint = self.credentials.endpoint_for(self.options.api_version)
        logger.info(f"Connecting to metadata service (API {self.options.api_version})")
        try:
            return await self.connector.connect(self.credentials, endpoint)
        except Exception as e:
            raise RemoteServiceError(f"Unable to establish session: {e}", context={"endpoint": endpoint}) from e

    async def _describe(self, service: MetadataServiceProtocol) -> list[MetadataTypeDescriptor]:
        api_version = self.options.api_version
        try:
            catalog = await service.describe_metadata(api_version)
        except Exception as e:
            raise RemoteServiceError(f"Metadata describe failed: {e}", context={"api_version": api_version}) from e

        try:
            return [
                record if isinstance(record, MetadataTypeDescriptor) else MetadataTypeDescriptor.model_validate(record)
                for record in catalog or []
            ]
        except ValidationError as e:
            raise RemoteServiceError(f"Unexpected describe record: {e}", context={"api_version": api_version}) from e

    async def _run(self) -> str:
        options = self.options

        service = await self._connect()
        self._advance(PipelineState.SESSION_ESTABLISHED)

        catalog = await self._describe(service)
        logger.debug(f"Described {len(catalog)} metadata types")
        no_wildcard = no_wildcard_types(options.api_version) if options.use_wildcards else frozenset()
        classification = classify_types(catalog, options.inclusion_config(), no_wildcard)
        self._advance(PipelineState.CLASSIFIED)

        resolver = FolderResolver(
            service=service,
            classification=classification,
            exclude_managed=options.exclude_managed,
            api_version=options.api_version,
            batch_size=options.batch_size,
        )
        inventory = await resolver.resolve(
            on_first_round=lambda: self._advance(PipelineState.FIRST_LIST_COMPLETE),
        )
        self._advance(PipelineState.FOLDER_RESOLVED)

        manifest = render_manifest(inventory, classification.wildcard_types, options.api_version)
        self._advance(PipelineState.RENDERED)

        try:
            write_manifest(manifest, options.dest)
        except OSError as e:
            raise PackageBuilderError(f"Unable to write manifest: {e}", context={"dest": str(options.dest)}) from e
        self._advance(PipelineState.DONE)

        return manifest

    def _clear_cache(self) -> None:
        cache_dir = self.options.cache_dir
        if not cache_dir.exists():
            return
        try:
            shutil.rmtree(cache_dir)
            logger.debug(f"Cleared cache directory {cache_dir}")
        except OSError as e:
            logger.warning(f"Failed to clear cache directory {cache_dir}: {e}")

    async def build(self) -> BuildResult:
        """
        Run the pipeline once.

        Returns:
            BuildResult with DONE state and exit code 0 on success, or FAILED
            state, the error and EXIT_PIPELINE_FAILURE otherwise

        Raises:
            RuntimeError: If this builder has already run
        """
        if self.state != PipelineState.INIT:
            raise RuntimeError(f"PackageBuilder has already run (state: {self.state})")

        try:
            manifest = await self._run()
            result = BuildResult(
                state=PipelineState.DONE,
                exit_code=EXIT_SUCCESS,
                manifest=manifest,
                dest=self.options.dest,
            )
        except Exception as e:
            failed_during = self.state
            self.state = PipelineState.FAILED

            if isinstance(e, PackageBuilderError):
                error = e
            else:
                error = PackageBuilderError(f"Package build failed: {e}")
                error.__cause__ = e

            logger.error(f"Package build failed after state '{failed_during}': {error.message}")
            result = BuildResult(state=PipelineState.FAILED, exit_code=EXIT_PIPELINE_FAILURE, error=error)
        finally:
            if self.options.clear_cache:
                self._clear_cache()

        return result


async def build_package(options: BuilderOptions, connector: SessionConnectorProtocol) -> BuildResult:
    """
    Build a package manifest (convenience wrapper around PackageBuilder).

    Raises:
        ConfigurationError: If configuration is invalid (before any remote call)
    """
    return await PackageBuilder(options, connector).build()
