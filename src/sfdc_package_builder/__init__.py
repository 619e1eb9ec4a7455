"""sfdc-package-builder - Build package.xml manifests from a Salesforce org's metadata.

The library is mechanism: apps inject the session connector and the options.
"""

from .access import no_wildcard_types
from .access import supported_api_versions
from .batching import LIST_BATCH_SIZE
from .batching import plan_batches
from .classifier import TypeClassification
from .classifier import classify_types
from .exceptions import ConfigurationError
from .exceptions import PackageBuilderError
from .exceptions import RemoteServiceError
from .exceptions import UnknownApiVersionError
from .filters import include_metadata_item
from .filters import include_metadata_type
from .manifest import render_manifest
from .manifest import write_manifest
from .pipeline import EXIT_CONFIGURATION_ERROR
from .pipeline import EXIT_PIPELINE_FAILURE
from .pipeline import EXIT_SUCCESS
from .pipeline import BuildResult
from .pipeline import PackageBuilder
from .pipeline import PipelineState
from .pipeline import build_package
from .protocols import MetadataServiceProtocol
from .protocols import SessionConnectorProtocol
from .resolver import FolderResolver
from .schema import BuilderOptions
from .schema import Credentials
from .schema import InclusionConfig
from .schema import ListQuery
from .schema import ManageableState
from .schema import ManagedExclusion
from .schema import MetadataItem
from .schema import MetadataTypeDescriptor

__all__ = [
    # Data model
    "BuilderOptions",
    "Credentials",
    "InclusionConfig",
    "ListQuery",
    "ManageableState",
    "ManagedExclusion",
    "MetadataItem",
    "MetadataTypeDescriptor",
    # Classification
    "TypeClassification",
    "classify_types",
    "include_metadata_type",
    "no_wildcard_types",
    "supported_api_versions",
    # Listing
    "FolderResolver",
    "LIST_BATCH_SIZE",
    "include_metadata_item",
    "plan_batches",
    # Rendering
    "render_manifest",
    "write_manifest",
    # Pipeline
    "BuildResult",
    "PackageBuilder",
    "PipelineState",
    "build_package",
    "EXIT_SUCCESS",
    "EXIT_CONFIGURATION_ERROR",
    "EXIT_PIPELINE_FAILURE",
    # Protocols
    "MetadataServiceProtocol",
    "SessionConnectorProtocol",
    # Exceptions
    "PackageBuilderError",
    "ConfigurationError",
    "RemoteServiceError",
    "UnknownApiVersionError",
]

__version__ = "0.1.0"
