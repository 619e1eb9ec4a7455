"""Package builder data model - metadata records, options and credentials.

Remote records accept the metadata service's camelCase field names as well as
snake_case names, so connectors can hand over raw payloads unchanged.
"""

import json
import logging
from collections.abc import Iterable
from collections.abc import Mapping
from enum import StrEnum
from os import PathLike
from pathlib import Path
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "44.0"

# Folder pseudo-type for EmailTemplate does not follow the <type>Folder pattern
_FOLDER_TYPE_OVERRIDES = {"EmailTemplate": "EmailFolder"}


class ManageableState(StrEnum):
    """Package ownership state reported for a listed metadata item."""

    BETA = "beta"
    DELETED = "deleted"
    DEPRECATED = "deprecated"
    DEPRECATED_EDITABLE = "deprecatedEditable"
    INSTALLED = "installed"
    INSTALLED_EDITABLE = "installedEditable"
    RELEASED = "released"
    UNMANAGED = "unmanaged"


class MetadataTypeDescriptor(BaseModel):
    """One describable metadata type from the describe call (immutable)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    xml_name: str = Field(alias="xmlName")
    directory_name: str = Field(default="", alias="directoryName")
    in_folder: bool = Field(default=False, alias="inFolder")
    suffix: str | None = None
    meta_file: bool = Field(default=False, alias="metaFile")
    child_xml_names: list[str] = Field(default_factory=list, alias="childXmlNames")

    @property
    def folder_type_name(self) -> str | None:
        """Name of the folder pseudo-type that contains this type's members.

        Returns:
            "EmailFolder" for EmailTemplate, "<xmlName>Folder" for other folder
            types, None when the type is not folder-organized
        """
        if not self.in_folder:
            return None
        return _FOLDER_TYPE_OVERRIDES.get(self.xml_name, f"{self.xml_name}Folder")


class MetadataItem(BaseModel):
    """A concrete metadata component returned by a listing call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    full_name: str = Field(alias="fullName")
    type: str
    manageable_state: ManageableState | None = Field(default=None, alias="manageableState")
    namespace_prefix: str | None = Field(default=None, alias="namespacePrefix")
    file_name: str | None = Field(default=None, alias="fileName")

    @property
    def is_unmanaged(self) -> bool:
        """True only when the service explicitly reports the item as unmanaged."""
        return self.manageable_state == ManageableState.UNMANAGED


class ListQuery(BaseModel):
    """One listing query: a metadata type, optionally scoped to a folder."""

    model_config = ConfigDict(frozen=True)

    type: str
    folder: str | None = None


class ManagedExclusion(BaseModel):
    """Which types have managed (installed package) items excluded.

    Variants:
    - none: keep managed items everywhere
    - all: drop managed items for every type
    - subset: drop managed items only for the listed type or directory names
    """

    model_config = ConfigDict(frozen=True)

    mode: Literal["none", "all", "subset"] = "none"
    types: frozenset[str] = frozenset()

    @classmethod
    def none(cls) -> "ManagedExclusion":
        return cls(mode="none")

    @classmethod
    def all(cls) -> "ManagedExclusion":
        return cls(mode="all")

    @classmethod
    def subset(cls, types: Iterable[str]) -> "ManagedExclusion":
        return cls(mode="subset", types=frozenset(types))

    @classmethod
    def from_option(cls, value: Any) -> "ManagedExclusion":
        """Build from the user-facing option value.

        Args:
            value: False/None, True, an iterable of type names, or a ManagedExclusion

        Returns:
            Matching ManagedExclusion variant

        Raises:
            TypeError: If value is none of the accepted shapes
        """
        if isinstance(value, ManagedExclusion):
            return value
        if value is None or value is False:
            return cls.none()
        if value is True:
            return cls.all()
        if isinstance(value, str):
            return cls.subset([value])
        if isinstance(value, Iterable):
            return cls.subset(value)
        raise TypeError(f"excludeManaged must be a bool or a list of type names, got {type(value).__name__}")

    def applies_to(self, *names: str) -> bool:
        """Check whether managed items of a type (given by any of its names) are excluded."""
        if self.mode == "all":
            return True
        if self.mode == "subset":
            return any(name in self.types for name in names)
        return False


class InclusionConfig(BaseModel):
    """User selection policy for one run."""

    model_config = ConfigDict(frozen=True)

    all: bool = False
    included: frozenset[str] | None = None
    excluded: frozenset[str] | None = None
    use_wildcards: bool = False
    exclude_managed: ManagedExclusion = Field(default_factory=ManagedExclusion.none)


class Credentials(BaseModel):
    """Login data handed to the session connector.

    Only the optional ``url`` override is interpreted here; every other key is
    passed through to the connector untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    username: str | None = None
    password: str | None = Field(default=None, repr=False)
    token: str | None = Field(default=None, repr=False)
    url: str | None = None

    def endpoint_for(self, api_version: str) -> str | None:
        """SOAP endpoint for the url override, or None to use the connector default."""
        if not self.url:
            return None
        return f"{self.url.rstrip('/')}/services/Soap/u/{api_version}"

    @classmethod
    def from_source(cls, source: Mapping[str, Any] | str | PathLike) -> "Credentials":
        """Load credentials from an inline mapping or a JSON file path.

        Raises:
            ConfigurationError: If the source cannot be read or parsed
        """
        try:
            if isinstance(source, Mapping):
                return cls.model_validate(dict(source))

            with open(source, encoding="utf-8") as f:
                data = json.load(f)
            return cls.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            # Inline sources hold secrets and are not echoed into the context
            described = "inline" if isinstance(source, Mapping) else str(source)
            raise ConfigurationError("Unable to read login", context={"source": described, "error": str(e)}) from e


class BuilderOptions(BaseModel):
    """Options for one package build.

    Field names follow the JSON options file (camelCase); snake_case works too.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    all: bool = False
    included: frozenset[str] | None = None
    excluded: frozenset[str] | None = None
    use_wildcards: bool = Field(default=False, alias="useWildcards")
    exclude_managed: ManagedExclusion = Field(default_factory=ManagedExclusion.none, alias="excludeManaged")
    api_version: str = Field(default=DEFAULT_API_VERSION, alias="apiVersion")
    dest: Path = Path("package.xml")
    clear_cache: bool = Field(default=False, alias="clearCache")
    cache_dir: Path = Field(default=Path(".sfdc_package_builder"), alias="cacheDir")
    batch_size: int = Field(default=3, ge=1, alias="batchSize")
    login: dict[str, Any] | str | None = None

    @field_validator("exclude_managed", mode="before")
    @classmethod
    def _coerce_exclude_managed(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value
        return ManagedExclusion.from_option(value)

    @field_validator("api_version", mode="before")
    @classmethod
    def _coerce_api_version(cls, value: Any) -> Any:
        # 44 and 44.0 in a JSON file both mean "44.0"
        if isinstance(value, int | float) and not isinstance(value, bool):
            return f"{float(value):.1f}"
        return value

    @classmethod
    def from_file(cls, options_path: Path) -> "BuilderOptions":
        """Load options from a JSON file.

        Raises:
            ConfigurationError: If the file is missing, not JSON, or has invalid values
        """
        try:
            with open(options_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Unable to read options file {options_path}: {e}", context={"path": str(options_path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Options file {options_path} must contain a JSON object", context={"path": str(options_path)}
            )

        return cls.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BuilderOptions":
        """Validate options from a mapping, turning validation failures into ConfigurationError."""
        try:
            return cls.model_validate(dict(data))
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid options: {e}") from e

    def inclusion_config(self) -> InclusionConfig:
        return InclusionConfig(
            all=self.all,
            included=self.included,
            excluded=self.excluded,
            use_wildcards=self.use_wildcards,
            exclude_managed=self.exclude_managed,
        )

    def validate_selection(self) -> None:
        """Make sure something was requested at all.

        Raises:
            ConfigurationError: If neither ``all`` nor ``included`` selects anything
        """
        if not self.all and not self.included:
            raise ConfigurationError(
                'No metadata requested - specify either "all" or specific metadata in "included"'
            )

    def load_credentials(self) -> Credentials:
        """Resolve the ``login`` option into Credentials.

        Raises:
            ConfigurationError: If login is missing or unreadable
        """
        if not self.login:
            raise ConfigurationError("Login credentials missing")

        credentials = Credentials.from_source(self.login)
        logger.debug(f"Loaded credentials (url override: {credentials.url or 'none'})")
        return credentials
