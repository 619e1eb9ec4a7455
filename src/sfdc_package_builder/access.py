"""Metadata types that cannot be retrieved with a wildcard, per API version.

Wildcard (``*``) members are rejected or silently incomplete for these types,
so they are always itemized regardless of the ``useWildcards`` option.
"""

from .exceptions import UnknownApiVersionError

_NO_WILDCARD_COMMON = frozenset(
    {
        "ActionOverride",
        "BusinessProcess",
        "CompactLayout",
        "CustomField",
        "CustomLabel",
        "Dashboard",
        "Document",
        "EmailTemplate",
        "FieldSet",
        "Folder",
        "Index",
        "ListView",
        "NamedFilter",
        "RecordType",
        "Report",
        "SharingReason",
        "SharingCriteriaRule",
        "SharingOwnerRule",
        "SharingTerritoryRule",
        "ValidationRule",
        "WebLink",
        "WorkflowAlert",
        "WorkflowFieldUpdate",
        "WorkflowKnowledgePublish",
        "WorkflowOutboundMessage",
        "WorkflowRule",
        "WorkflowSend",
        "WorkflowTask",
    }
)

# StandardValueSet became a metadata type in 38.0
NO_WILDCARD_TYPES: dict[str, frozenset[str]] = {
    "37.0": _NO_WILDCARD_COMMON,
    **{
        f"{version}.0": _NO_WILDCARD_COMMON | {"StandardValueSet"}
        for version in range(38, 45)
    },
}


def supported_api_versions() -> list[str]:
    """API versions with a known wildcard-exclusion table, oldest first."""
    return sorted(NO_WILDCARD_TYPES, key=float)


def no_wildcard_types(api_version: str) -> frozenset[str]:
    """Look up the types that must be itemized for an API version.

    Raises:
        UnknownApiVersionError: If no table exists for the version
    """
    try:
        return NO_WILDCARD_TYPES[api_version]
    except KeyError:
        raise UnknownApiVersionError(
            f"No wildcard support table for API version {api_version} "
            f"(known versions: {', '.join(supported_api_versions())})",
            context={"api_version": api_version},
        ) from None
