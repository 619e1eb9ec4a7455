"""Tests for type inclusion and managed item filtering."""

from sfdc_package_builder import InclusionConfig
from sfdc_package_builder import ManagedExclusion
from sfdc_package_builder import MetadataItem
from sfdc_package_builder import MetadataTypeDescriptor
from sfdc_package_builder import include_metadata_item
from sfdc_package_builder import include_metadata_type

APEX = MetadataTypeDescriptor(xml_name="ApexClass", directory_name="classes")
REPORT = MetadataTypeDescriptor(xml_name="Report", directory_name="reports", in_folder=True)


def _item(type_name: str, state: str | None) -> MetadataItem:
    return MetadataItem(full_name="Thing", type=type_name, manageable_state=state)


def test_all_includes_everything():
    """Test all=True includes types without explicit lists."""
    config = InclusionConfig(all=True)

    assert include_metadata_type(config, APEX)
    assert include_metadata_type(config, REPORT)


def test_nothing_selected_includes_nothing():
    """Test default config selects no types."""
    assert not include_metadata_type(InclusionConfig(), APEX)


def test_excluded_by_xml_or_directory_name():
    """Test exclusions match on either name."""
    assert not include_metadata_type(InclusionConfig(all=True, excluded=frozenset({"ApexClass"})), APEX)
    assert not include_metadata_type(InclusionConfig(all=True, excluded=frozenset({"classes"})), APEX)
    assert include_metadata_type(InclusionConfig(all=True, excluded=frozenset({"classes"})), REPORT)


def test_included_by_xml_or_directory_name():
    """Test explicit inclusion matches on either name."""
    assert include_metadata_type(InclusionConfig(included=frozenset({"ApexClass"})), APEX)
    assert include_metadata_type(InclusionConfig(included=frozenset({"reports"})), REPORT)
    assert not include_metadata_type(InclusionConfig(included=frozenset({"reports"})), APEX)


def test_explicit_inclusion_beats_exclusion():
    """Test a type both excluded and included is still included."""
    config = InclusionConfig(all=True, included=frozenset({"ApexClass"}), excluded=frozenset({"ApexClass"}))

    assert include_metadata_type(config, APEX)


def test_inclusion_depends_only_on_descriptor():
    """Test repeated calls with different descriptors do not leak state."""
    config = InclusionConfig(included=frozenset({"Report"}))

    results = [include_metadata_type(config, d) for d in (REPORT, APEX, REPORT, APEX)]

    assert results == [True, False, True, False]


def test_unmanaged_items_always_admitted():
    """Test unmanaged items pass even when excluding all managed items."""
    assert include_metadata_item(ManagedExclusion.all(), _item("ApexClass", "unmanaged"))


def test_installed_item_rejected_when_excluding_all():
    """Test managed items are dropped with exclusion for all types."""
    assert not include_metadata_item(ManagedExclusion.all(), _item("ApexClass", "installed"))
    assert not include_metadata_item(ManagedExclusion.all(), _item("Report", "released"))


def test_missing_state_counts_as_managed():
    """Test an item without a manageable state is not treated as unmanaged."""
    assert not include_metadata_item(ManagedExclusion.all(), _item("ApexClass", None))
    assert include_metadata_item(ManagedExclusion.none(), _item("ApexClass", None))


def test_subset_exclusion_matches_item_type():
    """Test subset exclusion only drops managed items of listed types."""
    exclusion = ManagedExclusion.subset(["ApexClass"])

    assert not include_metadata_item(exclusion, _item("ApexClass", "installed"))
    assert include_metadata_item(exclusion, _item("ApexTrigger", "installed"))


def test_no_exclusion_keeps_managed_items():
    """Test managed items are kept when exclusion is off."""
    assert include_metadata_item(ManagedExclusion.none(), _item("ApexClass", "installed"))


def test_item_filter_is_idempotent():
    """Test re-applying the filter to admitted items admits them again."""
    exclusion = ManagedExclusion.subset(["ApexClass"])
    items = [
        _item("ApexClass", "unmanaged"),
        _item("ApexClass", "installed"),
        _item("ApexPage", "installed"),
    ]

    admitted = [item for item in items if include_metadata_item(exclusion, item)]
    readmitted = [item for item in admitted if include_metadata_item(exclusion, item)]

    assert admitted == readmitted
    assert len(admitted) == 2
