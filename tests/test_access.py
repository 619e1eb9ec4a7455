"""Tests for the per-version wildcard exclusion table."""

import pytest
from sfdc_package_builder import UnknownApiVersionError
from sfdc_package_builder import no_wildcard_types
from sfdc_package_builder import supported_api_versions


def test_default_version_known():
    """Test the default API version has a table."""
    types = no_wildcard_types("44.0")

    assert "Report" in types
    assert "Dashboard" in types
    assert "StandardValueSet" in types
    assert "ApexClass" not in types


def test_standard_value_set_only_from_38():
    """Test StandardValueSet is absent before it existed."""
    assert "StandardValueSet" not in no_wildcard_types("37.0")
    assert "StandardValueSet" in no_wildcard_types("38.0")


def test_supported_versions_sorted():
    """Test versions are listed oldest first."""
    versions = supported_api_versions()

    assert versions[0] == "37.0"
    assert versions[-1] == "44.0"


def test_unknown_version_fails():
    """Test an unknown version raises instead of allowing unsafe wildcards."""
    with pytest.raises(UnknownApiVersionError, match="99.0") as exc_info:
        no_wildcard_types("99.0")

    assert exc_info.value.context == {"api_version": "99.0"}
