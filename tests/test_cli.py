"""Tests for the command line entry point."""

import json

import pytest
from sfdc_package_builder import EXIT_CONFIGURATION_ERROR
from sfdc_package_builder import EXIT_PIPELINE_FAILURE
from sfdc_package_builder import EXIT_SUCCESS
from sfdc_package_builder import ConfigurationError
from sfdc_package_builder.cli import load_connector
from sfdc_package_builder.cli import main


class MockService:
    async def describe_metadata(self, api_version):
        return [{"xmlName": "ApexClass", "directoryName": "classes"}]

    async def list_metadata(self, queries, api_version):
        return [[{"fullName": "Foo", "type": "ApexClass", "manageableState": "unmanaged"}] for _ in queries]


class MockConnector:
    def __init__(self, fail: bool = False):
        self.fail = fail

    async def connect(self, credentials, endpoint):
        if self.fail:
            raise ConnectionError("unreachable")
        return MockService()


def _write_options(tmp_path, **overrides):
    data = {"all": True, "login": {"username": "u", "password": "p"}}
    data.update(overrides)
    options_path = tmp_path / "options.json"
    options_path.write_text(json.dumps(data))
    return options_path


def test_main_success(tmp_path):
    """Test a successful run writes the manifest and exits 0."""
    options_path = _write_options(tmp_path)
    dest = tmp_path / "out" / "package.xml"

    code = main(
        [str(options_path), "--connector", "unused:attr", "--dest", str(dest), "--api-version", "42.0"],
        connector=MockConnector(),
    )

    assert code == EXIT_SUCCESS
    content = dest.read_text(encoding="utf-8")
    assert "<members>Foo</members>" in content
    assert "<version>42.0</version>" in content


def test_main_pipeline_failure(tmp_path):
    """Test remote failures exit with the pipeline failure code."""
    options_path = _write_options(tmp_path, dest=str(tmp_path / "package.xml"))

    code = main([str(options_path), "--connector", "unused:attr"], connector=MockConnector(fail=True))

    assert code == EXIT_PIPELINE_FAILURE
    assert not (tmp_path / "package.xml").exists()


def test_main_missing_login(tmp_path):
    """Test missing credentials exit with the configuration error code."""
    options_path = _write_options(tmp_path, login=None)

    code = main([str(options_path), "--connector", "unused:attr"], connector=MockConnector())

    assert code == EXIT_CONFIGURATION_ERROR


def test_main_missing_options_file(tmp_path):
    """Test an unreadable options file is a configuration error."""
    code = main([str(tmp_path / "missing.json"), "--connector", "unused:attr"], connector=MockConnector())

    assert code == EXIT_CONFIGURATION_ERROR


def test_main_unloadable_connector(tmp_path):
    """Test a connector that cannot be imported is a configuration error."""
    options_path = _write_options(tmp_path)

    code = main([str(options_path), "--connector", "no_such_module_for_tests:Connector"])

    assert code == EXIT_CONFIGURATION_ERROR


def test_load_connector_requires_module_and_attribute():
    """Test malformed connector specs are rejected."""
    with pytest.raises(ConfigurationError, match="module:attribute"):
        load_connector("just_a_module")


def test_load_connector_rejects_non_connectors():
    """Test attributes that are not connectors are rejected."""
    with pytest.raises(ConfigurationError, match="does not provide a session connector"):
        load_connector("json:__name__")


def test_load_connector_instantiates_classes():
    """Test a connector class is instantiated."""
    connector = load_connector(f"{__name__}:MockConnector")

    assert isinstance(connector, MockConnector)
