"""Command line entry point: build package.xml from a JSON options file."""

import argparse
import asyncio
import importlib
import logging
import sys
from pathlib import Path

from .exceptions import ConfigurationError
from .pipeline import EXIT_CONFIGURATION_ERROR
from .pipeline import PackageBuilder
from .protocols import SessionConnectorProtocol
from .schema import BuilderOptions

logger = logging.getLogger(__name__)


def load_connector(spec: str) -> SessionConnectorProtocol:
    """Load a connector from ``module:attribute``.

    The attribute is either a connector instance or a zero-argument factory
    (class or function) returning one.

    Raises:
        ConfigurationError: If the module or attribute cannot be loaded
    """
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"Connector must be given as module:attribute, got '{spec}'")

    try:
        target = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Unable to load connector '{spec}': {e}", context={"connector": spec}) from e

    # Classes satisfy the runtime protocol check too, so instantiate them
    if isinstance(target, type) or not isinstance(target, SessionConnectorProtocol):
        if not callable(target):
            raise ConfigurationError(f"'{spec}' does not provide a session connector", context={"connector": spec})
        connector = target()
    else:
        connector = target
    if not isinstance(connector, SessionConnectorProtocol):
        raise ConfigurationError(f"'{spec}' does not provide a session connector", context={"connector": spec})
    return connector


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build a Salesforce package.xml from the org's metadata")
    parser.add_argument("options", type=Path, help="Path to JSON options file")
    parser.add_argument("--connector", required=True, help="Session connector as module:attribute")
    parser.add_argument("--dest", type=Path, help="Override output path")
    parser.add_argument("--api-version", help="Override API version")
    parser.add_argument("--clear-cache", action="store_true", help="Remove the cache directory afterwards")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None, connector: SessionConnectorProtocol | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.dest:
        overrides["dest"] = args.dest
    if args.api_version:
        overrides["api_version"] = args.api_version
    if args.clear_cache:
        overrides["clear_cache"] = True

    try:
        options = BuilderOptions.from_file(args.options).model_copy(update=overrides)
        if connector is None:
            connector = load_connector(args.connector)
        builder = PackageBuilder(options, connector)
    except ConfigurationError as e:
        logger.error(e.message)
        return EXIT_CONFIGURATION_ERROR

    result = asyncio.run(builder.build())
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
