"""package.xml rendering.

Manifest format:

    <?xml version="1.0" encoding="UTF-8"?>
    <Package xmlns="http://soap.sforce.com/2006/04/metadata">
      <types>
        <members>MyFolder/MyReport</members>
        <name>Report</name>
      </types>
      <types>
        <members>*</members>
        <name>ApexClass</name>
      </types>
      <version>44.0</version>
    </Package>

Itemized sections come first in type-registration order, then wildcard
sections in describe order. Identical inputs render byte-identical output.
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from pathlib import Path

from .schema import MetadataItem
from .schema import MetadataTypeDescriptor

logger = logging.getLogger(__name__)

METADATA_NAMESPACE = "http://soap.sforce.com/2006/04/metadata"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
WILDCARD_MEMBER = "*"


def _add_types_section(package: ET.Element, type_name: str, members: Iterable[str]) -> None:
    types = ET.SubElement(package, "types")
    for member in members:
        ET.SubElement(types, "members").text = member
    ET.SubElement(types, "name").text = type_name


def render_manifest(
    itemized_types: Mapping[str, Sequence[MetadataItem]],
    wildcard_types: Sequence[MetadataTypeDescriptor],
    api_version: str,
) -> str:
    """
    Render the package manifest.

    Args:
        itemized_types: Type name to admitted items, in registration order.
            Types without items are left out of the document.
        wildcard_types: Types retrieved with a ``*`` member, in describe order
        api_version: Value of the trailing <version> element

    Returns:
        UTF-8 XML document text with 2-space indentation and a trailing newline
    """
    package = ET.Element("Package", {"xmlns": METADATA_NAMESPACE})

    logger.debug("Itemized Metadata:")
    for type_name, items in itemized_types.items():
        logger.debug(f"Type {type_name}")
        if not items:
            continue

        for item in items:
            logger.debug(f"  {item.full_name}")
        _add_types_section(package, type_name, (item.full_name for item in items))

    for descriptor in wildcard_types:
        _add_types_section(package, descriptor.xml_name, [WILDCARD_MEMBER])

    ET.SubElement(package, "version").text = api_version

    ET.indent(package, space="  ")
    body = ET.tostring(package, encoding="unicode")
    return f"{XML_DECLARATION}\n{body}\n"


def write_manifest(content: str, dest: Path) -> Path:
    """
    Write rendered manifest to disk, creating parent directories.

    Args:
        content: Rendered manifest text
        dest: Destination path

    Returns:
        Path written
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(content, encoding="utf-8")
    logger.info(f"Wrote manifest to {dest}")
    return dest
