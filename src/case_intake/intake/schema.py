"""
Schema validation for party.xml.

The XSD is supplied fully formed and loaded fresh for every run. The metadata
document comes from a semi-trusted archive, so it is parsed with entity
resolution and network access disabled.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Union

from lxml import etree

from src.case_intake.core.config import PARTY_XML_FILE_NAME
from src.case_intake.core.errors import MetadataValidationError, SchemaLoadError

logger = logging.getLogger(__name__)

APPLICATION_NO_XPATH = "/party/applicationno"


def _secure_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=False,
    )


def load_schema(path: Union[str, Path]) -> etree.XMLSchema:
    """
    Read and compile an XSD.

    Raises:
        SchemaLoadError: the file cannot be read, is not XML, or is not a valid XSD
    """
    try:
        with open(path, "rb") as f:
            schema_doc = etree.parse(f, _secure_parser(), base_url=str(path))
        return etree.XMLSchema(schema_doc)
    except OSError as e:
        raise SchemaLoadError(f"Unable to read schema file '{path}': {e.strerror or e}.") from e
    except (etree.XMLSyntaxError, etree.XMLSchemaParseError) as e:
        raise SchemaLoadError(f"Unable to load schema file '{path}': {e}") from e


def _is_safe_folder_segment(value: str) -> bool:
    return value not in (".", "..") and not any(c in value for c in ("/", "\\", "\x00"))


def validate_and_extract_identifier(stream: IO[bytes], schema: etree.XMLSchema) -> str:
    """
    Parse party.xml, validate it against the schema and return the application number.

    Raises:
        MetadataValidationError: malformed XML, schema non-conformance, missing
            or empty application number, or a value unusable as a folder name
    """
    try:
        document = etree.parse(stream, _secure_parser())
    except etree.XMLSyntaxError as e:
        raise MetadataValidationError(f"Unable to parse '{PARTY_XML_FILE_NAME}': {e}") from e

    try:
        schema.assertValid(document)
    except etree.DocumentInvalid as e:
        # lxml reports the first violation, e.g. "Element 'party': Missing child element(s)..."
        raise MetadataValidationError(str(e)) from e

    nodes = document.xpath(APPLICATION_NO_XPATH)
    if not nodes:
        raise MetadataValidationError(f"Unable to find 'applicationno' in '{PARTY_XML_FILE_NAME}'.")

    application_no = "".join(nodes[0].itertext()).strip()
    if not application_no:
        raise MetadataValidationError(f"Unable to get application number from '{PARTY_XML_FILE_NAME}'.")

    if not _is_safe_folder_segment(application_no):
        raise MetadataValidationError(
            f"Application number '{application_no}' in '{PARTY_XML_FILE_NAME}' is not a valid folder name."
        )

    logger.debug(f"Validated {PARTY_XML_FILE_NAME}: applicationno={application_no}")
    return application_no
