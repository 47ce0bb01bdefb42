"""Error taxonomy for the case intake pipeline.

Every classified failure carries the stage the pipeline had reached and a
single human-readable message. That message is used verbatim both as the
outcome error and as the reason in the operator report.
"""

from __future__ import annotations

from enum import Enum


class IntakeStage(str, Enum):
    """Linear states of one intake run."""

    START = "start"
    ARCHIVE_OPENED = "archive_opened"
    METADATA_LOCATED = "metadata_located"
    METADATA_VALIDATED = "metadata_validated"
    DESTINATION_CREATED = "destination_created"
    EXTRACTED = "extracted"
    DONE = "done"


class IntakeError(Exception):
    """Base error for intake failures."""

    default_stage = IntakeStage.START

    def __init__(self, message: str, stage: IntakeStage | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage


class ArchiveNotFoundError(IntakeError):
    """Raised when the ZIP file does not exist at the given path."""


class ArchiveOpenError(IntakeError):
    """Raised when the file exists but cannot be read as a ZIP archive."""


class MetadataMissingError(IntakeError):
    """Raised when no party.xml entry is present in the archive."""

    default_stage = IntakeStage.ARCHIVE_OPENED


class MetadataAmbiguousError(IntakeError):
    """Raised when several party.xml entries match and the policy forbids picking one."""

    default_stage = IntakeStage.ARCHIVE_OPENED


class SchemaLoadError(IntakeError):
    """Raised when the XSD cannot be read or compiled."""

    default_stage = IntakeStage.METADATA_LOCATED


class MetadataValidationError(IntakeError):
    """Raised for malformed or non-conforming party.xml, or an unusable application number."""

    default_stage = IntakeStage.METADATA_LOCATED


class ExtractionError(IntakeError):
    """Raised when the destination folder or an extracted file cannot be written."""

    default_stage = IntakeStage.DESTINATION_CREATED
