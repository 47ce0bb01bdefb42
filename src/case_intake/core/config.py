"""
Central configuration for Case Intake.

Supports environment variables for configuration:
- CASE_INTAKE_CASE_FILES_FOLDER: Base folder for extracted case files (default: data/case_files)
- CASE_INTAKE_CASE_FILE_TYPES: Comma-separated extension whitelist (default: .pdf,.doc,.docx,.txt)
- CASE_INTAKE_PARTY_SCHEMA_PATH: XSD used to validate party.xml (default: data/schema/party.xsd)
- CASE_INTAKE_ADMIN_EMAIL: Address that receives intake reports (default: admin@localhost)
- CASE_INTAKE_METADATA_MATCH_POLICY: "error" or "first" for archives with several party.xml entries
- CASE_INTAKE_DROP_FOLDER: Folder polled by the watcher (default: data/inbox)
- CASE_INTAKE_SMTP_HOST: SMTP relay for reports (unset: reports are only logged)
- CASE_INTAKE_LOG_LEVEL: Logging level (default: INFO)
- CASE_INTAKE_LOG_FILE: Log file path (default: logs/intake.log)
"""

import os
from enum import Enum
from pathlib import Path
from typing import FrozenSet

from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ---- Intake ----

# Fixed name of the metadata entry; matched case-insensitively on the base filename
PARTY_XML_FILE_NAME = "party.xml"

DATA_DIR = Path(os.getenv("CASE_INTAKE_DATA_DIR", "data"))
CASE_FILES_FOLDER = Path(os.getenv("CASE_INTAKE_CASE_FILES_FOLDER", str(DATA_DIR / "case_files")))
CASE_FILE_TYPES = os.getenv("CASE_INTAKE_CASE_FILE_TYPES", ".pdf,.doc,.docx,.txt")
PARTY_SCHEMA_PATH = Path(os.getenv("CASE_INTAKE_PARTY_SCHEMA_PATH", str(DATA_DIR / "schema" / "party.xsd")))
ADMIN_EMAIL = os.getenv("CASE_INTAKE_ADMIN_EMAIL", "admin@localhost")

METADATA_MATCH_POLICY = os.getenv("CASE_INTAKE_METADATA_MATCH_POLICY", "error")
CASE_SENSITIVE_EXTENSIONS = _env_bool("CASE_INTAKE_CASE_SENSITIVE_EXTENSIONS", True)
ATOMIC_EXTRACTION = _env_bool("CASE_INTAKE_ATOMIC_EXTRACTION", False)

# ---- Drop folder watcher ----

DROP_FOLDER = Path(os.getenv("CASE_INTAKE_DROP_FOLDER", str(DATA_DIR / "inbox")))
POLL_INTERVAL_SECONDS = int(os.getenv("CASE_INTAKE_POLL_INTERVAL_SECONDS", "60"))

# ---- Mail ----

SMTP_HOST = os.getenv("CASE_INTAKE_SMTP_HOST")  # None = log reports instead of mailing them
SMTP_PORT = int(os.getenv("CASE_INTAKE_SMTP_PORT", "25"))
SMTP_USERNAME = os.getenv("CASE_INTAKE_SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("CASE_INTAKE_SMTP_PASSWORD")
SMTP_STARTTLS = _env_bool("CASE_INTAKE_SMTP_STARTTLS", False)
SMTP_TIMEOUT_SECONDS = 30

# ---- Logging ----

LOG_LEVEL = os.getenv("CASE_INTAKE_LOG_LEVEL", "INFO")
LOG_FILE = Path(os.getenv("CASE_INTAKE_LOG_FILE", "logs/intake.log"))


class MetadataMatchPolicy(str, Enum):
    """How to treat an archive holding more than one party.xml entry."""

    ERROR = "error"
    FIRST = "first"


class IntakeSettings(BaseModel):
    """Validated settings for a CaseFileProcessor."""

    case_files_folder: Path = Field(
        description="Base folder under which a new case folder is created per archive"
    )
    case_file_types: str = Field(
        description="Comma-separated extensions (with leading dot) eligible for extraction"
    )
    party_schema_path: Path = Field(
        description="Path of the XSD used to validate party.xml"
    )
    admin_email: str = Field(
        min_length=1,
        description="Address that receives success/failure reports"
    )
    metadata_match_policy: MetadataMatchPolicy = Field(
        default=MetadataMatchPolicy.ERROR,
        description="'error' rejects archives with several party.xml entries, 'first' takes the first one"
    )
    case_sensitive_extensions: bool = Field(
        default=True,
        description="Compare extensions exactly (True) or ignoring case (False)"
    )
    atomic_extraction: bool = Field(
        default=False,
        description="Stage extraction in a temporary folder and move it into place on full success"
    )

    @property
    def whitelist(self) -> FrozenSet[str]:
        from src.case_intake.intake.archive import parse_whitelist

        return parse_whitelist(self.case_file_types)

    @classmethod
    def from_env(cls, **overrides) -> "IntakeSettings":
        """
        Build settings from the module-level constants.

        Keyword overrides whose value is None are ignored so CLI options can be
        passed through unconditionally.
        """
        values = {
            "case_files_folder": CASE_FILES_FOLDER,
            "case_file_types": CASE_FILE_TYPES,
            "party_schema_path": PARTY_SCHEMA_PATH,
            "admin_email": ADMIN_EMAIL,
            "metadata_match_policy": METADATA_MATCH_POLICY,
            "case_sensitive_extensions": CASE_SENSITIVE_EXTENSIONS,
            "atomic_extraction": ATOMIC_EXTRACTION,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
