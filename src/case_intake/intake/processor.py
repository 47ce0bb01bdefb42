"""
Case file intake orchestrator.

Validates and extracts the case files from one ZIP archive, then reports the
result to the administrator:

1. Check the archive exists and open it
2. Locate party.xml (case-insensitive base filename match)
3. Load the party XSD and validate party.xml, reading the application number
4. Create <case files folder>/<applicationno>-<uuid>
5. Extract whitelisted entries into it (flattened, last write wins)

Every step fails with a typed IntakeError; process_archive turns any failure
into an IntakeOutcome and never raises.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional, Union

from src.case_intake.core.config import IntakeSettings
from src.case_intake.core.errors import IntakeError
from src.case_intake.core.metrics import MetricsCollector, get_metrics
from src.case_intake.core.models import IntakeOutcome
from src.case_intake.intake.archive import (
    locate_metadata_entry,
    open_archive,
    select_extractable_entries,
)
from src.case_intake.intake.extraction import (
    create_destination,
    extract_entries,
    extract_entries_atomically,
)
from src.case_intake.intake.schema import load_schema, validate_and_extract_identifier
from src.case_intake.notify.mail import MailService, compose_report

module_logger = logging.getLogger(__name__)


def make_case_folder_name(application_no: str) -> str:
    """Unique folder name for one run: <applicationno>-<uuid4>."""
    return f"{application_no}-{uuid.uuid4()}"


class CaseFileProcessor:
    """
    Processes case file ZIPs dropped on the intake file server.

    The mail service and logger are injected so the processor holds no global
    state apart from the shared metrics collector.
    """

    def __init__(
        self,
        settings: IntakeSettings,
        mail_service: MailService,
        logger: Optional[logging.Logger] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize the processor.

        Args:
            settings: Destination folder, whitelist, schema path and admin address
            mail_service: Sends the success/failure report to the administrator
            logger: Logger for progress messages (defaults to this module's logger)
            metrics: Metrics collector (defaults to the global collector)
        """
        if mail_service is None:
            raise ValueError("mail_service is required")
        self.settings = settings
        self.mail_service = mail_service
        self.logger = logger or module_logger
        self.metrics = metrics or get_metrics()

    def process(self, zip_path: Union[str, Path]) -> bool:
        """
        Validate and extract the case files from a ZIP file and notify the administrator.

        Returns:
            Whether the case files were successfully extracted
        """
        return self.process_and_report(zip_path).success

    def process_and_report(self, zip_path: Union[str, Path]) -> IntakeOutcome:
        """Like process(), returning the full outcome."""
        self.logger.info(f"Starting processing '{zip_path}'.")

        outcome = self.process_archive(zip_path)
        report = compose_report(outcome, self.settings.admin_email)

        try:
            self.mail_service.send(report)
        except Exception as e:
            # The extraction result stands even when the report cannot be delivered
            self.logger.error(f"Unable to send '{report.subject}' report for '{zip_path}': {e}", exc_info=True)
            self.metrics.increment("intake_notification_failures")

        log_level = logging.INFO if outcome.success else logging.WARNING
        self.logger.log(log_level, report.body)

        return outcome

    def process_archive(self, zip_path: Union[str, Path]) -> IntakeOutcome:
        """
        Validate and extract the case files from a ZIP file.

        Returns:
            IntakeOutcome with the destination folder name (relative to the case
            files folder) on success, or the failure reason
        """
        self.metrics.start_timer("intake")
        try:
            outcome = self._run(zip_path)
        except IntakeError as e:
            self.logger.debug(f"Intake of '{zip_path}' stopped at stage '{e.stage.value}': {e.message}")
            outcome = IntakeOutcome.failed(e.message, stage=e.stage)
        except Exception as e:
            self.logger.error(f"Unexpected error while processing '{zip_path}': {e}", exc_info=True)
            outcome = IntakeOutcome.failed(str(e) or type(e).__name__)
        finally:
            self.metrics.stop_timer("intake")

        self._record(outcome)
        return outcome

    def _run(self, zip_path: Union[str, Path]) -> IntakeOutcome:
        settings = self.settings

        with open_archive(zip_path) as archive:
            entry = locate_metadata_entry(archive, settings.metadata_match_policy)
            self.logger.debug(f"Found metadata entry '{entry.filename}' in '{zip_path}'")

            schema = load_schema(settings.party_schema_path)
            with archive.open(entry, "r") as stream:
                application_no = validate_and_extract_identifier(stream, schema)

            case_folder = make_case_folder_name(application_no)
            destination = Path(settings.case_files_folder) / case_folder
            entries = select_extractable_entries(
                archive,
                settings.whitelist,
                case_sensitive=settings.case_sensitive_extensions,
            )

            if settings.atomic_extraction:
                create_destination(Path(settings.case_files_folder))
                written = extract_entries_atomically(archive, entries, destination)
            else:
                create_destination(destination)
                self.logger.debug(f"Created case folder '{destination}'")
                written = extract_entries(archive, entries, destination)

        self.logger.debug(f"Extracted {len(written)} file(s) to '{destination}'")
        return IntakeOutcome.succeeded(case_folder, written)

    def _record(self, outcome: IntakeOutcome) -> None:
        status = "success" if outcome.success else "failure"
        self.metrics.increment("intake_runs", labels={"status": status})
        if outcome.success:
            self.metrics.increment("intake_files_extracted", len(outcome.extracted_files))
        else:
            stage = outcome.failed_stage.value if outcome.failed_stage else "unexpected"
            self.metrics.increment("intake_failures", labels={"stage": stage})


__all__ = ["CaseFileProcessor", "make_case_folder_name"]
