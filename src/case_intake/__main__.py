"""
Case Intake CLI

Usage:
    # Process one or more archives
    python -m src.case_intake process data/inbox/CaseFiles.zip

    # Watch the drop folder (CASE_INTAKE_DROP_FOLDER) and process archives as they arrive
    python -m src.case_intake watch --interval 30
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from src.case_intake.core import config
from src.case_intake.core.config import IntakeSettings, MetadataMatchPolicy
from src.case_intake.core.logging_utils import configure_logging
from src.case_intake.core.metrics import get_metrics
from src.case_intake.intake.processor import CaseFileProcessor
from src.case_intake.notify.mail import build_mail_service
from src.case_intake.scheduler.watcher import DropFolderWatcher

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="case-intake",
        description="Validate and extract case file ZIP archives.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process a single archive with the configured settings
  python -m src.case_intake process data/inbox/CaseFiles.zip

  # Override the whitelist and output folder
  python -m src.case_intake process CaseFiles.zip --types .pdf,.docx --output /srv/cases

  # Poll the drop folder every 30 seconds
  python -m src.case_intake watch --interval 30
        """,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--schema", type=Path, default=None, help="Path to the party XSD.")
    common.add_argument("--output", type=Path, default=None, help="Base folder for extracted case files.")
    common.add_argument("--types", default=None, help="Comma-separated extensions to extract, e.g. .pdf,.docx")
    common.add_argument("--admin-email", default=None, help="Address that receives intake reports.")
    common.add_argument(
        "--metadata-policy",
        choices=[p.value for p in MetadataMatchPolicy],
        default=None,
        help="How to treat archives with several party.xml entries.",
    )
    common.add_argument(
        "--atomic",
        action="store_true",
        default=None,
        help="Only create the case folder once every file was extracted.",
    )
    common.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    common.add_argument(
        "--log-file",
        type=Path,
        default=config.LOG_FILE,
        help=f"Path to log file (default: {config.LOG_FILE}).",
    )

    sub = parser.add_subparsers(dest="cmd", required=True)

    pp = sub.add_parser("process", parents=[common], help="Process the given archives and exit.")
    pp.add_argument("zip_files", nargs="+", type=Path)

    pw = sub.add_parser("watch", parents=[common], help="Poll the drop folder for new archives.")
    pw.add_argument("--drop-folder", type=Path, default=config.DROP_FOLDER)
    pw.add_argument("--interval", type=int, default=config.POLL_INTERVAL_SECONDS, help="Seconds between polls.")
    pw.add_argument("--once", action="store_true", help="Poll once and exit.")

    return parser.parse_args(argv)


def build_processor(args: argparse.Namespace) -> CaseFileProcessor:
    settings = IntakeSettings.from_env(
        case_files_folder=args.output,
        case_file_types=args.types,
        party_schema_path=args.schema,
        admin_email=args.admin_email,
        metadata_match_policy=args.metadata_policy,
        atomic_extraction=args.atomic,
    )
    mail_service = build_mail_service(
        config.SMTP_HOST,
        port=config.SMTP_PORT,
        username=config.SMTP_USERNAME,
        password=config.SMTP_PASSWORD,
        starttls=config.SMTP_STARTTLS,
        timeout=config.SMTP_TIMEOUT_SECONDS,
    )
    return CaseFileProcessor(settings, mail_service, logger=logging.getLogger("case_intake"))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level, log_file=args.log_file)

    processor = build_processor(args)

    if args.cmd == "process":
        results = [processor.process(path) for path in args.zip_files]
        failed = results.count(False)
        logger.info(f"[done] Processed {len(results)} archive(s): {len(results) - failed} succeeded, {failed} failed")
        get_metrics().log_summary()
        return 0 if failed == 0 else 1

    watcher = DropFolderWatcher(processor, args.drop_folder, interval_seconds=args.interval)
    if args.once:
        results = watcher.run_once()
        return 0 if all(outcome.success for _, outcome in results) else 1

    watcher.run_forever()
    get_metrics().log_summary()
    return 0


if __name__ == "__main__":
    sys.exit(main())
