"""
Drop-folder watcher for continuous intake.

Polls the drop folder on a fixed interval and runs every ZIP found through the
CaseFileProcessor, one archive at a time. Each archive is then moved to
processed/ or failed/ under the drop folder so it is not picked up again.
"""

import logging
import shutil
import time
from pathlib import Path
from typing import List, Optional, Tuple

import schedule

from src.case_intake.core.metrics import increment, set_gauge, start_timer, stop_timer
from src.case_intake.core.models import IntakeOutcome
from src.case_intake.intake.processor import CaseFileProcessor

logger = logging.getLogger(__name__)

PROCESSED_DIR_NAME = "processed"
FAILED_DIR_NAME = "failed"


def _unique_target(folder: Path, name: str) -> Path:
    target = folder / name
    counter = 1
    while target.exists():
        target = folder / f"{Path(name).stem}.{counter}{Path(name).suffix}"
        counter += 1
    return target


class DropFolderWatcher:
    """
    Runs intake for archives arriving in a drop folder.

    Archives are handled sequentially; concurrent watchers on the same folder
    are not coordinated.
    """

    def __init__(
        self,
        processor: CaseFileProcessor,
        drop_folder: Path,
        interval_seconds: int = 60,
    ):
        """
        Initialize the watcher.

        Args:
            processor: Processor used for every archive
            drop_folder: Folder polled for *.zip files
            interval_seconds: Seconds between polls
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.processor = processor
        self.drop_folder = Path(drop_folder)
        self.interval_seconds = interval_seconds

        self._running = False
        self._scheduler = schedule.Scheduler()

    @property
    def processed_folder(self) -> Path:
        return self.drop_folder / PROCESSED_DIR_NAME

    @property
    def failed_folder(self) -> Path:
        return self.drop_folder / FAILED_DIR_NAME

    def pending_archives(self) -> List[Path]:
        """ZIP files waiting in the drop folder, in name order."""
        if not self.drop_folder.is_dir():
            return []
        return sorted(
            p for p in self.drop_folder.iterdir()
            if p.is_file() and p.suffix.lower() == ".zip"
        )

    def process_one(self, zip_path: Path) -> IntakeOutcome:
        """Process a single archive, notify, and move it out of the drop folder."""
        outcome = self.processor.process_and_report(zip_path)

        target_folder = self.processed_folder if outcome.success else self.failed_folder
        target_folder.mkdir(parents=True, exist_ok=True)
        target = _unique_target(target_folder, zip_path.name)
        shutil.move(str(zip_path), str(target))
        logger.debug(f"Moved '{zip_path.name}' to '{target}'")
        return outcome

    def run_once(self) -> List[Tuple[Path, IntakeOutcome]]:
        """Poll the drop folder once and process every archive found."""
        start_timer("watcher_poll")
        results = []
        archives = self.pending_archives()
        set_gauge("watcher_pending", len(archives))
        if archives:
            logger.info(f"[WATCHER] Found {len(archives)} archive(s) in '{self.drop_folder}'")

        for zip_path in archives:
            try:
                results.append((zip_path, self.process_one(zip_path)))
            except OSError as e:
                # Archive could not be moved; it will be retried on the next poll
                logger.error(f"[WATCHER] Unable to move '{zip_path}': {e}", exc_info=True)
                increment("watcher_move_failures")

        stop_timer("watcher_poll")
        increment("watcher_polls")
        return results

    def start(self) -> None:
        self._scheduler.clear()
        self._scheduler.every(self.interval_seconds).seconds.do(self.run_once)
        self._running = True
        logger.info(
            f"[WATCHER] Watching '{self.drop_folder}' every {self.interval_seconds}s"
        )

    def stop(self) -> None:
        self._running = False
        self._scheduler.clear()
        logger.info("[WATCHER] Stopped")

    def run_forever(self, sleep_seconds: Optional[float] = None) -> None:
        """Poll immediately, then keep polling until stop() is called."""
        self.start()
        self.run_once()
        tick = sleep_seconds if sleep_seconds is not None else min(1.0, self.interval_seconds)
        try:
            while self._running:
                self._scheduler.run_pending()
                time.sleep(tick)
        except KeyboardInterrupt:
            logger.info("[WATCHER] Interrupted")
        finally:
            if self._running:
                self.stop()
