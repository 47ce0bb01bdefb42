from dataclasses import dataclass, field, asdict
from typing import List, Optional

from src.case_intake.core.errors import IntakeStage


@dataclass
class IntakeOutcome:
    # Result of one run; exactly one of destination_folder / error_message is set
    success: bool
    destination_folder: str = ""          # folder name relative to the case files folder
    error_message: str = ""

    # Diagnostics
    failed_stage: Optional[IntakeStage] = None
    extracted_files: List[str] = field(default_factory=list)

    @classmethod
    def succeeded(cls, destination_folder: str, extracted_files: Optional[List[str]] = None) -> "IntakeOutcome":
        if not destination_folder:
            raise ValueError("successful outcome requires a destination folder")
        return cls(
            success=True,
            destination_folder=destination_folder,
            extracted_files=list(extracted_files or []),
        )

    @classmethod
    def failed(cls, error_message: str, stage: Optional[IntakeStage] = None) -> "IntakeOutcome":
        if not error_message:
            raise ValueError("failed outcome requires an error message")
        return cls(success=False, error_message=error_message, failed_stage=stage)

    def to_dict(self) -> dict:
        """
        Flatten to dict for logging/JSON output.
        The stage is serialized by value.
        """
        d = asdict(self)
        d["failed_stage"] = self.failed_stage.value if self.failed_stage else None
        return d
