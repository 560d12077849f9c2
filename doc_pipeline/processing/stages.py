from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .models import LogSeverity, ProcessingOptions


class StageName(str, Enum):
    START = "start"
    EXTRACT_TEXT = "extract-text"
    EXTRACT_TABLES = "extract-tables"
    EXTRACT_IMAGES = "extract-images"
    FINALIZE_LANGUAGE = "finalize-language"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Stage:
    name: StageName
    progress: int
    message: str
    delay: float = 0.0
    severity: LogSeverity = LogSeverity.INFO
    condition: Optional[Callable[[ProcessingOptions], bool]] = None

    def applies_to(self, options: ProcessingOptions) -> bool:
        return self.condition is None or self.condition(options)

    def render_message(self, options: ProcessingOptions) -> str:
        return self.message.format(language=options.language)


# Checkpoints are fixed: skipping an optional stage does not shift the
# progress values of the stages after it.
STAGES: tuple = (
    Stage(StageName.START, 10, "Starting document processing...", delay=1.0),
    Stage(StageName.EXTRACT_TEXT, 30, "Extracting text content...", delay=1.5),
    Stage(
        StageName.EXTRACT_TABLES,
        50,
        "Detecting and extracting tables...",
        delay=1.0,
        condition=lambda options: options.extract_tables,
    ),
    Stage(
        StageName.EXTRACT_IMAGES,
        70,
        "Processing images...",
        delay=1.0,
        condition=lambda options: options.extract_images,
    ),
    Stage(StageName.FINALIZE_LANGUAGE, 85, "Processing language: {language}", delay=0.8),
    Stage(
        StageName.COMPLETE,
        100,
        "Document processing completed successfully!",
        severity=LogSeverity.SUCCESS,
    ),
)


def plan_stages(options: ProcessingOptions) -> List[Stage]:
    """Return the stages a job with `options` runs, in execution order."""
    return [stage for stage in STAGES if stage.applies_to(options)]
