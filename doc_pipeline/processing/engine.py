from __future__ import annotations

import logging
from typing import Iterable, List

from .models import (
    ExtractedDocument,
    ExtractionArtifact,
    HeadingSection,
    ParagraphSection,
    ProcessingOptions,
    Section,
    TableSection,
)

logger = logging.getLogger(__name__)

SAMPLE_TITLE = "Sample Document Title"
SAMPLE_PAGES = 3
SAMPLE_WORD_COUNT = 1250
SAMPLE_PARAGRAPH = (
    "This is a sample paragraph extracted from the document. "
    "It contains important information about the document processing capabilities."
)
SAMPLE_TABLE = (
    ("Header 1", "Header 2", "Header 3"),
    ("Row 1 Col 1", "Row 1 Col 2", "Row 1 Col 3"),
    ("Row 2 Col 1", "Row 2 Col 2", "Row 2 Col 3"),
)
# Reported row count; SAMPLE_TABLE holds three rows.
SAMPLE_TABLE_ROWS = 5
TABLE_HEADING = "Data Table"


class ExtractionEngine:
    """
    Abstract extraction engine. Implementations should be stateless and reusable
    across jobs and threads.
    """

    def extract(self, options: ProcessingOptions) -> ExtractionArtifact:
        raise NotImplementedError


class SimulatedExtractionEngine(ExtractionEngine):
    """
    Produces a fixed sample document shaped by the job's options. The markdown
    rendering and the summary are derived from the section tree.
    """

    def extract(self, options: ProcessingOptions) -> ExtractionArtifact:
        sections = self._build_sections(options)
        document = ExtractedDocument(
            title=SAMPLE_TITLE,
            pages=SAMPLE_PAGES,
            word_count=SAMPLE_WORD_COUNT,
            language=options.language,
            sections=tuple(sections),
        )
        logger.debug("Built sample document with %d sections (language=%s)", len(sections), options.language)
        return ExtractionArtifact(
            document=document,
            markdown=render_markdown(document),
            summary=summarize(document),
        )

    def _build_sections(self, options: ProcessingOptions) -> List[Section]:
        sections: List[Section] = [
            HeadingSection(text="Introduction", level=1),
            ParagraphSection(text=SAMPLE_PARAGRAPH),
        ]
        if options.extract_tables:
            sections.append(
                TableSection(
                    rows=SAMPLE_TABLE_ROWS,
                    columns=len(SAMPLE_TABLE[0]),
                    data=SAMPLE_TABLE,
                )
            )
        return sections


def render_markdown(document: ExtractedDocument) -> str:
    parts = [f"# {document.title}\n\n"]
    for section in document.sections:
        if isinstance(section, HeadingSection):
            # The document title owns the top level, so section headings shift down one.
            parts.append(f"{'#' * (section.level + 1)} {section.text}\n\n")
        elif isinstance(section, ParagraphSection):
            parts.append(f"{section.text}\n\n")
        elif isinstance(section, TableSection):
            parts.append(f"## {TABLE_HEADING}\n\n")
            parts.append(_render_table(section.data, section.columns))
    return "".join(parts)


def _render_table(rows: Iterable[Iterable[str]], columns: int) -> str:
    lines = []
    for index, row in enumerate(rows):
        lines.append("| " + " | ".join(row) + " |\n")
        if index == 0:
            lines.append("|" + "|".join("-" * 10 for _ in range(columns)) + "|\n")
    return "".join(lines) + "\n"


def summarize(document: ExtractedDocument) -> str:
    has_tables = any(isinstance(section, TableSection) for section in document.sections)
    return (
        f"This document appears to be a sample document containing {document.word_count} words "
        f"across {document.pages} pages. The main content includes an introduction section"
        f"{' and structured data tables' if has_tables else ''}. "
        f"The document is primarily in {document.language} language."
    )
