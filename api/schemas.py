from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from doc_pipeline.processing import ProcessingOptions


class ProcessRequest(BaseModel):
    """Body of `POST /documents/process`; field names follow the web client (camelCase)."""

    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(..., alias="documentId", min_length=1)
    language: str = Field(..., min_length=1)
    extract_text: bool = Field(True, alias="extractText")
    extract_tables: bool = Field(False, alias="extractTables")
    extract_images: bool = Field(False, alias="extractImages")

    def to_options(self) -> ProcessingOptions:
        return ProcessingOptions(
            language=self.language,
            extract_text=self.extract_text,
            extract_tables=self.extract_tables,
            extract_images=self.extract_images,
        )
