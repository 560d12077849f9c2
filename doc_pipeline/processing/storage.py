from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from .errors import DocumentNotFound, InvalidRequest
from .models import UploadedDocument, new_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectedLanguage:
    code: str
    name: str
    confidence: float
    flag: str

    def to_dict(self) -> dict:
        return {"code": self.code, "name": self.name, "confidence": self.confidence, "flag": self.flag}


SAMPLE_LANGUAGES = (
    DetectedLanguage("en", "English", 95.5, "\U0001F1FA\U0001F1F8"),
    DetectedLanguage("es", "Spanish", 78.2, "\U0001F1EA\U0001F1F8"),
    DetectedLanguage("fr", "French", 45.1, "\U0001F1EB\U0001F1F7"),
)


class InMemoryDocumentStorage:
    """
    Holds uploaded file bytes and their metadata for the lifetime of the process.
    """

    def __init__(self):
        self._documents: Dict[str, UploadedDocument] = {}
        self._lock = threading.Lock()

    def save_upload(self, data: bytes, file_name: Optional[str], content_type: Optional[str]) -> UploadedDocument:
        if not data:
            raise InvalidRequest("Uploaded file is empty")
        document = UploadedDocument(
            id=new_id(),
            file_name=file_name,
            content_type=content_type,
            size=len(data),
            data=data,
        )
        with self._lock:
            self._documents[document.id] = document
        logger.info("Stored upload %s (%s, %d bytes)", document.id, file_name, document.size)
        return document

    def document_exists(self, document_id: str) -> bool:
        with self._lock:
            return document_id in self._documents

    def detect_languages(self, document_id: str) -> List[DetectedLanguage]:
        if not self.document_exists(document_id):
            raise DocumentNotFound(document_id)
        return list(SAMPLE_LANGUAGES)
