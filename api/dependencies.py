from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import List

from fastapi import Request

from doc_pipeline.processing import DocumentProcessingService, WorkerConfig

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:3007",
    "http://127.0.0.1:3007",
)


@lru_cache(maxsize=1)
def get_worker_config() -> WorkerConfig:
    return WorkerConfig(
        max_concurrency=int(os.getenv("WORKER_MAX_CONCURRENCY", "8")),
        stage_delay_scale=float(os.getenv("STAGE_DELAY_SCALE", "1.0")),
    )


@lru_cache(maxsize=1)
def get_cors_origins() -> List[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS")
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_service() -> DocumentProcessingService:
    return DocumentProcessingService(config=get_worker_config())


def get_service(request: Request) -> DocumentProcessingService:
    return request.app.state.service
