from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from doc_pipeline.processing import DocumentProcessingService

from api.dependencies import build_service, configure_logging, get_cors_origins
from api.routes.documents import router as documents_router

logger = logging.getLogger(__name__)


def create_app(service: Optional[DocumentProcessingService] = None) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Outstanding jobs are marked failed rather than left processing.
        logger.info("Stopping document processing service")
        await run_in_threadpool(app.state.service.shutdown)

    app = FastAPI(title="Document Pipeline API", version="0.1.0", lifespan=lifespan)
    app.state.service = service or build_service()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    api_router = APIRouter(prefix="/api")
    api_router.include_router(documents_router)

    @api_router.get("/hello", response_class=PlainTextResponse)
    def hello() -> str:
        return f"Backend is connected and running! Time: {datetime.now().isoformat()}"

    app.include_router(api_router)

    @app.get("/healthz")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
