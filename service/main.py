"""
Document Classification Service - FastAPI Application

Minimal REST API that classifies an uploaded document and returns its
extracted fields as JSON.
"""

import asyncio
import logging
import threading
import time
from contextlib import asynccontextmanager
from typing import Any, Callable

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

load_dotenv()
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from document_classifier import (
    AnalysisCancelled,
    DocumentPipeline,
    DocumentTooLarge,
    EmptyDocument,
    UnsupportedFormat,
    UploadedFile,
    __version__,
    build_pipeline,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the pipeline once; a missing API key aborts startup."""
    app.state.pipeline = build_pipeline()
    app.state.start_time = time.time()
    logger.info(
        "Pipeline ready: %s",
        ", ".join(repr(p) for p in app.state.pipeline.providers),
    )
    yield


app = FastAPI(
    title="Document Classification Service",
    description="Document type identification and field extraction via LLM providers",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


def get_pipeline(request: Request) -> DocumentPipeline:
    """Pipeline built at startup."""
    return request.app.state.pipeline


DISCONNECT_POLL_SECONDS = 1.0


async def run_until_disconnect(
    request: Request,
    func: Callable[..., Any],
    *args: Any,
    poll_interval: float = DISCONNECT_POLL_SECONDS,
) -> Any:
    """
    Run a blocking pipeline call in the thread pool, watching the client.

    Starlette does not cancel a worker thread when the client goes away,
    so the connection is polled while the call runs. On disconnect the
    cancel event is set: the call in flight finishes within its own
    timeout, the remaining fallback steps are skipped and
    AnalysisCancelled is raised.
    """
    cancel_event = threading.Event()
    task = asyncio.ensure_future(
        run_in_threadpool(func, *args, cancel_event=cancel_event)
    )

    while True:
        done, _ = await asyncio.wait({task}, timeout=poll_interval)
        if done:
            return task.result()
        if not cancel_event.is_set() and await request.is_disconnected():
            cancel_event.set()


# ============================================================================
# Pydantic Models
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str = __version__
    uptime_seconds: float
    providers: dict[str, bool] = {}


class ErrorResponse(BaseModel):
    """Error response."""

    success: bool = False
    error: str
    detail: str | None = None


# ============================================================================
# Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(pipeline: DocumentPipeline = Depends(get_pipeline)):
    """Health check endpoint for container orchestration."""
    start_time = getattr(app.state, "start_time", time.time())

    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=time.time() - start_time,
        providers={p.name: p.is_available() for p in pipeline.providers},
    )


@app.get("/", tags=["System"])
async def root():
    """Root endpoint with API info."""
    return {
        "service": "document-classification",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


@app.post(
    "/api/v1/documents/analyze",
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    tags=["Documents"],
)
async def analyze_document(
    request: Request,
    documento: UploadFile = File(
        ..., description="Document to classify: txt, pdf, png, jpg or jpeg"
    ),
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    """
    Identify the document type and extract its fields.

    Only the first page of a PDF is analyzed. When every provider is
    unavailable the response is still 200, carrying a descriptive
    payload with `document_type: "unidentified"`.
    """
    name = documento.filename or ""
    limit = pipeline.normalizer.max_upload_bytes
    if documento.size is not None and documento.size > limit:
        raise HTTPException(
            status_code=413,
            detail=f"File '{name}' exceeds the upload limit of {limit} bytes",
        )

    # One byte past the limit is enough for the normalizer to reject it
    content = await documento.read(limit + 1)
    upload = UploadedFile(
        name=name,
        content=content,
        content_type=documento.content_type,
    )

    try:
        document = await run_until_disconnect(request, pipeline.analyze, upload)
    except (UnsupportedFormat, EmptyDocument) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DocumentTooLarge as e:
        raise HTTPException(status_code=413, detail=str(e))
    except AnalysisCancelled:
        logger.info("Client disconnected, analysis of %s abandoned", upload.name)
        raise HTTPException(status_code=499, detail="Client closed request")
    except Exception as e:
        logger.exception("Analysis failed for %s", upload.name)
        raise HTTPException(status_code=500, detail=f"Document analysis failed: {e}")

    return JSONResponse(content=dict(document))


# ============================================================================
# Error handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """General exception handler."""
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "detail": str(exc)},
    )
