"""FastAPI application for the license field extraction API.

Provides an upload endpoint that extracts templated fields from a license
image for a given state, plus template listing and health checks.
"""

import shutil
import time
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from src import __version__
from src.errors import (
    InvalidImageError,
    MalformedTemplateError,
    RecognitionError,
    TemplateNotFoundError,
)
from src.ocr.document_processor import LicenseProcessor
from src.templates.repository import TemplateRepository
from src.utils.config import load_config
from src.utils.logger import get_logger

from .schemas import (
    AnalysisResponse,
    FieldWarningResponse,
    HealthResponse,
    TemplatesResponse,
)

logger = get_logger(__name__)

app = FastAPI(
    title="License Field OCR API",
    description="Extract structured fields from driver's license images",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "application/octet-stream",
}


def _get_processor() -> LicenseProcessor:
    """Build the license processor from the current configuration."""
    return LicenseProcessor(load_config())


def _max_upload_bytes() -> int:
    """Largest accepted upload, in bytes."""
    return load_config().server.max_upload_bytes


def _get_repository() -> TemplateRepository:
    """Build the template repository from the current configuration."""
    config = load_config()
    return TemplateRepository(config.templates.directory)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        tesseract_available=shutil.which("tesseract") is not None,
    )


@app.get("/templates", response_model=TemplatesResponse)
async def list_templates() -> TemplatesResponse:
    """List identifiers with an available layout template."""
    return TemplatesResponse(templates=_get_repository().available())


@app.post("/api/driverlicense/analyze", response_model=AnalysisResponse)
async def analyze_license(
    file: Annotated[UploadFile, File(...)],
    state: Annotated[str, Query(min_length=1)],
    include_image: Annotated[bool, Query()] = False,
) -> AnalysisResponse:
    """Extract templated fields from an uploaded license image.

    Args:
        file: Uploaded image (PNG, JPEG, TIFF or BMP).
        state: Issuing state name, used to select the layout template.
        include_image: Whether to return the preprocessed image.

    Returns:
        Extracted fields and per-field warnings.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    limit = _max_upload_bytes()
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"Upload exceeds the {limit} byte limit.",
        )
    if not content:
        raise HTTPException(status_code=400, detail="Please upload a valid image file.")

    state = state.strip()
    logger.info("Processing license for state: %s", state)

    try:
        data = _get_processor().process(content, state, include_image=include_image)
    except TemplateNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail=f"No layout for this identifier: {exc.identifier}",
        ) from exc
    except InvalidImageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RecognitionError as exc:
        logger.error("Recognition failed for %s license: %s", state, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except MalformedTemplateError as exc:
        logger.error("Template error: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Extraction failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return AnalysisResponse(
        analysis=f"Successfully processed {data.state} driver's license.",
        state=data.state,
        fields=data.fields,
        warnings=[
            FieldWarningResponse(
                field_name=w.field_name, reason=w.reason, message=w.message
            )
            for w in data.warnings
        ],
        processed_image=data.processed_image,
        processing_time_ms=(time.time() - start_time) * 1000,
    )
