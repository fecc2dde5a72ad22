"""API route definitions."""

import time
from fastapi import APIRouter, HTTPException
import logging

from ..models import (
    EffectiveStatusRequest,
    EffectiveStatusResponse,
    ErrorResponse,
    EvaluateRequest,
    EvaluateResponse,
    ExtractRequest,
    ExtractResponse,
    HealthResponse,
)
from ..services import (
    FieldLocator,
    LabelEngineError,
    LabelEvaluator,
    classify_image_roles,
    deadline_info,
    detect_beverage_type,
    effective_status,
)
from ..services.pipeline import combine_ocr_text
from .. import __version__

logger = logging.getLogger(__name__)
router = APIRouter()

# Initialize services
field_locator = FieldLocator()
label_evaluator = LabelEvaluator()


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health."""
    return HealthResponse(status="healthy", version=__version__)


@router.post(
    "/extract",
    response_model=ExtractResponse,
    responses={500: {"model": ErrorResponse, "description": "Processing error"}},
    tags=["Extraction"],
)
async def extract_fields(request: ExtractRequest):
    """
    Locate classified fields on the label images.

    Takes OCR output and classifier output, and returns every classified
    field with its normalized bounding box and source image.
    """
    try:
        fields = field_locator.locate_fields(request.ocr_results, request.classification)
        image_classifications = (
            list(request.classification.image_classifications)
            or classify_image_roles(request.ocr_results)
        )
        detected = (
            request.classification.detected_beverage_type
            or detect_beverage_type(combine_ocr_text(request.ocr_results))
        )
        return ExtractResponse(
            success=True,
            fields=fields,
            image_classifications=image_classifications,
            detected_beverage_type=detected,
        )
    except LabelEngineError as e:
        logger.exception(f"Error locating fields: {e}")
        return ExtractResponse(success=False, error=str(e))


@router.post(
    "/evaluate",
    response_model=EvaluateResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        500: {"model": ErrorResponse, "description": "Processing error"},
    },
    tags=["Verification"],
)
async def evaluate_label(request: EvaluateRequest):
    """
    Verify a label against application data.

    Locates every classified field, compares it to the expected value and
    returns the per-field results with the proposed overall status.
    """
    start_time = time.time()

    beverage_type = (
        request.application.beverage_type
        or detect_beverage_type(combine_ocr_text(request.ocr_results))
        or request.classification.detected_beverage_type
    )
    if beverage_type is None:
        raise HTTPException(
            status_code=400,
            detail="Beverage type not supplied and could not be detected from the label text",
        )

    try:
        fields = field_locator.locate_fields(request.ocr_results, request.classification)
        evaluation = label_evaluator.evaluate(
            fields, request.application, beverage_type, now=request.now
        )
    except LabelEngineError as e:
        logger.exception(f"Error evaluating label: {e}")
        return EvaluateResponse(
            success=False,
            error=str(e),
            processing_time_ms=int((time.time() - start_time) * 1000),
        )

    return EvaluateResponse(
        success=True,
        evaluation=evaluation,
        fields=fields,
        beverage_type=beverage_type,
        processing_time_ms=int((time.time() - start_time) * 1000),
    )


@router.post("/status/effective", response_model=EffectiveStatusResponse, tags=["Status"])
async def get_effective_status(request: EffectiveStatusRequest):
    """Apply deadline expiration to a stored label status."""
    status = effective_status(request.status, request.correction_deadline, request.now)
    return EffectiveStatusResponse(
        stored_status=request.status,
        effective_status=status,
        expired=status != request.status,
        deadline=deadline_info(request.correction_deadline, request.now),
    )
