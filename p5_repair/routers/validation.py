"""
Validation Router - HTTP entry point for the repair pipeline.

POST /validate-html with ``{"html": ..., "validationType": ...}`` runs one
pass (by name) or the whole pipeline (``all``) over the posted document
and returns the repaired text with the fix count. Nothing is written to
disk.
"""

import logging
from typing import Callable, Dict, List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from p5_repair.ai.monitoring import RepairLogger
from p5_repair.repair.orchestrator import RepairPipeline
from p5_repair.repair.passes import PASS_ORDER, RepairPass, default_passes


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(tags=["validation"])

ALL_PASSES = "all"

PASSES_BY_NAME: Dict[str, Type[RepairPass]] = {cls.name: cls for cls in PASS_ORDER}


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class ValidateRequest(BaseModel):
    """
    Request schema for /validate-html.

    Both fields are optional at the schema level so a missing one is
    reported as 400 rather than FastAPI's 422.

    Example:
    {
        "html": "<html>...</html>",
        "validationType": "parentheses"
    }
    """
    model_config = ConfigDict(populate_by_name=True)

    html: Optional[str] = Field(default=None, description="Full document text")
    validation_type: Optional[str] = Field(
        default=None,
        alias="validationType",
        description="Pass name, or 'all' for the full pipeline",
    )


class ValidateResponse(BaseModel):
    """Response schema for /validate-html."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(description="Whether the run completed")
    validation_type: str = Field(alias="validationType")
    errors: List[str] = Field(default_factory=list, description="Pass failures, if any")
    fix_count: int = Field(alias="fixCount")
    html: str = Field(description="Repaired document")


# ---------------------------------------------------------------------------
# DEPENDENCIES
# ---------------------------------------------------------------------------

PipelineFactory = Callable[[List[RepairPass]], RepairPipeline]


def get_pipeline_factory() -> PipelineFactory:
    """Builds pipelines with the configured oracles. Overridden in tests."""
    def factory(passes: List[RepairPass]) -> RepairPipeline:
        return RepairPipeline(passes=passes, sink=RepairLogger(run_id="http"))
    return factory


def resolve_passes(validation_type: str) -> List[RepairPass]:
    """
    Raises:
        HTTPException: 400 for an unknown validation type
    """
    if validation_type == ALL_PASSES:
        return default_passes()
    pass_class = PASSES_BY_NAME.get(validation_type)
    if pass_class is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid validation type: {validation_type}",
        )
    return [pass_class()]


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("/validate-html", response_model=ValidateResponse, response_model_by_alias=True)
async def validate_html(
    request: ValidateRequest,
    make_pipeline: PipelineFactory = Depends(get_pipeline_factory),
):
    """
    Repair a posted document.

    **validationType** is one of the pass names (``markup``,
    ``style-tags``, ``cdn``, ``not-a-function``, ``css``,
    ``undefined-variables``, ``parentheses``, ``shader``) or ``all``.
    """
    if not request.html or not request.validation_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required parameters: html and validationType",
        )

    passes = resolve_passes(request.validation_type)
    try:
        report = await make_pipeline(passes).run(request.html)
    except Exception as e:
        logger.error(f"Failed to validate html: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}",
        )

    return ValidateResponse(
        success=True,
        validation_type=request.validation_type,
        errors=report.errors,
        fix_count=report.total_fixes,
        html=report.html,
    )
