from fastapi import APIRouter, Depends, Request

from shadeapi.core.responses import ApiResponse, api_response
from shadeapi.core.dependencies import read_json_body
from shadeapi.models.analysis_schemas import AnalysisResponse
from shadeapi.services.analysis_service import AnalysisService, get_analysis_service

router = APIRouter(prefix="/api/analysis", tags=["analysis"])

@router.post("/analyze", response_model=ApiResponse)
async def analyze_tooth_shade(
    request: Request,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Analyze two tooth images and return VITA shade recommendations.

    The raw body is validated field by field so that every problem is
    reported at once; errors surface through the global ApiError handler.
    """
    payload = await read_json_body(request)
    record = await service.analyze(payload)
    return api_response(
        200,
        AnalysisResponse(record=record).model_dump(exclude_unset=True),
        "Tooth shade analysis completed successfully",
    )
