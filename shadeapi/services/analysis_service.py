from typing import Any, Optional
from datetime import datetime, timezone
import logging
import random
import string
import time

from shadeapi.core.errors import ApiError, ClientValidationError, classify_error
from shadeapi.models.analysis_schemas import (
    AnalysisRecord,
    AnalysisRequest,
    AnalysisResult,
    FinalRecommendation,
)
from shadeapi.services.model_client import ShadeModelClient
from shadeapi.services.prompt_builder import build_analysis_prompt
from shadeapi.services.request_validator import validate_analysis_request
from shadeapi.services.response_parser import parse_analysis_response

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_record_id(now: Optional[datetime] = None) -> str:
    """
    Time-based id with a short random suffix.
    Collisions are possible but unlikely; nothing checks for them.
    """
    now = now or datetime.now(timezone.utc)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"analysis_{int(now.timestamp() * 1000)}_{suffix}"


def isoformat_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_analysis_record(request: AnalysisRequest, analysis: FinalRecommendation) -> AnalysisRecord:
    now = datetime.now(timezone.utc)
    fields = {
        "id": generate_record_id(now),
        "dentistName": request.dentistName.strip(),
        "dentistMobileNumber": request.dentistMobileNumber.strip(),
        "toothImage1": request.toothImage1,
        "toothImage2": request.toothImage2,
        "date": isoformat_utc(now),
        "analysis": AnalysisResult(final_recommendation=analysis),
    }
    # Only add patientName if it exists
    if request.patientName and request.patientName.strip():
        fields["patientName"] = request.patientName.strip()

    return AnalysisRecord(**fields)


class AnalysisService:
    def __init__(self, model_client: ShadeModelClient):
        self.model_client = model_client

    async def analyze(self, payload: Any) -> AnalysisRecord:
        """
        Run one tooth shade analysis end to end.

        Invalid input is rejected before the model is called. Any other
        failure is classified once here and re-raised as a single ApiError.
        """
        validation = validate_analysis_request(payload)
        if not validation.is_valid:
            logger.info(f"Analysis request rejected: {len(validation.errors)} validation error(s)")
            raise ClientValidationError("Validation failed", validation.errors)

        request = AnalysisRequest(
            dentistName=payload["dentistName"],
            dentistMobileNumber=payload["dentistMobileNumber"],
            patientName=payload.get("patientName"),
            toothImage1=payload["toothImage1"],
            toothImage2=payload["toothImage2"],
        )

        start_time = time.perf_counter()
        try:
            prompt = build_analysis_prompt(request)
            raw_response = await self.model_client.complete(
                prompt, request.toothImage1, request.toothImage2
            )
            recommendation = parse_analysis_response(raw_response)
            record = create_analysis_record(request, recommendation)
        except ApiError as e:
            logger.error(f"Tooth analysis failed: {e.status_code} {e.message}")
            raise
        except Exception as e:
            error = classify_error(e)
            logger.exception(f"Unexpected error during tooth analysis -> {error.status_code}")
            raise error from e

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Analysis Complete: record={record.id}, "
            f"tooth_type={recommendation.estimated_tooth_type}, "
            f"time={execution_time_ms:.2f}ms"
        )
        return record


_analysis_service: Optional[AnalysisService] = None

def get_analysis_service() -> AnalysisService:
    global _analysis_service
    if _analysis_service is None:
        _analysis_service = AnalysisService(ShadeModelClient.from_settings())
    return _analysis_service
