from typing import Any
import json
import logging

from shadeapi.core.errors import ResponseFormatError
from shadeapi.models.analysis_schemas import (
    FinalRecommendation,
    LAYER_FIELDS,
    RECOMMENDATION_KEY,
    ZONAL_FIELDS,
)

logger = logging.getLogger(__name__)


def _is_filled_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _missing(field: str) -> ResponseFormatError:
    return ResponseFormatError(f"Missing or invalid {field} in analysis response")


def _unwrap(parsed: dict) -> dict:
    # The model may or may not wrap its answer in the recommendation key
    wrapped = parsed.get(RECOMMENDATION_KEY)
    if isinstance(wrapped, dict):
        return wrapped
    return parsed


def _check_zonal_analysis(zones: Any) -> None:
    if not isinstance(zones, list) or not zones:
        raise _missing("zonal_analysis")

    for index, entry in enumerate(zones):
        if not isinstance(entry, dict):
            raise ResponseFormatError(
                f"Invalid zonal_analysis structure in response: entry {index} is not an object"
            )
        for field in ZONAL_FIELDS:
            if not _is_filled_string(entry.get(field)):
                raise ResponseFormatError(
                    f"Invalid zonal_analysis structure in response: entry {index} missing {field}"
                )


def _check_layered_recommendation(layered: Any) -> None:
    if not isinstance(layered, dict):
        raise _missing("layered_recommendation")

    for field in LAYER_FIELDS:
        if not _is_filled_string(layered.get(field)):
            raise ResponseFormatError(
                f"Invalid layered_recommendation structure in response: missing {field}"
            )


def parse_analysis_response(raw_response: str) -> FinalRecommendation:
    """
    Turn the model's raw text into a trusted FinalRecommendation.

    Parsing is strict: the text must be a JSON object and every required field
    must be present at every level. The first problem found raises
    ResponseFormatError naming the field. Accepted values are passed through
    unchanged.
    """
    try:
        parsed = json.loads(raw_response)
    except (TypeError, ValueError, RecursionError):
        logger.warning(f"Analysis response is not JSON: {str(raw_response)[:200]!r}")
        raise ResponseFormatError("Failed to parse analysis response: Invalid JSON format")

    if not isinstance(parsed, dict):
        raise ResponseFormatError()

    payload = _unwrap(parsed)

    if not _is_filled_string(payload.get("estimated_tooth_type")):
        raise _missing("estimated_tooth_type")
    _check_zonal_analysis(payload.get("zonal_analysis"))
    if not _is_filled_string(payload.get("general_suggestion")):
        raise _missing("general_suggestion")
    _check_layered_recommendation(payload.get("layered_recommendation"))

    return FinalRecommendation.model_validate(payload)
