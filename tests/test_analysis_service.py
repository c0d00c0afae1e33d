import json
import re
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from shadeapi.core.errors import (
    ClientValidationError,
    InternalError,
    ResponseFormatError,
    ServiceAuthError,
    ServiceUnavailable,
)
from shadeapi.models.analysis_schemas import AnalysisRequest
from shadeapi.services.analysis_service import (
    AnalysisService,
    create_analysis_record,
    generate_record_id,
)
from shadeapi.services.response_parser import parse_analysis_response

from fakes import FakeModelClient, MODEL_REPLY


@pytest.mark.asyncio
async def test_successful_pipeline_returns_record(analysis_payload):
    model = FakeModelClient()
    record = await AnalysisService(model).analyze(analysis_payload)

    assert record.analysis.final_recommendation.estimated_tooth_type == "Canine"
    assert record.dentistName == "Dr. Lee"
    assert record.toothImage1 == analysis_payload["toothImage1"]
    assert record.toothImage2 == analysis_payload["toothImage2"]

    (call,) = model.calls
    assert call.image1 == analysis_payload["toothImage1"]
    assert call.image2 == analysis_payload["toothImage2"]
    assert "- Name: Dr. Lee" in call.prompt


@pytest.mark.asyncio
async def test_validation_failure_never_reaches_the_model(analysis_payload):
    analysis_payload["dentistName"] = ""
    analysis_payload["toothImage2"] = "data:image/gif;base64,xx"
    model = FakeModelClient()

    with pytest.raises(ClientValidationError) as exc_info:
        await AnalysisService(model).analyze(analysis_payload)

    assert exc_info.value.status_code == 400
    assert "Dentist name is required" in exc_info.value.errors
    assert any(e.startswith("toothImage2") for e in exc_info.value.errors)
    assert model.calls == []


@pytest.mark.asyncio
async def test_non_json_reply_is_format_error(analysis_payload):
    with pytest.raises(ResponseFormatError) as exc_info:
        await AnalysisService(FakeModelClient(reply="not json")).analyze(analysis_payload)
    assert exc_info.value.status_code == 500
    assert "Invalid JSON format" in exc_info.value.message


@pytest.mark.asyncio
async def test_authentication_rejection_is_401(analysis_payload):
    model = FakeModelClient(error=Exception("Error code: 401 - No auth credentials found"))
    with pytest.raises(ServiceAuthError) as exc_info:
        await AnalysisService(model).analyze(analysis_payload)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_classified_errors_are_not_wrapped_twice(analysis_payload):
    original = ServiceUnavailable()
    with pytest.raises(ServiceUnavailable) as exc_info:
        await AnalysisService(FakeModelClient(error=original)).analyze(analysis_payload)
    assert exc_info.value is original


@pytest.mark.asyncio
async def test_unexpected_error_becomes_internal_error(analysis_payload):
    model = FakeModelClient(error=RuntimeError("something odd"))
    with pytest.raises(InternalError) as exc_info:
        await AnalysisService(model).analyze(analysis_payload)
    assert exc_info.value.status_code == 500
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def _recommendation():
    return parse_analysis_response(json.dumps(MODEL_REPLY))


def test_record_trims_metadata_and_keeps_images_verbatim():
    request = AnalysisRequest(
        dentistName="  Dr. Lee ",
        dentistMobileNumber=" +1234567890 ",
        patientName="  Jane  ",
        toothImage1=" data-uri-1",
        toothImage2="data-uri-2 ",
    )
    record = create_analysis_record(request, _recommendation())

    assert record.dentistName == "Dr. Lee"
    assert record.dentistMobileNumber == "+1234567890"
    assert record.patientName == "Jane"
    assert record.toothImage1 == " data-uri-1"
    assert record.toothImage2 == "data-uri-2 "


@pytest.mark.parametrize("patient", [None, "", "   "])
def test_record_omits_absent_patient_name(patient):
    request = AnalysisRequest(
        dentistName="Dr. Lee",
        dentistMobileNumber="+1234567890",
        patientName=patient,
        toothImage1="a",
        toothImage2="b",
    )
    body = create_analysis_record(request, _recommendation()).to_response()
    assert "patientName" not in body
    assert body["analysis"]["final_recommendation"]["estimated_tooth_type"] == "Canine"


def test_record_id_and_timestamp_format():
    request = AnalysisRequest(
        dentistName="Dr. Lee", dentistMobileNumber="+1", toothImage1="a", toothImage2="b"
    )
    before = datetime.now(timezone.utc)
    record = create_analysis_record(request, _recommendation())

    assert re.fullmatch(r"analysis_\d{13}_[0-9a-z]{9}", record.id)
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", record.date)
    stamped = datetime.fromisoformat(record.date.replace("Z", "+00:00"))
    assert stamped >= before.replace(microsecond=before.microsecond // 1000 * 1000)


def test_record_is_immutable():
    request = AnalysisRequest(
        dentistName="Dr. Lee", dentistMobileNumber="+1", toothImage1="a", toothImage2="b"
    )
    record = create_analysis_record(request, _recommendation())
    with pytest.raises(ValidationError):
        record.dentistName = "someone else"


def test_generated_ids_embed_the_timestamp():
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert generate_record_id(moment).startswith(f"analysis_{int(moment.timestamp() * 1000)}_")


@pytest.mark.asyncio
async def test_deeply_nested_reply_is_a_format_error(analysis_payload):
    model = FakeModelClient(reply='{"a":' * 50000)
    with pytest.raises(ResponseFormatError) as exc_info:
        await AnalysisService(model).analyze(analysis_payload)
    assert exc_info.value.status_code == 500
    assert "Invalid JSON format" in exc_info.value.message
