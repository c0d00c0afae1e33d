from typing import Any, List, Mapping
import re

from shadeapi.models.analysis_schemas import ValidationResult

PHONE_REGEX = re.compile(r"^\+?[1-9]\d{0,15}$")
DATA_URI_REGEX = re.compile(r"^data:image/(jpeg|jpg|png|webp);base64,")
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MIN_IMAGE_PAYLOAD_LENGTH = 100


def _is_present(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def validate_dentist_name(name: Any) -> List[str]:
    if not _is_present(name):
        return ["Dentist name is required"]

    errors = []
    trimmed = name.strip()
    if len(trimmed) < MIN_NAME_LENGTH:
        errors.append(f"Dentist name must be at least {MIN_NAME_LENGTH} characters long")
    if len(trimmed) > MAX_NAME_LENGTH:
        errors.append(f"Dentist name must not exceed {MAX_NAME_LENGTH} characters")
    return errors


def validate_mobile_number(mobile: Any) -> List[str]:
    if not _is_present(mobile):
        return ["Dentist mobile number is required"]

    if not PHONE_REGEX.match(mobile.strip()):
        return ["Please provide a valid mobile number"]
    return []


def validate_patient_name(name: Any) -> List[str]:
    if name is None:
        return []
    if not isinstance(name, str):
        return ["Patient name must be a string"]
    if len(name.strip()) > MAX_NAME_LENGTH:
        return [f"Patient name must not exceed {MAX_NAME_LENGTH} characters"]
    return []


def validate_image_data_uri(image_data: Any, field_name: str) -> List[str]:
    """
    Heuristic check of an embedded image: the data URI prefix must name a
    supported MIME type and the base64 part must not be trivially short.
    The payload is not decoded.
    """
    if not _is_present(image_data):
        return [f"{field_name} is required"]

    errors = []
    if not DATA_URI_REGEX.match(image_data):
        errors.append(f"{field_name} must be a valid image data URI (jpeg, jpg, png, or webp)")

    _, _, payload = image_data.partition(",")
    if len(payload.split(",")[0]) < MIN_IMAGE_PAYLOAD_LENGTH:
        errors.append(f"{field_name} appears to contain invalid or insufficient image data")
    return errors


def validate_analysis_request(data: Any) -> ValidationResult:
    """
    Validate a raw analysis request body.

    Never raises: every problem is collected, in field order, so the client
    can fix all of them in one round trip.
    """
    if not isinstance(data, Mapping):
        data = {}

    errors: List[str] = []
    errors.extend(validate_dentist_name(data.get("dentistName")))
    errors.extend(validate_mobile_number(data.get("dentistMobileNumber")))
    errors.extend(validate_patient_name(data.get("patientName")))
    errors.extend(validate_image_data_uri(data.get("toothImage1"), "toothImage1"))
    errors.extend(validate_image_data_uri(data.get("toothImage2"), "toothImage2"))

    return ValidationResult(is_valid=not errors, errors=errors)
