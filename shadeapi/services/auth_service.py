from typing import Any, List, Mapping
import logging
import re

from pydantic import EmailStr, TypeAdapter, ValidationError
from pymongo.errors import DuplicateKeyError

from shadeapi.core.errors import ApiError, ClientValidationError
from shadeapi.core.security import get_password_hash, verify_password
from shadeapi.models.analysis_schemas import ValidationResult
from shadeapi.models.database_models import User, UserRole
from shadeapi.schemas.api_schemas import SignupRequest

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 8
MAX_PERSON_NAME_LENGTH = 50
SPECIAL_CHAR_REGEX = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: Any) -> bool:
    if not isinstance(email, str) or not email.strip():
        return False
    try:
        _email_adapter.validate_python(normalize_email(email))
    except ValidationError:
        return False
    return True


def validate_password_strength(password: Any) -> List[str]:
    if not isinstance(password, str) or not password:
        return ["Password is required"]

    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not SPECIAL_CHAR_REGEX.search(password):
        errors.append("Password must contain at least one special character")
    return errors


def _name_errors(value: Any, label: str) -> List[str]:
    if not isinstance(value, str) or not value.strip():
        return [f"{label} is required"]
    if len(value.strip()) > MAX_PERSON_NAME_LENGTH:
        return [f"{label} cannot exceed {MAX_PERSON_NAME_LENGTH} characters"]
    return []


def validate_signup_data(data: Any) -> ValidationResult:
    """Collect every problem with a signup body; never raises."""
    if not isinstance(data, Mapping):
        data = {}

    errors: List[str] = []
    errors.extend(_name_errors(data.get("firstName"), "First name"))
    errors.extend(_name_errors(data.get("lastName"), "Last name"))

    email = data.get("email")
    if not isinstance(email, str) or not email.strip():
        errors.append("Email is required")
    elif not is_valid_email(email):
        errors.append("Please provide a valid email address")

    errors.extend(validate_password_strength(data.get("password")))

    role = data.get("role")
    if not role:
        errors.append("Role is required")
    elif role not in [r.value for r in UserRole]:
        errors.append('Role must be either "patient" or "doctor"')

    return ValidationResult(is_valid=not errors, errors=errors)


async def register_user(db, payload: Any) -> dict:
    """Validate, hash and store a new account. Returns the stored document."""
    validation = validate_signup_data(payload)
    if not validation.is_valid:
        raise ClientValidationError("Validation failed", validation.errors)

    signup = SignupRequest(
        email=normalize_email(payload["email"]),
        password=payload["password"],
        role=payload["role"],
        firstName=payload["firstName"].strip(),
        lastName=payload["lastName"].strip(),
    )

    if await db["users"].find_one({"email": signup.email}):
        raise ApiError(409, "User with this email already exists")

    user_doc = User(
        email=signup.email,
        password=get_password_hash(signup.password),
        role=signup.role,
        firstName=signup.firstName,
        lastName=signup.lastName,
    ).model_dump()

    try:
        result = await db["users"].insert_one(user_doc)
    except DuplicateKeyError:
        # Lost a race with a concurrent signup for the same email
        raise ApiError(409, "User with this email already exists")

    user_doc["_id"] = result.inserted_id
    logger.info(f"Registered new user: {signup.email} (role: {user_doc['role']})")
    return user_doc


async def authenticate_user(db, email: Any, password: Any) -> dict:
    if not email or not password:
        raise ApiError(400, "Email and password are required")

    user = await db["users"].find_one({"email": normalize_email(str(email))})
    if not user or not verify_password(str(password), user["password"]):
        raise ApiError(401, "Invalid email or password")
    return user
