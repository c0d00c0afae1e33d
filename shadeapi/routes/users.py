from fastapi import APIRouter, Request

from shadeapi.core.responses import ApiResponse, api_response
from shadeapi.database import get_db
from shadeapi.core.dependencies import read_json_body
from shadeapi.schemas.api_schemas import UserResponse
from shadeapi.services.auth_service import register_user

router = APIRouter(prefix="/api/users", tags=["users"])

@router.post("/signup", status_code=201, response_model=ApiResponse)
async def signup(request: Request):
    """Create an account without opening a session (no token, no cookie)."""
    payload = await read_json_body(request)
    user = await register_user(get_db(), payload)
    data = UserResponse.from_document(user).model_dump(by_alias=True)
    return api_response(201, data, "User account created successfully")
