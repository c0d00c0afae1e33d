from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from datetime import timedelta

from shadeapi.config import settings
from shadeapi.core.dependencies import TOKEN_COOKIE, get_current_user, read_json_body
from shadeapi.core.responses import ApiResponse, api_response
from shadeapi.core.security import create_access_token
from shadeapi.database import get_db
from shadeapi.schemas.api_schemas import LoginRequest, LoginResponse, UserResponse
from shadeapi.services.auth_service import authenticate_user, register_user

router = APIRouter(prefix="/api/auth", tags=["auth"])

COOKIE_MAX_AGE = int(timedelta(days=7).total_seconds())


def _issue_token(user: dict) -> str:
    return create_access_token(
        {"_id": str(user["_id"]), "email": user["email"], "role": user["role"]},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def _set_token_cookie(response: JSONResponse, token: str) -> None:
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _session_response(status_code: int, user: dict, message: str) -> JSONResponse:
    token = _issue_token(user)
    data = LoginResponse(user=UserResponse.from_document(user), token=token)
    response = api_response(status_code, data.model_dump(by_alias=True), message)
    _set_token_cookie(response, token)
    return response


@router.post("/signup", status_code=201, response_model=ApiResponse)
async def signup(request: Request):
    payload = await read_json_body(request)
    user = await register_user(get_db(), payload)
    return _session_response(201, user, "User account created successfully")


@router.post(
    "/login",
    response_model=ApiResponse,
    openapi_extra={
        "requestBody": {"content": {"application/json": {"schema": LoginRequest.model_json_schema()}}}
    },
)
async def login(request: Request):
    payload = await read_json_body(request)
    if not isinstance(payload, dict):
        payload = {}
    user = await authenticate_user(get_db(), payload.get("email"), payload.get("password"))
    return _session_response(200, user, "Login successful")


@router.post("/logout", response_model=ApiResponse)
async def logout():
    response = api_response(200, None, "Logout successful")
    response.delete_cookie(
        TOKEN_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return response


@router.get("/me", response_model=ApiResponse)
async def get_me(current_user: dict = Depends(get_current_user)):
    user = UserResponse.from_document(current_user)
    return api_response(200, user.model_dump(by_alias=True), "Current user fetched successfully")
