from typing import Optional

import jwt
from bson import ObjectId
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shadeapi.core.errors import ApiError
from shadeapi.core.security import decode_access_token
from shadeapi.database import get_db

TOKEN_COOKIE = "token"

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    token = request.cookies.get(TOKEN_COOKIE) or (credentials.credentials if credentials else None)
    if not token:
        raise ApiError(401, "Not authenticated!")

    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise ApiError(401, "Token expired")
    except jwt.InvalidTokenError:
        raise ApiError(401, "Invalid access token")

    user_id = payload.get("_id")
    if not user_id or not ObjectId.is_valid(user_id):
        raise ApiError(401, "Invalid access token")

    db = get_db()
    user = await db["users"].find_one({"_id": ObjectId(user_id)})
    if not user:
        raise ApiError(401, "Invalid access token")
    return user


async def read_json_body(request: Request):
    """Raw JSON body; field validation is left to the service layer."""
    try:
        return await request.json()
    except ValueError:
        raise ApiError(400, "Invalid JSON payload")
